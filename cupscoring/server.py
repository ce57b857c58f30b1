import logging
import os

import uvicorn

from cupscoring.settings import load_settings

logger = logging.getLogger(__name__)
APP_MODULE = "cupscoring.main:app"
DEFAULT_PORT = 8000


def _port() -> int:
    raw = os.getenv("APP_PORT") or os.getenv("PORT")
    if not raw:
        return DEFAULT_PORT
    if not raw.strip().isdigit():
        logger.warning("Port %r is not a number, serving on %s", raw, DEFAULT_PORT)
        return DEFAULT_PORT
    return int(raw)


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = _port()
    logger.info("Serving standings on %s:%s", host, port)
    uvicorn.run(
        APP_MODULE,
        host=host,
        port=port,
        log_level=logging.getLevelName(settings.log_level).lower(),
    )


if __name__ == "__main__":
    main()
