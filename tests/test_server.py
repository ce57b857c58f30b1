import cupscoring.server as server


def test_port_defaults(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    assert server._port() == 8000


def test_port_prefers_app_port(monkeypatch):
    monkeypatch.setenv("APP_PORT", "9100")
    monkeypatch.setenv("PORT", "9200")
    assert server._port() == 9100


def test_bad_port_falls_back(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.setenv("PORT", "eighty")
    assert server._port() == 8000


def test_main_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setenv("APP_PORT", "9100")
    monkeypatch.setattr(server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    server.main()
    assert calls[0][0] == "cupscoring.main:app"
    assert calls[0][1]["port"] == 9100
