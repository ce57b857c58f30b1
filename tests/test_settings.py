import logging

import pytest

from cupscoring.settings import load_settings, point_table_for


def test_defaults(monkeypatch):
    for key in ("DATABASE_URL", "POINT_TABLE_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    settings = load_settings()
    assert settings.database_url == "postgresql://localhost/cupscoring"
    assert settings.log_level == logging.INFO
    assert point_table_for(settings).value("Bowl", "fri_pm_foursomes", "win") == 4


def test_heroku_style_database_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", " postgres://user:pw@db:5432/cup ")
    assert load_settings().database_url == "postgresql://user:pw@db:5432/cup"


def test_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_settings().log_level == logging.DEBUG
    monkeypatch.setenv("LOG_LEVEL", "loud")
    assert load_settings().log_level == logging.INFO


def test_missing_point_table_file(monkeypatch, tmp_path):
    monkeypatch.setenv("POINT_TABLE_PATH", str(tmp_path / "missing.json"))
    with pytest.raises(FileNotFoundError):
        point_table_for(load_settings())
