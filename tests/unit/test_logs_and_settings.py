import json
import logging
import sys
from importlib import reload

import src.config.settings as settings
from src.monitoring.logs import JsonFormatter, configure_logging


def test_json_formatter_shape():
    rec = logging.LogRecord("reclutamiento.api", logging.WARNING, __file__, 1, "vacante %s", ("v1",), None)
    rec.candidate_id = "c9"
    data = json.loads(JsonFormatter().format(rec))
    assert data["level"] == "WARNING"
    assert data["message"] == "vacante v1"
    assert data["logger"] == "reclutamiento.api"
    assert data["candidate_id"] == "c9"
    assert "vacancy_id" not in data
    assert "ts" in data


def test_json_formatter_includes_traceback():
    try:
        raise RuntimeError("sin conexión")
    except RuntimeError:
        rec = logging.LogRecord("x", logging.ERROR, __file__, 1, "fallo", None, sys.exc_info())
    data = json.loads(JsonFormatter().format(rec))
    assert "RuntimeError: sin conexión" in data["error"]


def test_configure_logging_returns_named_logger():
    logger = configure_logging("DEBUG")
    assert logger.name == "reclutamiento"
    assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


def test_settings_env_overrides_and_bad_values(monkeypatch):
    monkeypatch.setenv("MIN_CV_TEXT_LEN", "50")
    monkeypatch.setenv("HTTP_TIMEOUT", "abc")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://rh.example.com/")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.com, http://b.com")
    reload(settings)
    try:
        assert settings.MIN_CV_TEXT_LEN == 50
        assert settings.HTTP_TIMEOUT == 30.0
        assert settings.PUBLIC_BASE_URL == "https://rh.example.com"
        assert settings.ALLOWED_ORIGINS == ["http://a.com", "http://b.com"]
        assert settings.SPEECH_LANGUAGE == "es-ES"
    finally:
        monkeypatch.undo()
        reload(settings)
