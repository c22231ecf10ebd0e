import logging

import pytest
from pydantic import ValidationError

from jamf_objects.config.settings import Settings, get_settings, reset_settings
from jamf_objects.utils.telemetry import get_tracer, setup_logging


def test_defaults():
    settings = Settings()
    assert settings.jamf_url == ""
    assert settings.jamf_timeout == 30.0
    assert settings.jamf_verify_ssl is True
    assert settings.scope_data_loss_warnings is True
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("JAMF_URL", "https://jamf.example.com")
    monkeypatch.setenv("JAMF_TIMEOUT", "5")
    monkeypatch.setenv("SCOPE_DATA_LOSS_WARNINGS", "false")
    settings = Settings()
    assert settings.jamf_url == "https://jamf.example.com"
    assert settings.jamf_timeout == 5.0
    assert settings.scope_data_loss_warnings is False


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "CHATTY")
    with pytest.raises(ValidationError):
        Settings()


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first
    monkeypatch.setenv("JAMF_URL", "https://changed.example.com")
    assert get_settings().jamf_url == first.jamf_url
    reset_settings()
    assert get_settings().jamf_url == "https://changed.example.com"


def test_setup_logging_returns_package_logger():
    logger = setup_logging("DEBUG")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "jamf_objects"


def test_tracer_spans_work_without_an_sdk():
    tracer = get_tracer("tests")
    with tracer.start_as_current_span("jamf.request") as span:
        span.set_attribute("http.method", "GET")
