import logging

from config import Settings, load_settings
from logging_utils import configure_logging


def test_load_settings_defaults():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.port == 8000
    assert settings.log_level == "INFO"


def test_load_settings_from_environment():
    settings = load_settings({
        "SETTLEUP_APP_TITLE": "Trip ledger",
        "SETTLEUP_PORT": "9001",
        "SETTLEUP_LOG_LEVEL": " debug ",
        "SETTLEUP_HOST": "",
        "UNRELATED": "ignored",
    })

    assert settings.app_title == "Trip ledger"
    assert settings.port == 9001
    assert settings.log_level == "debug"
    assert settings.host == "0.0.0.0"


def test_configure_logging_keeps_existing_handlers():
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        before = list(root.handlers)
        configure_logging("DEBUG")
        assert root.handlers == before
    finally:
        root.removeHandler(handler)
