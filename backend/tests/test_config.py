import logging

import pytest
from pydantic import ValidationError

from combattracker.config import DEFAULT_SETTINGS, ClockSettings, TrackerSettings
from combattracker.log_config import setup_logging


def test_defaults():
    assert DEFAULT_SETTINGS.clock.warning_seconds == 15
    assert DEFAULT_SETTINGS.clock.critical_seconds == 5
    assert DEFAULT_SETTINGS.round_time_limit is None


def test_from_env_overrides():
    settings = TrackerSettings.from_env(
        {
            "COMBAT_WARNING_SECONDS": "20",
            "COMBAT_CRITICAL_SECONDS": "8",
            "COMBAT_ROUND_TIME_LIMIT": "90",
            "COMBAT_LOG_LEVEL": "debug",
        }
    )

    assert settings.clock == ClockSettings(warning_seconds=20, critical_seconds=8)
    assert settings.round_time_limit == 90
    assert settings.log_level == "DEBUG"


def test_from_env_empty_uses_defaults():
    assert TrackerSettings.from_env({}) == TrackerSettings()


def test_critical_above_warning_is_rejected():
    with pytest.raises(ValidationError):
        ClockSettings(warning_seconds=5, critical_seconds=10)

    with pytest.raises(ValidationError):
        TrackerSettings.from_env({"COMBAT_ROUND_TIME_LIMIT": "0"})


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    log_file = tmp_path / "logs" / "combat.log"

    setup_logging("debug", str(log_file))
    logger = setup_logging("debug", str(log_file))

    assert logger.name == "combattracker"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("combattracker.core.clock").debug("tick")
    for h in logger.handlers:
        h.flush()
    assert "tick" in log_file.read_text()

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)


def test_setup_logging_level_from_settings():
    logger = setup_logging(settings=TrackerSettings(log_level="WARNING"))

    assert logger.level == logging.WARNING

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
