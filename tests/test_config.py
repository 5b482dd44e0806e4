# tests/test_config.py
import logging

from everest_speak.config import DEFAULT_MISSION_COUNT, load_settings, setup_logging
from everest_speak.db import DEFAULT_DB_PATH


def test_defaults():
    settings = load_settings({})
    assert settings.db_path == DEFAULT_DB_PATH
    assert settings.catalog_path is None
    assert settings.mission_count == DEFAULT_MISSION_COUNT
    assert settings.log_level == "WARNING"


def test_environment_overrides(tmp_path):
    settings = load_settings({
        "EVEREST_DB_PATH": str(tmp_path / "x.db"),
        "EVEREST_CATALOG": "phrases.csv",
        "EVEREST_MISSION_COUNT": "2",
        "EVEREST_LOG_LEVEL": "debug",
    })
    assert settings.db_path == str(tmp_path / "x.db")
    assert settings.catalog_path == "phrases.csv"
    assert settings.mission_count == 2
    assert settings.log_level == "DEBUG"


def test_bad_values_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        settings = load_settings({"EVEREST_MISSION_COUNT": "five", "EVEREST_LOG_LEVEL": "LOUD"})
    assert settings.mission_count == DEFAULT_MISSION_COUNT
    assert settings.log_level == "WARNING"
    assert "EVEREST_MISSION_COUNT" in caplog.text


def test_mission_count_outside_deployment_values():
    assert load_settings({"EVEREST_MISSION_COUNT": "7"}).mission_count == DEFAULT_MISSION_COUNT


def test_setup_logging_installs_rich_handler():
    from rich.logging import RichHandler
    root = logging.getLogger()
    before = root.level
    try:
        setup_logging("INFO")
        setup_logging("INFO")
        assert root.level == logging.INFO
        assert sum(isinstance(h, RichHandler) for h in root.handlers) == 1
    finally:
        for h in [h for h in root.handlers if isinstance(h, RichHandler)]:
            root.removeHandler(h)
        root.setLevel(before)
