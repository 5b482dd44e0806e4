"""Runtime settings and logging setup."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from rich.logging import RichHandler

from everest_speak.db import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

REWARD_POINTS = 150
MAX_ATTEMPTS = 2
DEFAULT_MISSION_COUNT = 3
MONTHLY_TEST_SIZE = 10
MONTHLY_PASS_SCORE = 70
ALLOWED_MISSION_COUNTS = (2, 3)


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    catalog_path: Optional[str] = None
    mission_count: int = DEFAULT_MISSION_COUNT
    log_level: str = "WARNING"


def _mission_count(raw: str | None) -> int:
    if raw is None or raw == "":
        return DEFAULT_MISSION_COUNT
    try:
        value = int(raw)
    except ValueError:
        logger.warning("EVEREST_MISSION_COUNT=%r is not a number, using %s", raw, DEFAULT_MISSION_COUNT)
        return DEFAULT_MISSION_COUNT
    if value not in ALLOWED_MISSION_COUNTS:
        logger.warning("EVEREST_MISSION_COUNT=%s is not one of %s, using %s",
                       value, ALLOWED_MISSION_COUNTS, DEFAULT_MISSION_COUNT)
        return DEFAULT_MISSION_COUNT
    return value


def load_settings(environ=None) -> Settings:
    """Build settings from EVEREST_* environment variables."""
    env = os.environ if environ is None else environ
    level = env.get("EVEREST_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown EVEREST_LOG_LEVEL %r, using WARNING", level)
        level = "WARNING"
    return Settings(
        db_path=env.get("EVEREST_DB_PATH") or DEFAULT_DB_PATH,
        catalog_path=env.get("EVEREST_CATALOG") or None,
        mission_count=_mission_count(env.get("EVEREST_MISSION_COUNT")),
        log_level=level,
    )


def setup_logging(level: str = "WARNING") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
