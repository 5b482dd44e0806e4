"""Daily mission selection and the device-local mission record."""
import json
import logging
from datetime import date

from everest_speak.config import DEFAULT_MISSION_COUNT, MAX_ATTEMPTS
from everest_speak.db import get_state, set_state
from everest_speak.models import MissionDay, MissionStatus, Phrase
from everest_speak.prng import SeededRandom

logger = logging.getLogger(__name__)

PHRASE_FIELDS = ("category", "situation", "source_text", "phonetic", "gloss", "phrase_id")


def daily_seed(day: date) -> str:
    return day.isoformat()


def select_missions(catalog: list[Phrase], seed: str, count: int) -> list[Phrase]:
    """Pick `count` phrases with a Fisher-Yates shuffle driven by the seeded generator.

    The caller must pass the catalog in a stable order: the same seed over a
    reordered catalog gives a different selection.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if not catalog:
        logger.warning("Phrase catalog is empty, no missions for seed %s", seed)
        return []
    if count > len(catalog):
        logger.warning("Requested %s missions but catalog has %s phrases, clamping", count, len(catalog))
        count = len(catalog)

    shuffled = list(catalog)
    rng = SeededRandom(seed)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled[:count]


def _state_key(user_id: int) -> str:
    return f"today_mission:{user_id}"


def _phrase_from_record(record: dict, catalog: list[Phrase]) -> Phrase:
    fields = {name: record.get(name) or "" for name in PHRASE_FIELDS}
    if not fields["phrase_id"]:
        # Older records carry no id: match by sentence text
        for phrase in catalog:
            if phrase.source_text == fields["source_text"]:
                return phrase
    return Phrase(**fields)


def load_mission_state(db_path: str, user_id: int, catalog: list[Phrase] = ()) -> MissionDay | None:
    raw = get_state(db_path, _state_key(user_id))
    if not raw:
        return None
    try:
        data = json.loads(raw)
        statuses = [
            MissionStatus(
                phrase=_phrase_from_record(m, catalog),
                attempts=int(m.get("attempts", 0)),
                completed=bool(m.get("completed", False)),
                max_attempts=MAX_ATTEMPTS,
            )
            for m in data["missions"]
        ]
        return MissionDay(date=data["date"], statuses=statuses)
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("Discarding unreadable mission record for user %s: %s", user_id, exc)
        return None


def save_mission_state(db_path: str, user_id: int, mission_day: MissionDay) -> None:
    set_state(db_path, _state_key(user_id), json.dumps(mission_day.to_dict(), ensure_ascii=False))


def get_todays_missions(
    db_path: str,
    user_id: int,
    catalog: list[Phrase],
    today: date = None,
    count: int = DEFAULT_MISSION_COUNT,
) -> MissionDay:
    """Return today's missions, reusing the stored record only when its date is today.

    A day with no missions (empty catalog) is never stored, so a catalog that
    becomes available later the same day still yields missions.
    """
    today = today or date.today()
    seed = daily_seed(today)
    stored = load_mission_state(db_path, user_id, catalog)
    if stored is not None and stored.date == seed and stored.statuses:
        return stored
    phrases = select_missions(catalog, seed, count)
    mission_day = MissionDay(date=seed, statuses=[MissionStatus(phrase=p) for p in phrases])
    if mission_day.statuses:
        save_mission_state(db_path, user_id, mission_day)
    logger.info("Generated %s missions for user %s on %s", len(phrases), user_id, seed)
    return mission_day
