"""Per-session context handed to the mission selector and tracker."""
from dataclasses import dataclass, field
from datetime import date

from everest_speak.config import DEFAULT_MISSION_COUNT
from everest_speak.missions import get_todays_missions, save_mission_state
from everest_speak.models import MissionDay, MissionStatus, Phrase


@dataclass
class SessionContext:
    db_path: str
    user_id: int
    catalog: list[Phrase]
    today: date = field(default_factory=date.today)
    mission_count: int = DEFAULT_MISSION_COUNT
    mission_day: MissionDay = None

    @property
    def statuses(self) -> list[MissionStatus]:
        return self.mission_day.statuses if self.mission_day else []

    def status_for(self, phrase: Phrase) -> MissionStatus | None:
        for status in self.statuses:
            if status.phrase.identity == phrase.identity:
                return status
        # Fall back to text matching for phrases built without an id
        for status in self.statuses:
            if status.phrase.source_text == phrase.source_text:
                return status
        return None

    def refresh(self) -> MissionDay:
        """Load today's missions, regenerating them when the day has changed."""
        self.mission_day = get_todays_missions(
            self.db_path, self.user_id, self.catalog, today=self.today, count=self.mission_count,
        )
        return self.mission_day

    def persist(self) -> None:
        if self.mission_day is not None:
            save_mission_state(self.db_path, self.user_id, self.mission_day)


def open_session(
    db_path: str,
    user_id: int,
    catalog: list[Phrase],
    today: date = None,
    mission_count: int = DEFAULT_MISSION_COUNT,
) -> SessionContext:
    session = SessionContext(
        db_path=db_path,
        user_id=user_id,
        catalog=catalog,
        today=today or date.today(),
        mission_count=mission_count,
    )
    session.refresh()
    return session
