"""Data classes for the phrase practice domain model."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from everest_speak.config import MAX_ATTEMPTS


@dataclass(frozen=True)
class Phrase:
    category: str
    situation: str
    source_text: str
    phonetic: str = ""
    gloss: str = ""
    phrase_id: str = ""

    @property
    def identity(self) -> str:
        """Stable key for mission and ledger tracking; text when no id was minted."""
        return self.phrase_id or self.source_text

    def to_dict(self) -> dict:
        return asdict(self)


class MissionState(str, Enum):
    READY = "ready"
    COMPLETED = "completed"
    LOCKED = "locked"


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"
    LOCKED = "locked"


@dataclass
class MissionStatus:
    phrase: Phrase
    attempts: int = 0
    completed: bool = False
    max_attempts: int = MAX_ATTEMPTS

    @property
    def locked(self) -> bool:
        return not self.completed and self.attempts >= self.max_attempts

    @property
    def state(self) -> MissionState:
        if self.completed:
            return MissionState.COMPLETED
        if self.locked:
            return MissionState.LOCKED
        return MissionState.READY

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)

    def to_dict(self) -> dict:
        data = self.phrase.to_dict()
        data["completed"] = self.completed
        data["attempts"] = self.attempts
        return data


@dataclass
class AttemptResult:
    outcome: Outcome
    accuracy: Optional[float] = None
    attempts_remaining: int = 0
    points: Optional[int] = None
    awarded: int = 0
    message: str = ""
    warning: Optional[str] = None


@dataclass
class User:
    id: int
    name: str
    branch_id: Optional[int] = None
    points: int = 0


@dataclass
class RewardLedgerEntry:
    user_id: int
    date: str
    accumulated_points: int


@dataclass
class MonthlyTestRecord:
    user_id: int
    month: str
    score: float
    result: str
    attempts: int = 1
    taken_at: Optional[str] = None


@dataclass
class MissionDay:
    """A day's mission set as persisted on the device."""
    date: str
    statuses: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"date": self.date, "missions": [s.to_dict() for s in self.statuses]}
