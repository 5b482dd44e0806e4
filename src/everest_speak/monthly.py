"""Month-end review test built from the month's replayed daily missions."""
import logging
import random
from datetime import date, timedelta

from everest_speak.config import DEFAULT_MISSION_COUNT, MAX_ATTEMPTS, MONTHLY_PASS_SCORE, MONTHLY_TEST_SIZE
from everest_speak.grader import grade_transcript, is_pass
from everest_speak.missions import daily_seed, select_missions
from everest_speak.models import Phrase

logger = logging.getLogger(__name__)


def is_last_day_of_month(today: date) -> bool:
    return (today + timedelta(days=1)).day == 1


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def build_monthly_pool(catalog: list[Phrase], today: date, count: int = DEFAULT_MISSION_COUNT) -> list[Phrase]:
    """Union of every earlier day's missions this month, first-seen order, no duplicates.

    Assumes the catalog is the same one those days were drawn from.
    """
    pool = []
    seen = set()
    day = today.replace(day=1)
    while day < today:
        for phrase in select_missions(catalog, daily_seed(day), count):
            if phrase.identity not in seen:
                seen.add(phrase.identity)
                pool.append(phrase)
        day += timedelta(days=1)
    return pool


def sample_test(pool: list[Phrase], size: int = MONTHLY_TEST_SIZE, rng: random.Random = None) -> list[Phrase]:
    """Draw the test questions. Not seeded: users may get different tests."""
    if len(pool) < size:
        logger.warning("Monthly pool has only %s phrases, test will have %s questions instead of %s",
                       len(pool), len(pool), size)
        size = len(pool)
    return (rng or random).sample(pool, size)


class MonthlyTest:
    """One sitting of the monthly test; each question allows MAX_ATTEMPTS tries."""

    def __init__(self, questions: list[Phrase], month: str, max_attempts: int = MAX_ATTEMPTS):
        self.questions = list(questions)
        self.month = month
        self.max_attempts = max_attempts
        self.attempts = [0] * len(self.questions)
        self.correct = [False] * len(self.questions)

    def is_open(self, index: int) -> bool:
        return not self.correct[index] and self.attempts[index] < self.max_attempts

    def answer(self, index: int, transcript: str) -> bool:
        """Grade one attempt at question `index`; returns True when it passes."""
        if not self.is_open(index):
            return self.correct[index]
        self.attempts[index] += 1
        passed = is_pass(grade_transcript(transcript, self.questions[index].source_text))
        self.correct[index] = passed
        return passed

    @property
    def finished(self) -> bool:
        return not any(self.is_open(i) for i in range(len(self.questions)))

    @property
    def score(self) -> float:
        if not self.questions:
            return 0.0
        return round(sum(self.correct) / len(self.questions) * 100, 1)

    @property
    def passed(self) -> bool:
        return self.score >= MONTHLY_PASS_SCORE

    @property
    def result(self) -> str:
        return "PASS" if self.passed else "FAIL"

    def submit(self, ledger, user_id: int) -> dict:
        return ledger.save_test_result(user_id, self.score, self.result, self.month)


def build_monthly_test(
    catalog: list[Phrase],
    today: date,
    count: int = DEFAULT_MISSION_COUNT,
    size: int = MONTHLY_TEST_SIZE,
    rng: random.Random = None,
) -> MonthlyTest:
    pool = build_monthly_pool(catalog, today, count)
    return MonthlyTest(sample_test(pool, size, rng), month_key(today))
