"""Reward ledger: users, point balances, mission logs and monthly test records."""
import logging
import sqlite3
from datetime import date, datetime

from werkzeug.security import check_password_hash, generate_password_hash

from everest_speak.config import REWARD_POINTS
from everest_speak.db import get_connection
from everest_speak.grader import grade_transcript, is_pass
from everest_speak.models import User

logger = logging.getLogger(__name__)

MISSION_RESULTS = ("success", "fail")
TEST_RESULTS = ("PASS", "FAIL")


class LedgerError(Exception):
    """Raised when the ledger rejects a request or can't be written."""


def create_user(db_path: str, name: str, branch_id: int = None, password: str = None) -> User:
    """Register a user. Only a salted hash of the password is stored."""
    pw_hash = generate_password_hash(password) if password else None
    conn = get_connection(db_path)
    try:
        cursor = conn.execute(
            "INSERT INTO users (name, branch_id, points, password_hash, created_at) VALUES (?, ?, 0, ?, ?)",
            (name, branch_id, pw_hash, datetime.now().isoformat()),
        )
        conn.commit()
    except sqlite3.IntegrityError as exc:
        raise LedgerError(f"Could not create user {name!r}: {exc}") from exc
    finally:
        conn.close()
    return User(id=cursor.lastrowid, name=name, branch_id=branch_id, points=0)


def get_user(db_path: str, user_id: int) -> User | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    conn.close()
    if not row:
        return None
    return User(id=row["id"], name=row["name"], branch_id=row["branch_id"], points=row["points"])


def find_user_by_name(db_path: str, name: str) -> User | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT id FROM users WHERE name = ?", (name,)).fetchone()
    conn.close()
    return get_user(db_path, row["id"]) if row else None


def authenticate(db_path: str, name: str, password: str) -> User | None:
    """Return the user when name and password match, else None.

    Accounts without a stored password can't sign in.
    """
    conn = get_connection(db_path)
    row = conn.execute("SELECT id, password_hash FROM users WHERE name = ?", (name,)).fetchone()
    conn.close()
    if not row or not row["password_hash"] or not check_password_hash(row["password_hash"], password or ""):
        logger.warning("Failed sign-in for %r", name)
        return None
    return get_user(db_path, row["id"])


def get_points(db_path: str, user_id: int) -> int:
    user = get_user(db_path, user_id)
    if user is None:
        raise LedgerError(f"Unknown user {user_id}")
    return user.points


def log_mission_result(
    db_path: str,
    user_id: int,
    sentence: str,
    result: str,
    attempts_used: int,
    phrase_id: str = None,
    transcript: str = None,
    today: date = None,
) -> dict:
    """Record a mission outcome and credit the daily reward at most once.

    The existence check, the daily_logs insert and the balance increment run in
    one IMMEDIATE transaction so two devices can't both credit the same day.
    When a transcript is supplied it is re-graded and a client-reported success
    that doesn't pass is logged as a fail.
    """
    if result not in MISSION_RESULTS:
        raise LedgerError(f"result must be one of {MISSION_RESULTS}, got {result!r}")
    day = (today or date.today()).isoformat()
    if result == "success" and transcript is not None and not is_pass(grade_transcript(transcript, sentence)):
        logger.warning("User %s reported success on %r but transcript %r does not pass", user_id, sentence, transcript)
        result = "fail"

    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
        user = conn.execute("SELECT points FROM users WHERE id = ?", (user_id,)).fetchone()
        if user is None:
            conn.rollback()
            raise LedgerError(f"Unknown user {user_id}")
        conn.execute(
            """INSERT INTO mission_logs (user_id, phrase_id, sentence, result, attempts_used, date, logged_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (user_id, phrase_id, sentence, result, attempts_used, day, datetime.now().isoformat()),
        )
        awarded = 0
        if result == "success":
            existing = conn.execute(
                "SELECT id FROM daily_logs WHERE user_id = ? AND date = ?", (user_id, day)
            ).fetchone()
            if existing is None:
                conn.execute(
                    "INSERT INTO daily_logs (user_id, date, accumulated_points) VALUES (?, ?, ?)",
                    (user_id, day, REWARD_POINTS),
                )
                conn.execute("UPDATE users SET points = points + ? WHERE id = ?", (REWARD_POINTS, user_id))
                awarded = REWARD_POINTS
        conn.commit()
        points = conn.execute("SELECT points FROM users WHERE id = ?", (user_id,)).fetchone()["points"]
    except sqlite3.Error as exc:
        conn.rollback()
        raise LedgerError(f"Mission result for user {user_id} not recorded: {exc}") from exc
    finally:
        conn.close()

    if awarded:
        message = f"{awarded} Points Rewarded!"
        logger.info("Credited %s points to user %s for %s", awarded, user_id, day)
    elif result == "success":
        message = "Already rewarded today"
    else:
        message = "Mission result recorded"
    return {"success": True, "points": points, "awarded": awarded, "message": message}


def save_test_result(db_path: str, user_id: int, score: float, result: str, month: str) -> dict:
    """Store the month's test result; a retake replaces the score and bumps attempts."""
    if result not in TEST_RESULTS:
        raise LedgerError(f"result must be one of {TEST_RESULTS}, got {result!r}")
    if not 0 <= score <= 100:
        raise LedgerError(f"score must be between 0 and 100, got {score}")
    conn = get_connection(db_path)
    try:
        conn.execute(
            """INSERT INTO test_results (user_id, month, score, result, attempts, taken_at)
            VALUES (?, ?, ?, ?, 1, ?)
            ON CONFLICT(user_id, month) DO UPDATE SET
                score = excluded.score,
                result = excluded.result,
                attempts = test_results.attempts + 1,
                taken_at = excluded.taken_at""",
            (user_id, month, score, result, datetime.now().isoformat()),
        )
        conn.commit()
    except sqlite3.Error as exc:
        raise LedgerError(f"Test result for user {user_id} not recorded: {exc}") from exc
    finally:
        conn.close()
    return {"success": True}


class RewardLedger:
    """Ledger bound to one database, handed to trackers and monthly tests."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def log_mission_result(self, user_id: int, sentence: str, result: str, attempts_used: int, **kwargs) -> dict:
        return log_mission_result(self.db_path, user_id, sentence, result, attempts_used, **kwargs)

    def save_test_result(self, user_id: int, score: float, result: str, month: str) -> dict:
        return save_test_result(self.db_path, user_id, score, result, month)

    def get_points(self, user_id: int) -> int:
        return get_points(self.db_path, user_id)
