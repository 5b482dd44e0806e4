"""Mission progress tracking: attempts, lockout, completion and reward."""
import logging
import sqlite3
import threading

from everest_speak.grader import grade_transcript, is_pass
from everest_speak.ledger import LedgerError
from everest_speak.models import AttemptResult, MissionStatus, Outcome, Phrase
from everest_speak.session import SessionContext

logger = logging.getLogger(__name__)


class CaptureInProgressError(Exception):
    """Raised when a capture starts while another is still in flight."""


class MissionTracker:
    """Drives one session's missions through Ready -> Completed | Locked.

    The ledger decides whether a completion earns points; the tracker only
    makes sure each phrase reports its completion once.
    """

    def __init__(self, session: SessionContext, ledger):
        self.session = session
        self.ledger = ledger
        self._capture_lock = threading.Lock()
        self._capturing: Phrase | None = None

    # -- capture cycle --------------------------------------------------

    @property
    def capturing(self) -> Phrase | None:
        return self._capturing

    def begin_capture(self, phrase: Phrase) -> None:
        if not self._capture_lock.acquire(blocking=False):
            raise CaptureInProgressError(
                f"Already listening for {self._capturing.source_text if self._capturing else 'another phrase'}"
            )
        self._capturing = phrase

    def cancel_capture(self) -> None:
        if self._capturing is None:
            return
        self._capturing = None
        self._capture_lock.release()

    def finish_capture(self, transcript: str) -> AttemptResult:
        """Grade the final transcript of the capture in flight."""
        phrase = self._capturing
        if phrase is None:
            raise CaptureInProgressError("No capture in progress")
        try:
            return self.record_attempt(phrase, transcript)
        finally:
            self.cancel_capture()

    # -- grading --------------------------------------------------------

    def _status(self, phrase: Phrase) -> MissionStatus:
        status = self.session.status_for(phrase)
        if status is None:
            raise KeyError(f"{phrase.source_text!r} is not one of today's missions")
        return status

    def record_attempt(self, phrase: Phrase, transcript: str, target_text: str = None) -> AttemptResult:
        status = self._status(phrase)
        target = target_text or phrase.source_text

        if status.completed:
            return AttemptResult(Outcome.SUCCESS, message="Mission already completed")
        if status.locked:
            return AttemptResult(Outcome.LOCKED, message="No attempts left for today")

        accuracy = grade_transcript(transcript, target)
        if is_pass(accuracy):
            status.completed = True
            self.session.persist()
            result = self._report(status, "success", transcript if target == phrase.source_text else None)
            result.accuracy = accuracy
            return result

        status.attempts += 1
        self.session.persist()
        if status.locked:
            result = self._report(status, "fail", None)
            result.accuracy = accuracy
            return result
        return AttemptResult(
            Outcome.RETRY,
            accuracy=accuracy,
            attempts_remaining=status.attempts_remaining,
            message=f"Try again ({status.attempts_remaining} attempt(s) left)",
        )

    def _report(self, status: MissionStatus, result: str, transcript: str | None) -> AttemptResult:
        outcome = Outcome.SUCCESS if result == "success" else Outcome.LOCKED
        attempts_used = status.attempts + 1 if result == "success" else status.attempts
        try:
            response = self.ledger.log_mission_result(
                self.session.user_id,
                status.phrase.source_text,
                result,
                attempts_used,
                phrase_id=status.phrase.phrase_id or None,
                transcript=transcript,
                today=self.session.today,
            )
        except (LedgerError, sqlite3.Error, OSError) as exc:
            logger.warning("Could not record %s for %r: %s", result, status.phrase.source_text, exc)
            return AttemptResult(
                outcome,
                message="Saved on this device only",
                warning=f"Result not synced: {exc}",
            )
        return AttemptResult(
            outcome,
            points=response.get("points"),
            awarded=response.get("awarded", 0),
            message=response.get("message", ""),
        )
