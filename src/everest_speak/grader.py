"""Coarse pronunciation grading of a recognized transcript against a target."""
import re

SUCCESS_THRESHOLD = 0.7

_STRIP_RE = re.compile(r"[\s.,?!]+")


def normalize(text: str) -> str:
    return _STRIP_RE.sub("", text or "")


def grade(attempt: str, target: str) -> float:
    """Three-level similarity: 1.0 exact, 0.8 containment, 0.5 otherwise."""
    a = normalize(attempt)
    t = normalize(target)
    if a == t:
        return 1.0
    if a in t or t in a:
        return 0.8
    return 0.5


def is_pass(accuracy: float) -> bool:
    return accuracy > SUCCESS_THRESHOLD


def grade_transcript(transcript: str, target: str) -> float:
    """Grade a spoken attempt; a transcript with nothing left after normalizing scores 0.0."""
    if not normalize(transcript):
        return 0.0
    return grade(transcript, target)
