# tests/test_grader.py
from everest_speak.grader import SUCCESS_THRESHOLD, grade, grade_transcript, is_pass, normalize


def test_exact_match():
    assert grade("안녕하세요", "안녕하세요") == 1.0


def test_attempt_contained_in_target():
    assert grade("안녕", "안녕하세요") == 0.8


def test_target_contained_in_attempt():
    assert grade("안녕하세요", "안녕") == 0.8


def test_unrelated():
    assert grade("감사합니다", "안녕하세요") == 0.5


def test_whitespace_and_punctuation_ignored():
    assert grade("안녕 하세요!", "안녕하세요.") == 1.0
    assert grade("주문하시겠어요", "주문하시겠어요?") == 1.0
    assert grade(" 어서, 오세요 ", "어서 오세요.") == 1.0


def test_normalize_strips_only_listed_punctuation():
    assert normalize("네, 알겠습니다!?") == "네알겠습니다"
    assert normalize("5~6분") == "5~6분"


def test_normalize_none_is_empty():
    assert normalize(None) == ""


def test_threshold_is_binary():
    assert SUCCESS_THRESHOLD == 0.7
    assert is_pass(1.0)
    assert is_pass(0.8)
    assert not is_pass(0.5)
    assert not is_pass(0.7)


def test_grade_transcript_matches_grade_for_speech():
    assert grade_transcript("안녕하세요", "안녕하세요") == 1.0
    assert grade_transcript("안녕", "안녕하세요") == 0.8
    assert grade_transcript("감사합니다", "안녕하세요") == 0.5


def test_grade_transcript_without_speech_scores_zero():
    for transcript in ("", "   ", "?", ".", " , ! ", None):
        assert grade_transcript(transcript, "안녕하세요") == 0.0
    assert not is_pass(grade_transcript("?", "안녕하세요"))
