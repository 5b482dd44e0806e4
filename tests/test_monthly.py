# tests/test_monthly.py
import logging
import random
from datetime import date
from unittest.mock import MagicMock

from everest_speak.missions import daily_seed, select_missions
from everest_speak.monthly import (
    MonthlyTest, build_monthly_pool, build_monthly_test, is_last_day_of_month,
    month_key, sample_test,
)


def test_is_last_day_of_month():
    assert is_last_day_of_month(date(2026, 1, 31))
    assert is_last_day_of_month(date(2026, 4, 30))
    assert is_last_day_of_month(date(2026, 12, 31))
    assert not is_last_day_of_month(date(2026, 1, 30))
    assert not is_last_day_of_month(date(2026, 1, 1))


def test_is_last_day_of_february():
    assert is_last_day_of_month(date(2026, 2, 28))
    assert not is_last_day_of_month(date(2028, 2, 28))
    assert is_last_day_of_month(date(2028, 2, 29))


def test_month_key():
    assert month_key(date(2026, 1, 31)) == "2026-01"


def test_pool_replays_each_earlier_day(catalog):
    today = date(2026, 1, 5)
    pool = build_monthly_pool(catalog, today, count=3)
    expected = []
    for d in range(1, 5):
        for p in select_missions(catalog, daily_seed(date(2026, 1, d)), 3):
            if p not in expected:
                expected.append(p)
    assert pool == expected


def test_pool_excludes_today(catalog):
    today = date(2026, 1, 2)
    pool = build_monthly_pool(catalog, today, count=3)
    assert pool == select_missions(catalog, "2026-01-01", 3)


def test_pool_empty_on_first_of_month(catalog):
    assert build_monthly_pool(catalog, date(2026, 3, 1), count=3) == []


def test_pool_has_no_duplicates(small_catalog):
    pool = build_monthly_pool(small_catalog, date(2026, 1, 31), count=2)
    assert len(pool) == len({p.identity for p in pool})
    assert len(pool) <= 3


def test_sample_test_size(catalog):
    pool = build_monthly_pool(catalog, date(2026, 1, 31), count=3)
    questions = sample_test(pool, 10, rng=random.Random(1))
    assert len(questions) == 10
    assert len(set(questions)) == 10
    assert all(q in pool for q in questions)


def test_sample_test_short_pool_warns(small_catalog, caplog):
    with caplog.at_level(logging.WARNING):
        questions = sample_test(small_catalog, 10)
    assert sorted(q.source_text for q in questions) == sorted(p.source_text for p in small_catalog)
    assert "only 3 phrases" in caplog.text


def test_sample_test_empty_pool():
    assert sample_test([], 10) == []


# --- Grading a sitting ---


def test_monthly_test_all_correct(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    for i, phrase in enumerate(small_catalog):
        assert test.answer(i, phrase.source_text) is True
    assert test.finished
    assert test.score == 100.0
    assert test.result == "PASS"


def test_monthly_test_second_attempt_counts(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    assert test.answer(0, "틀린 답") is False
    assert test.is_open(0)
    assert test.answer(0, small_catalog[0].source_text) is True
    assert not test.is_open(0)


def test_monthly_test_two_misses_close_question(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    test.answer(0, "틀린 답")
    test.answer(0, "또 틀린 답")
    assert not test.is_open(0)
    assert test.answer(0, small_catalog[0].source_text) is False
    assert test.attempts[0] == 2


def test_monthly_test_empty_answer_is_wrong(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    assert test.answer(0, "") is False


def test_monthly_test_punctuation_answers_are_wrong(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    for i in range(len(small_catalog)):
        assert test.answer(i, "?") is False
        assert test.answer(i, " . ") is False
    assert test.finished
    assert test.score == 0.0
    assert test.result == "FAIL"


def test_monthly_test_pass_mark(catalog):
    questions = catalog[:10]
    test = MonthlyTest(questions, "2026-01")
    for i in range(7):
        test.answer(i, questions[i].source_text)
    for i in range(7, 10):
        test.answer(i, "모름")
        test.answer(i, "모름")
    assert test.score == 70.0
    assert test.passed
    assert test.result == "PASS"


def test_monthly_test_fail_mark(catalog):
    questions = catalog[:10]
    test = MonthlyTest(questions, "2026-01")
    for i in range(6):
        test.answer(i, questions[i].source_text)
    assert test.score == 60.0
    assert test.result == "FAIL"


def test_empty_test_scores_zero():
    test = MonthlyTest([], "2026-01")
    assert test.score == 0.0
    assert test.result == "FAIL"
    assert test.finished


def test_submit_sends_result_to_ledger(small_catalog):
    test = MonthlyTest(small_catalog, "2026-01")
    for i, phrase in enumerate(small_catalog):
        test.answer(i, phrase.source_text)
    ledger = MagicMock()
    ledger.save_test_result.return_value = {"success": True}
    assert test.submit(ledger, 7) == {"success": True}
    ledger.save_test_result.assert_called_once_with(7, 100.0, "PASS", "2026-01")


def test_build_monthly_test(catalog):
    test = build_monthly_test(catalog, date(2026, 1, 31), count=3, size=10, rng=random.Random(3))
    assert test.month == "2026-01"
    assert len(test.questions) == 10
