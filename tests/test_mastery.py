"""Tests for mastery levels, review scheduling and word status."""

from datetime import datetime, timedelta, timezone

from zabaan.services import mastery
from zabaan.services.mastery import PerformanceCounters, apply_attempt

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def run(answers):
    counters = None
    for is_correct in answers:
        counters = apply_attempt(counters, is_correct)
    return counters


class TestApplyAttempt:
    def test_first_correct_answer(self):
        c = apply_attempt(None, True)
        assert c == PerformanceCounters(1, 1, 0, 1, 1)

    def test_first_wrong_answer(self):
        c = apply_attempt(None, False)
        assert c == PerformanceCounters(1, 0, 1, 0, 0)

    def test_miss_drops_streak_by_two(self):
        c = run([True, True, True, True, False])
        assert c.consecutive_correct == 2
        assert c.total_incorrect == 1

    def test_streak_never_negative(self):
        assert run([True, False]).consecutive_correct == 0

    def test_mastery_never_decreases(self):
        levels = []
        counters = None
        for is_correct in [True, True, True, True, True, False, False, False]:
            counters = apply_attempt(counters, is_correct)
            levels.append(counters.mastery_level)
        assert levels == sorted(levels)
        assert levels[-1] == 5

    def test_streak_floors(self):
        assert run([True, True]).mastery_level == 2
        assert run([True, True, True]).mastery_level == 3
        assert run([True] * 5).mastery_level == 5

    def test_total_correct_floor(self):
        # Ten correct answers, never more than one in a row
        c = run([True, False] * 10)
        assert c.total_correct == 10
        assert c.mastery_level == 4


class TestReviewSchedule:
    def test_intervals_by_level(self):
        assert mastery.next_review_at(0, NOW) == NOW + timedelta(hours=1)
        assert mastery.next_review_at(3, NOW) == NOW + timedelta(days=3)
        assert mastery.next_review_at(5, NOW) == NOW + timedelta(days=14)

    def test_out_of_range_level_is_clamped(self):
        assert mastery.next_review_at(9, NOW) == NOW + timedelta(days=14)


class TestClassify:
    def test_too_few_attempts(self):
        assert mastery.classify(2, 2, 2) == mastery.STATUS_UNCLASSIFIED

    def test_mastered(self):
        assert mastery.classify(5, 5, 5) == mastery.STATUS_MASTERED

    def test_hard_on_low_accuracy(self):
        assert mastery.classify(10, 6, 3) == mastery.STATUS_HARD

    def test_hard_on_short_streak(self):
        assert mastery.classify(10, 9, 1) == mastery.STATUS_HARD

    def test_learning(self):
        assert mastery.classify(10, 8, 3) == mastery.STATUS_LEARNING

    def test_accuracy_and_error_rate(self):
        assert mastery.accuracy(2, 3) == 66.7
        assert mastery.error_rate(1, 3) == 33.3
        assert mastery.accuracy(0, 0) == 0.0

    def test_confidence(self):
        assert mastery.confidence(5, 5, 5) == 100.0
        assert mastery.confidence(0, 0, 0) == 0.0


class TestEffectiveLevel:
    def test_recent_correct_keeps_level(self):
        assert mastery.effective_level(4, NOW - timedelta(days=3), NOW) == 4

    def test_stale_word_decays_one_level(self):
        assert mastery.effective_level(4, NOW - timedelta(days=15), NOW) == 3
        assert mastery.effective_level(0, None, NOW) == 0


class TestParseVocabularyId:
    def test_grammar_form(self):
        assert mastery.parse_vocabulary_id("khoob|am") == ("khoob", "am")

    def test_plain_id(self):
        assert mastery.parse_vocabulary_id("salam") == ("salam", None)
        assert mastery.parse_vocabulary_id("khoob|") == ("khoob|", None)
