"""Tests for XP reward tables and transaction checks."""

from zabaan.curriculum.models import Step
from zabaan.services import xp


class TestStepXp:
    def test_curriculum_points_win(self):
        assert xp.get_step_xp(Step(type="quiz", points=5))["amount"] == 5

    def test_fallback_table(self):
        reward = xp.get_step_xp(Step(type="matching"))
        assert reward["amount"] == 3
        assert reward["source"] == "matching_complete"

    def test_welcome_is_free(self):
        assert xp.get_step_xp(Step(type="welcome", points=0))["amount"] == 0


class TestMultiplier:
    def test_no_factors(self):
        assert xp.get_multiplier() == 1.0

    def test_streak_is_capped(self):
        assert xp.get_multiplier(streak=50) == 2

    def test_calculate(self):
        assert xp.calculate_step_xp(10, difficulty="hard") == 15


class TestValidateTransaction:
    def test_valid(self):
        assert xp.validate_transaction(5, "quiz", 1_000_000, now_ms=1_030_000)

    def test_amount_bounds(self):
        assert not xp.validate_transaction(-1, "quiz", 0, now_ms=0)
        assert not xp.validate_transaction(101, "quiz", 0, now_ms=0)

    def test_missing_source(self):
        assert not xp.validate_transaction(5, "", 0, now_ms=0)

    def test_clock_skew(self):
        assert not xp.validate_transaction(5, "quiz", 0, now_ms=61_000)


def test_format_and_achievements():
    assert xp.format_xp(1234) == "1,234 XP"
    assert xp.get_achievements(120) == ["First Steps", "Getting Started", "Dedicated Learner"]
