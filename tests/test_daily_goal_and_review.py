"""Tests for daily goal progress and the review XP cap."""

from datetime import datetime, timedelta, timezone

import pytest

from zabaan.core.errors import ValidationError
from zabaan.services import daily_goal, review, xp

NOW = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


class TestCalculateProgress:
    def test_partial(self):
        assert daily_goal.calculate_progress(20, 50) == {
            "earned": 20,
            "goal": 50,
            "percentage": 40,
            "remaining": 30,
            "is_met": False,
        }

    def test_exceeded_goal_caps_percentage(self):
        progress = daily_goal.calculate_progress(80, 50)
        assert progress["percentage"] == 100
        assert progress["remaining"] == 0
        assert progress["is_met"] is True


@pytest.mark.asyncio
async def test_xp_earned_today_uses_user_timezone(db, user):
    user.timezone = "Asia/Tehran"
    await db.commit()
    # 21:00 UTC is already the next day in Tehran
    await xp.grant_xp(db, user, 10, "quiz_correct", "late", now=datetime(2026, 3, 9, 21, 0, tzinfo=timezone.utc))
    await xp.grant_xp(db, user, 5, "quiz_correct", "early", now=datetime(2026, 3, 9, 19, 0, tzinfo=timezone.utc))

    earned = await daily_goal.get_xp_earned_today(db, user, now=datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc))
    assert earned == 10


@pytest.mark.asyncio
async def test_set_daily_goal(db, user):
    assert await daily_goal.set_daily_goal(db, user, 120) == 120
    progress = await daily_goal.get_daily_goal_progress(db, user, now=NOW)
    assert progress["goal"] == 120
    assert progress["timezone"] == "UTC"


@pytest.mark.asyncio
@pytest.mark.parametrize("goal", [0, 1001, True])
async def test_set_daily_goal_rejects_out_of_range(db, user, goal):
    with pytest.raises(ValidationError):
        await daily_goal.set_daily_goal(db, user, goal)


class TestReviewXp:
    @pytest.mark.asyncio
    async def test_award_is_idempotent_per_action(self, db, user):
        first = await review.award_review_xp(db, user, "matching", "round-1", 3, now=NOW)
        again = await review.award_review_xp(db, user, "matching", "round-1", 3, now=NOW)
        assert first["granted"] is True and first["awarded"] == 3
        assert again["granted"] is False and again["awarded"] == 0
        assert user.total_xp == 3

    @pytest.mark.asyncio
    async def test_cap_trims_the_last_award(self, db, user, monkeypatch):
        monkeypatch.setattr(review, "REVIEW_DAILY_CAP", 10)
        await review.award_review_xp(db, user, "audio", "a1", 8, now=NOW)
        trimmed = await review.award_review_xp(db, user, "audio", "a2", 5, now=NOW)
        assert trimmed["awarded"] == 2
        assert trimmed["cap_reached"] is True

        blocked = await review.award_review_xp(db, user, "audio", "a3", 1, now=NOW)
        assert blocked["granted"] is False
        assert blocked["reason"] == "daily_cap_reached"
        assert user.total_xp == 10

    @pytest.mark.asyncio
    async def test_cap_resets_next_day(self, db, user, monkeypatch):
        monkeypatch.setattr(review, "REVIEW_DAILY_CAP", 5)
        await review.award_review_xp(db, user, "audio", "a1", 5, now=NOW)
        tomorrow = await review.award_review_xp(db, user, "audio", "a2", 5, now=NOW + timedelta(days=1))
        assert tomorrow["awarded"] == 5

    @pytest.mark.asyncio
    async def test_lesson_xp_does_not_count_toward_cap(self, db, user):
        await xp.grant_xp(db, user, 50, "quiz_correct", "lesson", now=NOW)
        status = await review.get_review_xp_status(db, user, now=NOW)
        assert status["earned_today"] == 0

    @pytest.mark.asyncio
    async def test_unknown_filter(self, db, user):
        with pytest.raises(ValidationError):
            await review.get_review_words(db, user.id, "favorites")
