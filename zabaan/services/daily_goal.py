"""Daily XP goal and today's progress toward it."""
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.config import get_settings
from zabaan.core.errors import ValidationError
from zabaan.models.user import User
from zabaan.services.streak import day_bounds
from zabaan.services.xp import sum_xp_between

DEFAULT_DAILY_GOAL = 50
MIN_DAILY_GOAL = 1
MAX_DAILY_GOAL = 1000


def calculate_progress(earned: int, goal: int) -> dict:
    goal = goal or DEFAULT_DAILY_GOAL
    return {
        "earned": earned,
        "goal": goal,
        "percentage": min(100, round(earned / goal * 100)) if goal > 0 else 0,
        "remaining": max(0, goal - earned),
        "is_met": earned >= goal,
    }


def user_timezone(user: User) -> str:
    return user.timezone or get_settings().default_timezone


async def get_xp_earned_today(db: AsyncSession, user: User, now: datetime | None = None) -> int:
    start, end = day_bounds(user_timezone(user), now)
    return await sum_xp_between(db, user.id, start, end)


async def get_daily_goal_progress(db: AsyncSession, user: User, now: datetime | None = None) -> dict:
    earned = await get_xp_earned_today(db, user, now)
    return {
        "goal": user.daily_goal_xp or DEFAULT_DAILY_GOAL,
        "timezone": user_timezone(user),
        "progress": calculate_progress(earned, user.daily_goal_xp or DEFAULT_DAILY_GOAL),
    }


async def set_daily_goal(db: AsyncSession, user: User, goal_xp: int) -> int:
    if isinstance(goal_xp, bool) or not isinstance(goal_xp, int) or not MIN_DAILY_GOAL <= goal_xp <= MAX_DAILY_GOAL:
        raise ValidationError(f"Daily goal must be between {MIN_DAILY_GOAL} and {MAX_DAILY_GOAL} XP")
    user.daily_goal_xp = goal_xp
    await db.commit()
    return goal_xp
