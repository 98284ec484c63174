"""Level, streak, daily goal, dashboard and offline XP sync routes."""
import logging

from fastapi import APIRouter

from zabaan.core.config import get_settings
from zabaan.core.retry import with_db_retry
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.schemas.gamification import DailyGoalUpdateSchema, XpSyncSchema
from zabaan.services import streak as streak_rules
from zabaan.services.daily_goal import get_daily_goal_progress, set_daily_goal, user_timezone
from zabaan.services.leveling import get_level_progress
from zabaan.services.vocabulary import get_dashboard_stats
from zabaan.services.xp import apply_batch, format_xp, get_achievements

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["gamification"])


def _streak_info(user) -> dict:
    today = streak_rules.today_in_timezone(user_timezone(user))
    count = user.streak_count or 0
    last = user.last_activity_date
    # A streak not extended yesterday or today is already broken
    if last is not None and (today - last).days > 1:
        count = 0
    return {
        "streak_count": count,
        "last_activity_date": last,
        "active_today": streak_rules.is_active_today(last, today),
        "display": streak_rules.format_streak(count),
        "milestones": streak_rules.get_milestones(count),
        "next_milestone": streak_rules.next_milestone(count),
    }


@router.get("/level")
async def level(user: CurrentUser):
    return {
        **get_level_progress(user.total_xp),
        "display": format_xp(user.total_xp or 0),
        "achievements": get_achievements(user.total_xp or 0),
    }


@router.get("/streak")
async def get_streak(user: CurrentUser):
    return _streak_info(user)


@router.post("/streak")
async def touch_streak(user: CurrentUser, db: DbSession):
    """Count today as an active day (e.g. practice without XP)."""
    changed = streak_rules.record_activity(user, default_tz=get_settings().default_timezone)
    await db.commit()
    return {**_streak_info(user), "updated": changed}


@router.get("/daily-goal")
async def get_daily_goal(user: CurrentUser, db: DbSession):
    return await get_daily_goal_progress(db, user)


@router.put("/daily-goal")
async def update_daily_goal(body: DailyGoalUpdateSchema, user: CurrentUser, db: DbSession):
    await set_daily_goal(db, user, body.goal_xp)
    return await get_daily_goal_progress(db, user)


@router.get("/dashboard")
async def dashboard(user: CurrentUser, db: DbSession):
    """Everything the home screen shows in one call."""
    return {
        "user": {"id": user.id, "display_name": user.display_name, "total_xp": user.total_xp},
        "level": get_level_progress(user.total_xp),
        "streak": _streak_info(user),
        "daily_goal": await get_daily_goal_progress(db, user),
        "vocabulary": await get_dashboard_stats(db, user.id),
    }


@router.post("/xp/sync")
async def sync_xp(body: XpSyncSchema, user: CurrentUser, db: DbSession):
    """Apply transactions queued by an offline client; repeated keys are skipped."""
    transactions = [tx.model_dump() for tx in body.transactions]
    result = await with_db_retry(db, lambda: apply_batch(db, user, transactions), label="xp sync", refresh=[user])
    logger.info("XP sync for user %s: %d applied, %d duplicates", user.id, result["applied"], result["duplicates"])
    return {"success": True, **result}
