"""Review mode: word selection by filter and capped, idempotent review XP."""
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.errors import ValidationError
from zabaan.models.user import User
from zabaan.services import vocabulary as vocab_service
from zabaan.services.daily_goal import user_timezone
from zabaan.services.streak import day_bounds
from zabaan.services.xp import grant_xp, sum_xp_between

REVIEW_XP_PER_CORRECT = 1
REVIEW_DAILY_CAP = 1000
REVIEW_SOURCE_PREFIX = "review-"

REVIEW_FILTERS = ("all-learned", "words-to-review", "mastered", "due")
FILTER_ALIASES = {"hard-words": "words-to-review"}


async def get_review_words(db: AsyncSession, user_id: int, filter_name: str = "all-learned", limit: int = 50) -> list[dict]:
    filter_name = FILTER_ALIASES.get(filter_name, filter_name)
    if filter_name == "all-learned":
        return await vocab_service.get_learned_words(db, user_id, limit=limit)
    if filter_name == "words-to-review":
        return await vocab_service.get_hard_words(db, user_id, limit=limit)
    if filter_name == "mastered":
        return await vocab_service.get_mastered_words(db, user_id, limit=limit)
    if filter_name == "due":
        return await vocab_service.get_words_for_review(db, user_id, limit=limit)
    raise ValidationError(f"Unknown review filter: {filter_name}", errors={"filter": list(REVIEW_FILTERS)})


async def get_review_xp_today(db: AsyncSession, user: User, now: datetime | None = None) -> int:
    start, end = day_bounds(user_timezone(user), now)
    return await sum_xp_between(db, user.id, start, end, source_prefix=REVIEW_SOURCE_PREFIX)


async def get_review_xp_status(db: AsyncSession, user: User, now: datetime | None = None) -> dict:
    earned = await get_review_xp_today(db, user, now)
    return {
        "earned_today": earned,
        "cap": REVIEW_DAILY_CAP,
        "remaining": max(0, REVIEW_DAILY_CAP - earned),
        "cap_reached": earned >= REVIEW_DAILY_CAP,
    }


async def award_review_xp(
    db: AsyncSession,
    user: User,
    game_type: str,
    action_id: str,
    amount: int = REVIEW_XP_PER_CORRECT,
    metadata: dict | None = None,
    now: datetime | None = None,
) -> dict:
    """Award review XP for one action, trimmed so the day's review total stays under the cap."""
    status = await get_review_xp_status(db, user, now)
    if status["remaining"] <= 0:
        return {"granted": False, "reason": "daily_cap_reached", "awarded": 0, "new_xp": user.total_xp, **status}

    awarded = min(amount, status["remaining"])
    result = await grant_xp(
        db,
        user,
        awarded,
        f"{REVIEW_SOURCE_PREFIX}{game_type}",
        f"review:{game_type}:{action_id}",
        metadata=metadata,
        now=now,
    )
    if not result["granted"]:
        return {**result, "awarded": 0, **status}

    status = await get_review_xp_status(db, user, now)
    return {**result, "awarded": awarded, **status}
