"""XP rewards, idempotent awarding and the XP ledger."""
import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.clock import utcnow
from zabaan.core.config import get_settings
from zabaan.curriculum.models import Step
from zabaan.models.user import User
from zabaan.models.xp import XpTransaction
from zabaan.services import streak as streak_rules
from zabaan.services.step_uid import make_step_key

logger = logging.getLogger(__name__)

# step type -> (fallback amount, ledger source)
ACTIVITY_REWARDS = {
    "welcome": (0, "welcome"),
    "flashcard": (1, "flashcard_flip"),
    "quiz": (2, "quiz_correct"),
    "reverse-quiz": (2, "quiz_correct"),
    "input": (2, "input_correct"),
    "matching": (3, "matching_complete"),
    "audio-meaning": (2, "audio_meaning_correct"),
    "audio-sequence": (3, "audio_sequence_complete"),
    "text-sequence": (3, "text_sequence_complete"),
    "grammar-concept": (2, "grammar_concept"),
    "final": (4, "final_challenge"),
    "story-conversation": (1, "story_conversation"),
}

MAX_XP_PER_ACTION = 100
MAX_CLOCK_SKEW_MS = 60_000

XP_ACHIEVEMENTS = [
    (10, "First Steps"),
    (50, "Getting Started"),
    (100, "Dedicated Learner"),
    (500, "Persian Explorer"),
    (1000, "Language Master"),
    (5000, "XP Champion"),
]


def get_step_xp(step: Step) -> dict:
    """Amount and source for completing ``step``; curriculum points win over the table."""
    fallback, source = ACTIVITY_REWARDS.get(step.type, (0, step.type.replace("-", "_")))
    amount = step.points if step.points is not None else fallback
    return {"amount": amount, "source": source, "description": f"Completed {step.type} ({amount} XP)"}


def get_multiplier(difficulty: str | None = None, streak: int | None = None, time_bonus: bool = False) -> float:
    multiplier = 1.0
    if difficulty == "hard":
        multiplier *= 1.5
    elif difficulty == "medium":
        multiplier *= 1.2
    if streak and streak > 1:
        multiplier *= min(1 + (streak - 1) * 0.1, 2)
    if time_bonus:
        multiplier *= 1.1
    return multiplier


def calculate_step_xp(base_points: int, **factors) -> int:
    return round(base_points * get_multiplier(**factors))


def validate_transaction(amount: int, source: str | None, timestamp_ms: int, now_ms: int | None = None) -> bool:
    """Sanity checks for client-submitted XP."""
    if amount < 0 or amount > MAX_XP_PER_ACTION:
        return False
    if not source:
        return False
    if now_ms is None:
        now_ms = int(utcnow().timestamp() * 1000)
    return abs(now_ms - timestamp_ms) <= MAX_CLOCK_SKEW_MS


def format_xp(xp: int) -> str:
    return f"{xp:,} XP"


def get_achievements(total_xp: int) -> list[str]:
    return [name for threshold, name in XP_ACHIEVEMENTS if total_xp >= threshold]


async def _already_awarded(db: AsyncSession, user_id: int, key: str) -> bool:
    result = await db.execute(
        select(XpTransaction.id).where(XpTransaction.user_id == user_id, XpTransaction.idempotency_key == key)
    )
    return result.scalar_one_or_none() is not None


async def grant_xp(
    db: AsyncSession,
    user: User,
    amount: int,
    source: str,
    idempotency_key: str,
    lesson_id: str | None = None,
    metadata: dict | None = None,
    now: datetime | None = None,
) -> dict:
    """Insert one ledger row and add it to the user's total, unless the key was used before.

    Commits on success. A concurrent insert of the same key loses on the
    unique constraint and is reported as ``already_awarded``.
    """
    if await _already_awarded(db, user.id, idempotency_key):
        return {"granted": False, "reason": "already_awarded", "new_xp": user.total_xp}

    now = now or utcnow()
    db.add(
        XpTransaction(
            user_id=user.id,
            amount=amount,
            source=source,
            lesson_id=lesson_id,
            idempotency_key=idempotency_key,
            metadata_json=metadata or None,
            created_at=now,
        )
    )
    user.total_xp = (user.total_xp or 0) + amount
    streak_rules.record_activity(user, now, get_settings().default_timezone)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        await db.refresh(user)
        logger.info("XP key %s raced with another request for user %s", idempotency_key, user.id)
        return {"granted": False, "reason": "already_awarded", "new_xp": user.total_xp}

    logger.debug("XP awarded: %d (%s) %s", amount, source, idempotency_key)
    return {"granted": True, "new_xp": user.total_xp}


async def award_xp_once(
    db: AsyncSession,
    user: User,
    module_id: str,
    lesson_id: str,
    step_uid: str,
    amount: int,
    source: str,
    metadata: dict | None = None,
) -> dict:
    key = make_step_key(module_id, lesson_id, step_uid)
    return await grant_xp(
        db,
        user,
        amount,
        source,
        key,
        lesson_id=f"{module_id}/{lesson_id}",
        metadata=metadata,
    )


async def apply_batch(db: AsyncSession, user: User, transactions: list[dict]) -> dict:
    """Apply client-queued transactions; each carries its own idempotency key."""
    applied = 0
    duplicates = 0
    for tx in transactions:
        result = await grant_xp(
            db,
            user,
            tx["amount"],
            tx["source"],
            tx["idempotency_key"],
            lesson_id=tx.get("lesson_id"),
            metadata=tx.get("metadata"),
        )
        if result["granted"]:
            applied += 1
        else:
            duplicates += 1
    return {"applied": applied, "duplicates": duplicates, "total_xp": user.total_xp}


async def sum_xp_between(
    db: AsyncSession,
    user_id: int,
    start: datetime,
    end: datetime,
    source_prefix: str | None = None,
) -> int:
    query = select(func.coalesce(func.sum(XpTransaction.amount), 0)).where(
        XpTransaction.user_id == user_id,
        XpTransaction.created_at >= start,
        XpTransaction.created_at < end,
    )
    if source_prefix:
        query = query.where(XpTransaction.source.like(f"{source_prefix}%"))
    result = await db.execute(query)
    return int(result.scalar_one())
