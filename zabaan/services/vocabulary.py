"""Vocabulary tracking: attempt log, per-word performance and the word lists built on it."""
import logging
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.clock import as_utc, utcnow
from zabaan.core.config import get_settings
from zabaan.models.user import User
from zabaan.models.vocabulary import VocabularyAttempt, VocabularyPerformance
from zabaan.services import mastery
from zabaan.services import streak as streak_rules

logger = logging.getLogger(__name__)

HARD_WORDS_LIMIT = 10


def word_summary(perf: VocabularyPerformance, now: datetime | None = None) -> dict:
    now = now or utcnow()
    last_correct = as_utc(perf.last_correct_at)
    next_review = as_utc(perf.next_review_at)
    return {
        "vocabulary_id": perf.vocabulary_id,
        "word_text": perf.word_text,
        "total_attempts": perf.total_attempts,
        "total_correct": perf.total_correct,
        "total_incorrect": perf.total_incorrect,
        "consecutive_correct": perf.consecutive_correct,
        "mastery_level": perf.mastery_level,
        "effective_level": mastery.effective_level(perf.mastery_level, last_correct, now),
        "accuracy": mastery.accuracy(perf.total_correct, perf.total_attempts),
        "error_rate": mastery.error_rate(perf.total_incorrect, perf.total_attempts),
        "status": mastery.classify(perf.total_attempts, perf.total_correct, perf.consecutive_correct),
        "confidence": mastery.confidence(perf.total_attempts, perf.total_correct, perf.consecutive_correct),
        "last_seen_at": as_utc(perf.last_seen_at),
        "last_correct_at": last_correct,
        "next_review_at": next_review,
        "is_due": next_review is not None and next_review <= now,
        "is_grammar_form": perf.is_grammar_form,
    }


async def get_performance(db: AsyncSession, user_id: int, vocabulary_id: str) -> VocabularyPerformance | None:
    result = await db.execute(
        select(VocabularyPerformance).where(
            VocabularyPerformance.user_id == user_id,
            VocabularyPerformance.vocabulary_id == vocabulary_id,
        )
    )
    return result.scalar_one_or_none()


async def _stage_performance(
    db: AsyncSession, user: User, vocabulary_id: str, word_text: str, is_correct: bool, now: datetime
) -> VocabularyPerformance:
    perf = await get_performance(db, user.id, vocabulary_id)
    if perf is None:
        base_id, suffix_id = mastery.parse_vocabulary_id(vocabulary_id)
        perf = VocabularyPerformance(
            user_id=user.id,
            vocabulary_id=vocabulary_id,
            word_text=word_text,
            base_vocab_id=base_id if suffix_id else None,
            suffix_id=suffix_id,
            is_grammar_form=suffix_id is not None,
        )
        db.add(perf)
        current = None
    else:
        current = mastery.PerformanceCounters(
            total_attempts=perf.total_attempts or 0,
            total_correct=perf.total_correct or 0,
            total_incorrect=perf.total_incorrect or 0,
            consecutive_correct=perf.consecutive_correct or 0,
            mastery_level=perf.mastery_level or 0,
        )

    counters = mastery.apply_attempt(current, is_correct)
    perf.word_text = word_text or perf.word_text
    perf.total_attempts = counters.total_attempts
    perf.total_correct = counters.total_correct
    perf.total_incorrect = counters.total_incorrect
    perf.consecutive_correct = counters.consecutive_correct
    perf.mastery_level = counters.mastery_level
    perf.last_seen_at = now
    perf.next_review_at = mastery.next_review_at(counters.mastery_level, now)
    if is_correct:
        perf.last_correct_at = now
    return perf


async def record_attempt(
    db: AsyncSession,
    user: User,
    vocabulary_id: str,
    word_text: str,
    game_type: str,
    is_correct: bool,
    time_spent_ms: int | None = None,
    module_id: str | None = None,
    lesson_id: str | None = None,
    step_uid: str | None = None,
    context_data: dict | None = None,
    now: datetime | None = None,
) -> dict:
    """Log the attempt and fold it into the word's performance row.

    When a concurrent first attempt creates the performance row first, the
    insert loses on the unique constraint and the attempt is applied again
    on top of the winner's row.
    """
    now = now or utcnow()
    for try_number in range(2):
        db.add(
            VocabularyAttempt(
                user_id=user.id,
                vocabulary_id=vocabulary_id,
                game_type=game_type,
                module_id=module_id,
                lesson_id=lesson_id,
                step_uid=step_uid,
                is_correct=is_correct,
                time_spent_ms=time_spent_ms,
                context_data=context_data,
                created_at=now,
            )
        )
        perf = await _stage_performance(db, user, vocabulary_id, word_text, is_correct, now)
        streak_rules.record_activity(user, now, get_settings().default_timezone)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            await db.refresh(user)
            if try_number:
                raise
            logger.info("Performance row for %s raced with another request for user %s", vocabulary_id, user.id)
            continue
        await db.refresh(perf)
        return word_summary(perf, now)


async def _user_words(db: AsyncSession, user_id: int, *conditions, order_by=(), limit: int | None = None):
    query = select(VocabularyPerformance).where(VocabularyPerformance.user_id == user_id, *conditions)
    if order_by:
        query = query.order_by(*order_by)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_learned_words(db: AsyncSession, user_id: int, limit: int | None = None) -> list[dict]:
    rows = await _user_words(
        db,
        user_id,
        VocabularyPerformance.total_attempts > 0,
        order_by=(VocabularyPerformance.last_seen_at.desc(),),
        limit=limit,
    )
    return [word_summary(r) for r in rows]


async def get_hard_words(db: AsyncSession, user_id: int, limit: int = HARD_WORDS_LIMIT) -> list[dict]:
    """Words with at least two attempts, worst error rate first."""
    rows = await _user_words(db, user_id, VocabularyPerformance.total_attempts >= 2)
    rows.sort(key=lambda r: (-(r.total_incorrect / r.total_attempts), -r.total_attempts, r.vocabulary_id))
    return [word_summary(r) for r in rows[:limit]]


async def get_weak_words(db: AsyncSession, user_id: int, limit: int = 20, now: datetime | None = None) -> list[dict]:
    now = now or utcnow()
    rows = await _user_words(
        db,
        user_id,
        or_(VocabularyPerformance.consecutive_correct < 2, VocabularyPerformance.next_review_at <= now),
        order_by=(VocabularyPerformance.consecutive_correct.asc(), VocabularyPerformance.total_attempts.asc()),
        limit=limit,
    )
    return [word_summary(r, now) for r in rows]


async def get_mastered_words(db: AsyncSession, user_id: int, limit: int | None = None) -> list[dict]:
    rows = await _user_words(
        db,
        user_id,
        or_(VocabularyPerformance.consecutive_correct >= 5, VocabularyPerformance.mastery_level >= 5),
        order_by=(VocabularyPerformance.mastery_level.desc(), VocabularyPerformance.consecutive_correct.desc()),
        limit=limit,
    )
    return [word_summary(r) for r in rows]


async def get_words_for_review(db: AsyncSession, user_id: int, limit: int = 20, now: datetime | None = None) -> list[dict]:
    now = now or utcnow()
    rows = await _user_words(
        db,
        user_id,
        VocabularyPerformance.next_review_at.is_not(None),
        VocabularyPerformance.next_review_at <= now,
        order_by=(VocabularyPerformance.next_review_at.asc(),),
        limit=limit,
    )
    return [word_summary(r, now) for r in rows]


async def get_word_stats(db: AsyncSession, user_id: int, vocabulary_id: str) -> dict | None:
    perf = await get_performance(db, user_id, vocabulary_id)
    return word_summary(perf) if perf else None


async def get_dashboard_stats(db: AsyncSession, user_id: int) -> dict:
    rows = await _user_words(db, user_id, VocabularyPerformance.total_attempts > 0)
    summaries = [word_summary(r) for r in rows]
    by_status = {}
    for s in summaries:
        by_status[s["status"]] = by_status.get(s["status"], 0) + 1
    return {
        "words_learned": len(summaries),
        "mastered_words": by_status.get(mastery.STATUS_MASTERED, 0),
        "learning_words": by_status.get(mastery.STATUS_LEARNING, 0),
        "unclassified_words": by_status.get(mastery.STATUS_UNCLASSIFIED, 0),
        "hard_words": await get_hard_words(db, user_id),
    }
