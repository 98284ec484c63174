"""Per-lesson progress, lesson unlocking and module completion."""
import logging
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.clock import as_utc, utcnow
from zabaan.core.retry import with_db_retry
from zabaan.curriculum import get_lesson, get_module, iter_lessons
from zabaan.models.lesson_progress import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    LessonProgress,
)
from zabaan.models.lesson_session import LessonSession
from zabaan.models.user import User
from zabaan.models.vocabulary import VocabularyAttempt, VocabularyPerformance
from zabaan.models.xp import XpTransaction

logger = logging.getLogger(__name__)

FIRST_LESSON = ("module1", "lesson1")


def progress_to_dict(row: LessonProgress) -> dict:
    return {
        "module_id": row.module_id,
        "lesson_id": row.lesson_id,
        "status": row.status,
        "progress_percent": row.progress_percent,
        "started_at": as_utc(row.started_at),
        "completed_at": as_utc(row.completed_at),
    }


async def get_user_progress(db: AsyncSession, user_id: int, module_id: str | None = None) -> list[LessonProgress]:
    query = select(LessonProgress).where(LessonProgress.user_id == user_id)
    if module_id:
        query = query.where(LessonProgress.module_id == module_id)
    result = await db.execute(query.order_by(LessonProgress.module_id, LessonProgress.lesson_id))
    return list(result.scalars().all())


async def _get_row(db: AsyncSession, user_id: int, module_id: str, lesson_id: str) -> LessonProgress | None:
    result = await db.execute(
        select(LessonProgress).where(
            LessonProgress.user_id == user_id,
            LessonProgress.module_id == module_id,
            LessonProgress.lesson_id == lesson_id,
        )
    )
    return result.scalar_one_or_none()


async def completed_lessons(db: AsyncSession, user_id: int) -> set[tuple[str, str]]:
    result = await db.execute(
        select(LessonProgress.module_id, LessonProgress.lesson_id).where(
            LessonProgress.user_id == user_id,
            LessonProgress.status == STATUS_COMPLETED,
        )
    )
    return {(m, l) for m, l in result.all()}


async def mark_lesson_started(
    db: AsyncSession, user: User, module_id: str, lesson_id: str, now: datetime | None = None
) -> LessonProgress:
    now = now or utcnow()

    async def write() -> LessonProgress:
        row = await _get_row(db, user.id, module_id, lesson_id)
        if row is None:
            row = LessonProgress(user_id=user.id, module_id=module_id, lesson_id=lesson_id, progress_percent=0)
            db.add(row)
        if row.status != STATUS_COMPLETED:
            row.status = STATUS_IN_PROGRESS
            row.started_at = row.started_at or now
        await db.commit()
        return row

    return await with_db_retry(db, write, label=f"start {module_id}/{lesson_id}", refresh=[user])


async def update_lesson_percent(
    db: AsyncSession, user: User, module_id: str, lesson_id: str, percent: int
) -> LessonProgress | None:
    row = await _get_row(db, user.id, module_id, lesson_id)
    if row is None or row.status == STATUS_COMPLETED:
        return row
    row.progress_percent = max(row.progress_percent or 0, max(0, min(100, percent)))
    await db.commit()
    return row


async def mark_lesson_completed(
    db: AsyncSession, user: User, module_id: str, lesson_id: str, now: datetime | None = None
) -> LessonProgress:
    now = now or utcnow()

    async def write() -> LessonProgress:
        row = await _get_row(db, user.id, module_id, lesson_id)
        if row is None:
            row = LessonProgress(user_id=user.id, module_id=module_id, lesson_id=lesson_id, started_at=now)
            db.add(row)
        row.status = STATUS_COMPLETED
        row.progress_percent = 100
        row.completed_at = row.completed_at or now
        await db.commit()
        return row

    row = await with_db_retry(db, write, label=f"complete {module_id}/{lesson_id}", refresh=[user])
    logger.info("User %s completed %s/%s", user.id, module_id, lesson_id)
    return row


def previous_lesson(module_id: str, lesson_id: str) -> tuple[str, str] | None:
    sequence = iter_lessons()
    try:
        pos = sequence.index((module_id, lesson_id))
    except ValueError:
        return None
    return sequence[pos - 1] if pos > 0 else None


def is_lesson_accessible(module_id: str, lesson_id: str, completed: set[tuple[str, str]]) -> bool:
    if (module_id, lesson_id) == FIRST_LESSON:
        return True
    module = get_module(module_id)
    if module is None or not module.available or get_lesson(module_id, lesson_id) is None:
        return False
    prev = previous_lesson(module_id, lesson_id)
    return prev is not None and prev in completed


def next_sequential_lesson(module_id: str, lesson_id: str, completed: set[tuple[str, str]]) -> tuple[str, str]:
    sequence = iter_lessons()
    if (module_id, lesson_id) in sequence:
        pos = sequence.index((module_id, lesson_id))
        if pos + 1 < len(sequence):
            return sequence[pos + 1]
    return first_available_lesson(completed)


def first_available_lesson(completed: set[tuple[str, str]]) -> tuple[str, str]:
    for key in iter_lessons():
        if key not in completed and is_lesson_accessible(*key, completed):
            return key
    return FIRST_LESSON


def is_module_completed(module_id: str, completed: set[tuple[str, str]]) -> bool:
    module = get_module(module_id)
    if module is None or not module.lessons:
        return False
    return all((module_id, lesson.id) in completed for lesson in module.lessons)


def module_completion_percentage(module_id: str, completed: set[tuple[str, str]]) -> int:
    module = get_module(module_id)
    if module is None or not module.lessons:
        return 0
    done = sum(1 for lesson in module.lessons if (module_id, lesson.id) in completed)
    return round(done / len(module.lessons) * 100)


async def reset_all_progress(db: AsyncSession, user: User) -> None:
    """Wipe the user's learning history and XP."""
    for model in (LessonProgress, LessonSession, XpTransaction, VocabularyAttempt, VocabularyPerformance):
        await db.execute(delete(model).where(model.user_id == user.id))
    user.total_xp = 0
    await db.commit()
    logger.info("Progress reset for user %s", user.id)


def is_lesson_unlocked_in_module(module_id: str, lesson_id: str, completed: set[tuple[str, str]]) -> bool:
    """First lesson of a module is open; later ones need the lesson before them finished."""
    module = get_module(module_id)
    if module is None:
        return False
    ids = [lesson.id for lesson in module.lessons]
    if lesson_id not in ids:
        return False
    pos = ids.index(lesson_id)
    return pos == 0 or (module_id, ids[pos - 1]) in completed
