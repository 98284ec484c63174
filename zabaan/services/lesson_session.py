"""Persistence of lesson-runner state between requests."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.errors import NotFoundError
from zabaan.curriculum import get_all_vocabulary, get_lesson, get_lesson_steps, get_lesson_vocabulary
from zabaan.models.lesson_session import LessonSession
from zabaan.services.lesson_runner import LessonRunner, RunnerState


async def get_session_row(db: AsyncSession, user_id: int, module_id: str, lesson_id: str) -> LessonSession | None:
    result = await db.execute(
        select(LessonSession).where(
            LessonSession.user_id == user_id,
            LessonSession.module_id == module_id,
            LessonSession.lesson_id == lesson_id,
        )
    )
    return result.scalar_one_or_none()


def build_runner(module_id: str, lesson_id: str, state: RunnerState | None = None) -> LessonRunner:
    if get_lesson(module_id, lesson_id) is None:
        raise NotFoundError("Lesson not found", resource="lesson")
    # Remediation can pull in any word the course has taught; lesson words take precedence
    vocabulary = {item.id: item for item in get_all_vocabulary()}
    vocabulary.update({item.id: item for item in get_lesson_vocabulary(module_id, lesson_id)})
    return LessonRunner(
        get_lesson_steps(module_id, lesson_id),
        list(vocabulary.values()),
        state=state,
        module_id=module_id,
        lesson_id=lesson_id,
    )


async def load_runner(
    db: AsyncSession, user_id: int, module_id: str, lesson_id: str
) -> tuple[LessonRunner, LessonSession]:
    row = await get_session_row(db, user_id, module_id, lesson_id)
    if row is None:
        raise NotFoundError("No active session for this lesson; start it first", resource="lesson_session")
    return build_runner(module_id, lesson_id, RunnerState.model_validate(row.state_json)), row


async def start_runner(
    db: AsyncSession, user_id: int, module_id: str, lesson_id: str, restart: bool = False
) -> tuple[LessonRunner, LessonSession]:
    """Resume an unfinished session, or begin from the first step."""
    row = await get_session_row(db, user_id, module_id, lesson_id)
    if row is not None and not restart:
        runner = build_runner(module_id, lesson_id, RunnerState.model_validate(row.state_json))
        if not runner.is_complete:
            return runner, row

    runner = build_runner(module_id, lesson_id)
    if row is None:
        row = LessonSession(user_id=user_id, module_id=module_id, lesson_id=lesson_id, state_json={})
        db.add(row)
    save_state(row, runner)
    await db.commit()
    return runner, row


def save_state(row: LessonSession, runner: LessonRunner) -> None:
    row.state_json = runner.state.model_dump(mode="json")
