"""Curriculum and lesson-runner routes."""
from fastapi import APIRouter, HTTPException

from zabaan.core.errors import AuthorizationError, ValidationError
from zabaan.core.retry import with_db_retry
from zabaan.curriculum import get_lesson, get_module, is_valid_lesson_id, is_valid_module_id
from zabaan.models.lesson_progress import STATUS_NOT_STARTED
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.schemas.lesson import AnswerSchema, GoBackSchema, SessionOutSchema, StartSessionSchema
from zabaan.services.lesson_progress import (
    completed_lessons,
    get_user_progress,
    is_lesson_unlocked_in_module,
    mark_lesson_completed,
    mark_lesson_started,
    module_completion_percentage,
    next_sequential_lesson,
    update_lesson_percent,
)
from zabaan.services.lesson_runner import LessonRunner
from zabaan.services.lesson_session import load_runner, save_state, start_runner
from zabaan.services.leveling import check_level_up
from zabaan.services.module_access import can_access_module, modules_with_access
from zabaan.services.step_uid import derive_step_uid
from zabaan.services.vocabulary import record_attempt
from zabaan.services.xp import award_xp_once, get_step_xp

router = APIRouter(prefix="/api", tags=["lessons"])


def _check_ids(module_id: str, lesson_id: str | None = None) -> None:
    if not is_valid_module_id(module_id):
        raise HTTPException(status_code=400, detail="Invalid module id")
    if lesson_id is not None and not is_valid_lesson_id(lesson_id):
        raise HTTPException(status_code=400, detail="Invalid lesson id")


async def _require_access(db, user, module_id: str, lesson_id: str | None = None) -> None:
    access = await can_access_module(db, user.id, module_id)
    if not access["can_access"]:
        raise AuthorizationError(f"Module locked: {access['reason']}")
    if lesson_id is not None:
        completed = await completed_lessons(db, user.id)
        if not is_lesson_unlocked_in_module(module_id, lesson_id, completed):
            raise AuthorizationError("Complete the previous lesson first")


def _session_out(module_id, lesson_id, runner: LessonRunner, xp=None, answer=None, next_lesson=None) -> SessionOutSchema:
    return SessionOutSchema(
        module_id=module_id,
        lesson_id=lesson_id,
        view=runner.current_view(),
        is_complete=runner.is_complete,
        in_remediation=runner.state.in_remediation,
        progress_percent=runner.progress_percent,
        xp=xp,
        answer=answer,
        next_lesson=next_lesson,
    )


async def _persist(db, user, row, runner: LessonRunner) -> None:
    async def write() -> None:
        save_state(row, runner)
        await db.commit()

    await with_db_retry(db, write, label="save lesson session", refresh=[user, row])


async def _record_position(db, user, module_id: str, lesson_id: str, runner: LessonRunner) -> dict | None:
    """Store the lesson percent; on completion return where the learner goes next."""
    if not runner.is_complete:
        await update_lesson_percent(db, user, module_id, lesson_id, runner.progress_percent)
        return None
    await mark_lesson_completed(db, user, module_id, lesson_id)
    next_module, next_lesson = next_sequential_lesson(module_id, lesson_id, await completed_lessons(db, user.id))
    return {"module_id": next_module, "lesson_id": next_lesson}


async def _load(db, user, module_id: str, lesson_id: str):
    _check_ids(module_id, lesson_id)
    return await load_runner(db, user.id, module_id, lesson_id)


@router.get("/modules")
async def list_modules(user: CurrentUser, db: DbSession):
    """All modules with the caller's access state."""
    return {"modules": await modules_with_access(db, user.id)}


@router.get("/modules/{module_id}")
async def get_module_detail(module_id: str, user: CurrentUser, db: DbSession):
    _check_ids(module_id)
    module = get_module(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail="Module not found")

    access = await can_access_module(db, user.id, module_id)
    completed = await completed_lessons(db, user.id)
    status = {row.lesson_id: row.status for row in await get_user_progress(db, user.id, module_id)}
    lessons = [
        {
            "id": lesson.id,
            "title": lesson.title,
            "description": lesson.description,
            "step_count": len(lesson.steps),
            "status": status.get(lesson.id, STATUS_NOT_STARTED),
            "unlocked": access["can_access"] and is_lesson_unlocked_in_module(module_id, lesson.id, completed),
        }
        for lesson in module.lessons
    ]
    return {
        "id": module.id,
        "title": module.title,
        "description": module.description,
        "available": module.available,
        "requires_premium": module.requires_premium,
        "completion_percent": module_completion_percentage(module_id, completed),
        "access": access,
        "lessons": lessons,
    }


@router.get("/modules/{module_id}/lessons/{lesson_id}")
async def get_lesson_detail(module_id: str, lesson_id: str, user: CurrentUser, db: DbSession):
    """Lesson content with the stable uid of every step."""
    _check_ids(module_id, lesson_id)
    lesson = get_lesson(module_id, lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    await _require_access(db, user, module_id)

    body = lesson.model_dump()
    for index, (step, data) in enumerate(zip(lesson.steps, body["steps"])):
        data["step_uid"] = derive_step_uid(step, index, module_id, lesson_id)
    return body


@router.post("/modules/{module_id}/lessons/{lesson_id}/session/start", response_model=SessionOutSchema)
async def start_session(
    module_id: str,
    lesson_id: str,
    user: CurrentUser,
    db: DbSession,
    body: StartSessionSchema | None = None,
):
    """Resume the lesson where the learner left off, or start over with ``restart``."""
    _check_ids(module_id, lesson_id)
    if get_lesson(module_id, lesson_id) is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    await _require_access(db, user, module_id, lesson_id)

    runner, _ = await start_runner(db, user.id, module_id, lesson_id, restart=bool(body and body.restart))
    await mark_lesson_started(db, user, module_id, lesson_id)
    return _session_out(module_id, lesson_id, runner)


@router.get("/modules/{module_id}/lessons/{lesson_id}/session", response_model=SessionOutSchema)
async def get_session(module_id: str, lesson_id: str, user: CurrentUser, db: DbSession):
    runner, _ = await _load(db, user, module_id, lesson_id)
    return _session_out(module_id, lesson_id, runner)


@router.post("/modules/{module_id}/lessons/{lesson_id}/session/answer", response_model=SessionOutSchema)
async def answer(module_id: str, lesson_id: str, body: AnswerSchema, user: CurrentUser, db: DbSession):
    """Record one answer on the current step or remediation quiz.

    Every answer is logged; only the first answer per word and step feeds the
    remediation counters.
    """
    runner, row = await _load(db, user, module_id, lesson_id)
    if runner.is_complete:
        raise ValidationError("Lesson is already complete")

    step = runner.current_step
    uid = runner.step_uid()
    step_index = runner.state.index
    in_remediation = runner.state.in_remediation
    outcome = runner.record_answer(body.vocabulary_id, body.is_correct)
    await _persist(db, user, row, runner)

    word = runner.vocabulary.get(body.vocabulary_id)
    await record_attempt(
        db,
        user,
        body.vocabulary_id,
        body.word_text or (word.finglish if word else body.vocabulary_id),
        step.type if step else "unknown",
        body.is_correct,
        time_spent_ms=body.time_spent_ms,
        module_id=module_id,
        lesson_id=lesson_id,
        step_uid=uid,
        context_data={"step_index": step_index, "is_remediation": in_remediation, "is_retry": not outcome.counted},
    )
    return _session_out(module_id, lesson_id, runner, answer=outcome.model_dump())


@router.post("/modules/{module_id}/lessons/{lesson_id}/session/advance", response_model=SessionOutSchema)
async def advance(module_id: str, lesson_id: str, user: CurrentUser, db: DbSession):
    """Finish the current step: award its XP once, then move on or enter remediation."""
    runner, row = await _load(db, user, module_id, lesson_id)
    if runner.is_complete:
        return _session_out(module_id, lesson_id, runner)
    if runner.state.in_remediation:
        raise ValidationError("Finish the review words first")

    step = runner.current_step
    uid = runner.step_uid()

    # award before advancing; a failed write keeps the learner on this step
    xp = None
    reward = get_step_xp(step)
    if reward["amount"] > 0:
        old_xp = user.total_xp or 0
        result = await with_db_retry(
            db,
            lambda: award_xp_once(
                db, user, module_id, lesson_id, uid, reward["amount"], reward["source"], {"step_type": step.type}
            ),
            label=f"award xp {module_id}/{lesson_id}/{uid}",
            refresh=[user],
        )
        xp = {**result, "amount": reward["amount"], "source": reward["source"], **check_level_up(old_xp, user.total_xp)}

    runner.advance()
    await _persist(db, user, row, runner)
    next_lesson = await _record_position(db, user, module_id, lesson_id, runner)
    return _session_out(module_id, lesson_id, runner, xp=xp, next_lesson=next_lesson)


@router.post(
    "/modules/{module_id}/lessons/{lesson_id}/session/remediation/complete",
    response_model=SessionOutSchema,
)
async def complete_remediation(module_id: str, lesson_id: str, user: CurrentUser, db: DbSession):
    """Move past the current remediation card, or past a quiz answered correctly."""
    runner, row = await _load(db, user, module_id, lesson_id)
    if not runner.state.in_remediation:
        raise ValidationError("No remediation in progress")

    try:
        runner.complete_remediation_item()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    await _persist(db, user, row, runner)
    next_lesson = None
    if not runner.state.in_remediation:
        next_lesson = await _record_position(db, user, module_id, lesson_id, runner)
    return _session_out(module_id, lesson_id, runner, next_lesson=next_lesson)


@router.post("/modules/{module_id}/lessons/{lesson_id}/session/back", response_model=SessionOutSchema)
async def go_back(module_id: str, lesson_id: str, body: GoBackSchema, user: CurrentUser, db: DbSession):
    runner, row = await _load(db, user, module_id, lesson_id)
    try:
        runner.go_back(body.index)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    await _persist(db, user, row, runner)
    return _session_out(module_id, lesson_id, runner)
