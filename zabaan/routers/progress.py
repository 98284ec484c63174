"""Lesson progress routes."""
from fastapi import APIRouter

from zabaan.models.lesson_progress import STATUS_COMPLETED
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.services.lesson_progress import (
    first_available_lesson,
    get_user_progress,
    progress_to_dict,
    reset_all_progress,
)

router = APIRouter(prefix="/api", tags=["progress"])


@router.get("/progress")
async def get_progress(user: CurrentUser, db: DbSession):
    rows = await get_user_progress(db, user.id)
    completed = {(r.module_id, r.lesson_id) for r in rows if r.status == STATUS_COMPLETED}
    module_id, lesson_id = first_available_lesson(completed)
    return {
        "lessons": [progress_to_dict(r) for r in rows],
        "completed_count": len(completed),
        "next_lesson": {"module_id": module_id, "lesson_id": lesson_id},
    }


@router.post("/progress/reset")
async def reset_progress(user: CurrentUser, db: DbSession):
    """Delete all lesson, vocabulary and XP history for the caller."""
    await reset_all_progress(db, user)
    return {"success": True, "total_xp": 0}
