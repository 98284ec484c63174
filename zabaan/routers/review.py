"""Review mode routes."""
from typing import Annotated

from fastapi import APIRouter, Query

from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.schemas.vocabulary import ReviewXpSchema
from zabaan.services import review as review_service

router = APIRouter(prefix="/api/review", tags=["review"])


@router.get("/words")
async def review_words(
    user: CurrentUser,
    db: DbSession,
    filter: Annotated[str, Query(max_length=32)] = "all-learned",
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
):
    words = await review_service.get_review_words(db, user.id, filter, limit)
    return {"filter": filter, "words": words}


@router.get("/xp-status")
async def xp_status(user: CurrentUser, db: DbSession):
    return await review_service.get_review_xp_status(db, user)


@router.post("/xp")
async def review_xp(body: ReviewXpSchema, user: CurrentUser, db: DbSession):
    """Award review XP, capped per day; the action id makes repeats no-ops."""
    return await review_service.award_review_xp(
        db, user, body.game_type, body.action_id, body.amount, metadata=body.metadata
    )
