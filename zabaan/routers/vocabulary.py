"""Vocabulary attempt tracking and word-list routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from zabaan.core.rate_limit import USER_STATS_LIMIT
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.schemas.vocabulary import AttemptSchema
from zabaan.services import vocabulary as vocab_service

router = APIRouter(prefix="/api", tags=["vocabulary"])

Limit = Annotated[int, Query(ge=1, le=100)]


@router.post("/vocabulary/attempts")
async def create_attempt(body: AttemptSchema, user: CurrentUser, db: DbSession):
    """Log one answer outside the lesson runner (games, review)."""
    summary = await vocab_service.record_attempt(db, user, **body.model_dump())
    return {"success": True, "word": summary, "streak_count": user.streak_count}


@router.get("/user-stats", dependencies=[Depends(USER_STATS_LIMIT)])
async def user_stats(user: CurrentUser, db: DbSession):
    stats = await vocab_service.get_dashboard_stats(db, user.id)
    return {"total_xp": user.total_xp, "streak_count": user.streak_count, **stats}


@router.get("/vocabulary/hard")
async def hard_words(user: CurrentUser, db: DbSession, limit: Limit = vocab_service.HARD_WORDS_LIMIT):
    return {"words": await vocab_service.get_hard_words(db, user.id, limit=limit)}


@router.get("/vocabulary/weak")
async def weak_words(user: CurrentUser, db: DbSession, limit: Limit = 20):
    return {"words": await vocab_service.get_weak_words(db, user.id, limit=limit)}


@router.get("/vocabulary/mastered")
async def mastered_words(user: CurrentUser, db: DbSession, limit: Limit = 50):
    return {"words": await vocab_service.get_mastered_words(db, user.id, limit=limit)}


@router.get("/vocabulary/learned")
async def learned_words(user: CurrentUser, db: DbSession, limit: Limit = 50):
    return {"words": await vocab_service.get_learned_words(db, user.id, limit=limit)}


@router.get("/vocabulary/review")
async def review_due(user: CurrentUser, db: DbSession, limit: Limit = 20):
    """Words whose spaced-repetition review time has passed."""
    return {"words": await vocab_service.get_words_for_review(db, user.id, limit=limit)}


@router.get("/vocabulary/words/{vocabulary_id}")
async def word_stats(vocabulary_id: str, user: CurrentUser, db: DbSession):
    stats = await vocab_service.get_word_stats(db, user.id, vocabulary_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="No attempts for this word")
    return stats
