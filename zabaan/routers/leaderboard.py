"""Public leaderboard route."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from zabaan.core.rate_limit import LEADERBOARD_LIMIT
from zabaan.routers.deps import DbSession
from zabaan.services.leaderboard import DEFAULT_LIMIT, MAX_LIMIT, get_leaderboard

router = APIRouter(prefix="/api", tags=["leaderboard"])


@router.get("/leaderboard", dependencies=[Depends(LEADERBOARD_LIMIT)])
async def leaderboard(
    response: Response,
    db: DbSession,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    response.headers["Cache-Control"] = "no-store, max-age=0"
    return await get_leaderboard(db, limit=limit, offset=offset)
