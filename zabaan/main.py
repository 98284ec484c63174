"""Zabaan - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from zabaan.core.config import get_settings
from zabaan.core.errors import register_error_handlers
from zabaan.core.logging import configure_logging
from zabaan.db.base import Base
from zabaan.db.session import engine
from zabaan.routers import auth, billing, gamification, leaderboard, lessons, progress, review, vocabulary

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_dir, settings.log_json)
    settings.validate_required()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s started (billing %s)", settings.app_name, "on" if settings.billing_enabled else "off")

    yield


app = FastAPI(
    title="Zabaan",
    description="Persian lessons with XP, streaks and spaced review",
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(lessons.router)
app.include_router(progress.router)
app.include_router(vocabulary.router)
app.include_router(gamification.router)
app.include_router(review.router)
app.include_router(leaderboard.router)
app.include_router(billing.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
