"""Pydantic schemas for XP, daily goal and sync."""
from pydantic import BaseModel, Field


class DailyGoalUpdateSchema(BaseModel):
    goal_xp: int = Field(ge=1, le=1000)


class XpSyncItemSchema(BaseModel):
    amount: int = Field(ge=0, le=100)
    source: str = Field(min_length=1, max_length=64)
    idempotency_key: str = Field(min_length=1, max_length=255)
    lesson_id: str | None = Field(default=None, max_length=64)
    metadata: dict | None = None
    timestamp: int | None = None  # client clock, ms since epoch


class XpSyncSchema(BaseModel):
    transactions: list[XpSyncItemSchema] = Field(max_length=100)
