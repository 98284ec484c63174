"""Pydantic schemas for vocabulary tracking and review."""
from pydantic import BaseModel, Field


class AttemptSchema(BaseModel):
    vocabulary_id: str = Field(min_length=1, max_length=64)
    word_text: str = Field(min_length=1, max_length=255)
    game_type: str = Field(min_length=1, max_length=32)
    is_correct: bool
    time_spent_ms: int | None = Field(default=None, ge=0)
    module_id: str | None = Field(default=None, max_length=20)
    lesson_id: str | None = Field(default=None, max_length=20)
    step_uid: str | None = Field(default=None, max_length=128)
    context_data: dict | None = None


class ReviewXpSchema(BaseModel):
    game_type: str = Field(min_length=1, max_length=32, pattern=r"^[a-z0-9-]+$")
    action_id: str = Field(min_length=1, max_length=128)
    amount: int = Field(default=1, ge=1, le=100)
    metadata: dict | None = None
