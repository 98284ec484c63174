"""Pydantic schemas for the lesson runner endpoints."""
from pydantic import BaseModel, Field


class StartSessionSchema(BaseModel):
    restart: bool = False


class AnswerSchema(BaseModel):
    vocabulary_id: str = Field(min_length=1, max_length=64)
    is_correct: bool
    word_text: str | None = Field(default=None, max_length=255)
    time_spent_ms: int | None = Field(default=None, ge=0)


class GoBackSchema(BaseModel):
    index: int = Field(ge=0)


class SessionOutSchema(BaseModel):
    module_id: str
    lesson_id: str
    view: dict
    is_complete: bool
    in_remediation: bool
    progress_percent: int
    xp: dict | None = None
    answer: dict | None = None
    next_lesson: dict | None = None
