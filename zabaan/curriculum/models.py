"""Pydantic types for static curriculum content."""
from typing import Any

from pydantic import BaseModel, Field

STEP_TYPES = (
    "welcome",
    "flashcard",
    "quiz",
    "reverse-quiz",
    "input",
    "matching",
    "audio-meaning",
    "audio-sequence",
    "text-sequence",
    "grammar-concept",
    "story-conversation",
    "final",
)


class VocabularyItem(BaseModel):
    id: str
    en: str
    fa: str
    finglish: str
    phonetic: str | None = None
    lesson_id: str | None = None  # "module1-lesson1"


class Step(BaseModel):
    type: str
    points: int | None = None
    title: str | None = None
    description: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class Lesson(BaseModel):
    id: str
    title: str
    description: str = ""
    vocabulary: list[VocabularyItem] = Field(default_factory=list)
    review_vocabulary: list[str] = Field(default_factory=list)
    steps: list[Step] = Field(default_factory=list)


class Module(BaseModel):
    id: str
    title: str
    description: str = ""
    available: bool = True
    requires_premium: bool = False
    lessons: list[Lesson] = Field(default_factory=list)
