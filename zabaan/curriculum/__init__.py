from zabaan.curriculum.catalog import (
    find_vocabulary,
    get_all_vocabulary,
    get_lesson,
    get_lesson_steps,
    get_lesson_vocabulary,
    get_module,
    get_modules,
    is_valid_lesson_id,
    is_valid_module_id,
    iter_lessons,
    previous_modules,
)
from zabaan.curriculum.models import STEP_TYPES, Lesson, Module, Step, VocabularyItem

__all__ = [
    "STEP_TYPES",
    "Lesson",
    "Module",
    "Step",
    "VocabularyItem",
    "find_vocabulary",
    "get_all_vocabulary",
    "get_lesson",
    "get_lesson_steps",
    "get_lesson_vocabulary",
    "get_module",
    "get_modules",
    "is_valid_lesson_id",
    "is_valid_module_id",
    "iter_lessons",
    "previous_modules",
]
