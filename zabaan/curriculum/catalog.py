"""Lookups over the static curriculum."""
import re

from zabaan.curriculum.content import CURRICULUM
from zabaan.curriculum.models import Lesson, Module, Step, VocabularyItem

MODULE_ID_RE = re.compile(r"^module\d+$")
LESSON_ID_RE = re.compile(r"^lesson\d+$")
MAX_ID_LENGTH = 20


def is_valid_module_id(module_id: str | None) -> bool:
    return bool(module_id) and len(module_id) <= MAX_ID_LENGTH and bool(MODULE_ID_RE.match(module_id))


def is_valid_lesson_id(lesson_id: str | None) -> bool:
    return bool(lesson_id) and len(lesson_id) <= MAX_ID_LENGTH and bool(LESSON_ID_RE.match(lesson_id))


def get_modules() -> list[Module]:
    return CURRICULUM


def get_module(module_id: str) -> Module | None:
    for module in CURRICULUM:
        if module.id == module_id:
            return module
    return None


def get_lesson(module_id: str, lesson_id: str) -> Lesson | None:
    module = get_module(module_id)
    if module is None:
        return None
    for lesson in module.lessons:
        if lesson.id == lesson_id:
            return lesson
    return None


def get_lesson_steps(module_id: str, lesson_id: str) -> list[Step]:
    lesson = get_lesson(module_id, lesson_id)
    return list(lesson.steps) if lesson else []


def get_all_vocabulary() -> list[VocabularyItem]:
    """Every vocabulary item in course order, first definition wins."""
    seen = set()
    items = []
    for module in CURRICULUM:
        for lesson in module.lessons:
            for item in lesson.vocabulary:
                if item.id not in seen:
                    seen.add(item.id)
                    items.append(item)
    return items


def find_vocabulary(vocabulary_id: str) -> VocabularyItem | None:
    for item in get_all_vocabulary():
        if item.id == vocabulary_id:
            return item
    return None


def get_lesson_vocabulary(module_id: str, lesson_id: str, include_review: bool = True) -> list[VocabularyItem]:
    """The lesson's own words, followed by the review words it pulls in from earlier lessons."""
    lesson = get_lesson(module_id, lesson_id)
    if lesson is None:
        return []
    items = list(lesson.vocabulary)
    if include_review:
        own = {item.id for item in items}
        for vid in lesson.review_vocabulary:
            if vid in own:
                continue
            item = find_vocabulary(vid)
            if item is not None:
                items.append(item)
                own.add(vid)
    return items


def iter_lessons() -> list[tuple[str, str]]:
    """(module_id, lesson_id) for every lesson of every available module, in course order."""
    return [(module.id, lesson.id) for module in CURRICULUM if module.available for lesson in module.lessons]


def previous_modules(module_id: str) -> list[Module]:
    """Modules that come before ``module_id`` in the course."""
    result = []
    for module in CURRICULUM:
        if module.id == module_id:
            return result
        result.append(module)
    return []
