"""Tests for premium gating and module prerequisites."""

from zabaan.curriculum import get_module
from zabaan.services.lesson_progress import (
    first_available_lesson,
    is_lesson_accessible,
    is_lesson_unlocked_in_module,
    module_completion_percentage,
    next_sequential_lesson,
)
from zabaan.services.module_access import REASON_INCOMPLETE_PREREQUISITES, REASON_NO_PREMIUM, evaluate_access

MODULE1_DONE = {("module1", lesson.id) for lesson in get_module("module1").lessons}


class TestEvaluateAccess:
    def test_free_module_is_open(self):
        access = evaluate_access("module1", premium=False, completed=set())
        assert access["can_access"] is True
        assert access["reason"] is None

    def test_premium_module_without_premium(self):
        access = evaluate_access("module2", premium=False, completed=MODULE1_DONE)
        assert access["can_access"] is False
        assert access["reason"] == REASON_NO_PREMIUM

    def test_premium_user_with_prerequisites(self):
        access = evaluate_access("module2", premium=True, completed=MODULE1_DONE)
        assert access["can_access"] is True
        assert access["prerequisites_complete"] is True

    def test_premium_user_skips_prerequisites(self):
        access = evaluate_access("module3", premium=True, completed=set())
        assert access["can_access"] is True
        assert access["prerequisites_complete"] is False
        assert access["missing_prerequisites"] == ["module1", "module2"]

    def test_free_user_reason_prefers_payment(self):
        access = evaluate_access("module3", premium=False, completed=set())
        assert access["reason"] == REASON_NO_PREMIUM

    def test_unknown_module(self):
        access = evaluate_access("module42", premium=True, completed=set())
        assert access["can_access"] is False
        assert access["reason"] == "not_found"

    def test_incomplete_prerequisites_reason(self, monkeypatch):
        monkeypatch.setattr(get_module("module2"), "requires_premium", False)
        access = evaluate_access("module2", premium=False, completed={("module1", "lesson1")})
        assert access["can_access"] is False
        assert access["reason"] == REASON_INCOMPLETE_PREREQUISITES


class TestLessonUnlocking:
    def test_first_lesson_of_course(self):
        assert is_lesson_accessible("module1", "lesson1", set())

    def test_sequential_lessons(self):
        assert not is_lesson_accessible("module1", "lesson2", set())
        assert is_lesson_accessible("module1", "lesson2", {("module1", "lesson1")})

    def test_first_lesson_of_module_is_unlocked(self):
        assert is_lesson_unlocked_in_module("module2", "lesson1", set())
        assert not is_lesson_unlocked_in_module("module2", "lesson2", set())
        assert not is_lesson_unlocked_in_module("module2", "lesson9", set())

    def test_first_available_lesson(self):
        assert first_available_lesson(set()) == ("module1", "lesson1")
        assert first_available_lesson({("module1", "lesson1")}) == ("module1", "lesson2")

    def test_next_sequential_lesson_crosses_modules(self):
        assert next_sequential_lesson("module1", "lesson1", set()) == ("module1", "lesson2")
        assert next_sequential_lesson("module1", "lesson3", MODULE1_DONE) == ("module2", "lesson1")

    def test_next_sequential_lesson_unknown_falls_back(self):
        assert next_sequential_lesson("module9", "lesson1", {("module1", "lesson1")}) == ("module1", "lesson2")

    def test_completion_percentage(self):
        assert module_completion_percentage("module1", {("module1", "lesson1")}) == 33
        assert module_completion_percentage("module1", MODULE1_DONE) == 100
