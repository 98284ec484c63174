"""Tests for the lesson runner and its remediation flow."""

import pytest

from zabaan.curriculum import get_lesson_steps, get_lesson_vocabulary
from zabaan.services.lesson_runner import LessonRunner, RunnerState


@pytest.fixture
def runner():
    """Module 1, lesson 1: welcome, flashcard salam, quiz salam, flashcard chetori, ..."""
    return LessonRunner(
        get_lesson_steps("module1", "lesson1"),
        get_lesson_vocabulary("module1", "lesson1"),
        module_id="module1",
        lesson_id="lesson1",
    )


def advance_to(runner, index):
    while runner.state.index < index:
        runner.advance()


def enter_remediation(runner, *words):
    """Miss each word on two consecutive steps from the current one, then start remediation."""
    for _ in range(2):
        for word in words:
            runner.record_answer(word, False)
        runner.advance()
    assert runner.state.in_remediation


class TestSequence:
    def test_starts_at_welcome(self, runner):
        view = runner.current_view()
        assert view["kind"] == "step"
        assert view["step"]["type"] == "welcome"
        assert view["step_uid"] == "v3-welcome"

    def test_advance_to_completion(self, runner):
        for _ in range(len(runner.steps)):
            runner.advance()
        assert runner.is_complete
        assert runner.progress_percent == 100
        assert runner.current_view()["kind"] == "complete"

    def test_advance_past_end_is_noop(self, runner):
        advance_to(runner, len(runner.steps))
        runner.advance()
        assert runner.state.index == len(runner.steps)

    def test_go_back(self, runner):
        advance_to(runner, 5)
        runner.go_back(2)
        assert runner.state.index == 2

    def test_go_back_out_of_range(self, runner):
        with pytest.raises(ValueError):
            runner.go_back(99)


class TestRemediation:
    def test_two_misses_on_different_steps_trigger_remediation(self, runner):
        advance_to(runner, 2)
        first = runner.record_answer("salam", False)
        assert first.counted and first.incorrect_count == 1 and not first.remediation_queued
        runner.advance()

        second = runner.record_answer("salam", False)
        assert second.remediation_queued
        assert not runner.state.in_remediation

        runner.advance()
        assert runner.state.in_remediation
        view = runner.current_view()
        assert view["kind"] == "remediation-flashcard"
        assert view["vocabulary"]["id"] == "salam"
        assert view["index"] == 3

        runner.complete_remediation_item()
        quiz = runner.current_view()
        assert quiz["kind"] == "remediation-quiz"
        correct = [o["text"] for o in quiz["quiz"]["options"] if o["correct"]]
        assert correct == ["Hello"]
        assert len(quiz["quiz"]["options"]) == 4

        runner.record_answer("salam", True)
        runner.complete_remediation_item()
        assert not runner.state.in_remediation
        assert runner.state.index == 4
        assert runner.current_view()["kind"] == "step"

    def test_quiz_must_be_answered_correctly(self, runner):
        enter_remediation(runner, "salam")
        runner.complete_remediation_item()

        runner.record_answer("salam", False)
        with pytest.raises(ValueError):
            runner.complete_remediation_item()
        assert runner.current_view()["kind"] == "remediation-quiz"

        runner.record_answer("salam", True)
        runner.complete_remediation_item()
        assert not runner.state.in_remediation

    def test_correct_flashcard_answer_does_not_pass_the_quiz(self, runner):
        enter_remediation(runner, "salam")
        runner.record_answer("salam", True)
        runner.complete_remediation_item()
        with pytest.raises(ValueError):
            runner.complete_remediation_item()

    def test_queued_words_are_remediated_in_order(self, runner):
        advance_to(runner, 2)
        enter_remediation(runner, "salam", "chetori")
        assert runner.state.remediation_queue == ["salam", "chetori"]

        seen = []
        while runner.state.in_remediation:
            view = runner.current_view()
            word = view["vocabulary"]["id"]
            seen.append((view["kind"], word, view["remaining"]))
            if view["kind"] == "remediation-quiz":
                runner.record_answer(word, True)
            runner.complete_remediation_item()

        assert seen == [
            ("remediation-flashcard", "salam", 2),
            ("remediation-quiz", "salam", 2),
            ("remediation-flashcard", "chetori", 1),
            ("remediation-quiz", "chetori", 1),
        ]
        assert runner.state.index == 4

    def test_complete_on_empty_queue_is_noop(self, runner):
        advance_to(runner, 3)
        runner.complete_remediation_item()
        assert runner.state.index == 3
        assert not runner.state.in_remediation

        enter_remediation(runner, "salam")
        runner.complete_remediation_item()
        runner.record_answer("salam", True)
        runner.complete_remediation_item()
        assert runner.state.index == 5
        runner.complete_remediation_item()
        assert runner.state.index == 5

    def test_retry_on_same_step_is_not_counted(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        retry = runner.record_answer("salam", False)
        assert retry.counted is False
        assert retry.incorrect_count == 1
        assert runner.state.pending_remediation == []

    def test_word_is_remediated_once_per_session(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        runner.advance()
        runner.record_answer("salam", False)
        runner.advance()
        runner.complete_remediation_item()
        runner.record_answer("salam", True)
        runner.complete_remediation_item()

        runner.record_answer("salam", False)
        outcome = runner.record_answer("salam", True)
        assert outcome.remediation_queued is False
        runner.advance()
        assert not runner.state.in_remediation

    def test_answers_during_remediation_reset_the_counter(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        runner.advance()
        runner.record_answer("salam", False)
        runner.advance()

        outcome = runner.record_answer("salam", False)
        assert outcome.in_remediation and outcome.counted
        assert runner.state.incorrect_attempts["salam"] == 0

    def test_advance_is_blocked_during_remediation(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        runner.advance()
        runner.record_answer("salam", False)
        runner.advance()
        runner.advance()
        assert runner.state.in_remediation
        assert runner.state.index == 3

    def test_remediation_step_uid_is_the_trigger_step(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        runner.advance()
        trigger_uid = runner.step_uid()
        runner.record_answer("salam", False)
        runner.advance()
        assert runner.step_uid() == trigger_uid == "v3-flashcard-chetori"

    def test_unknown_word_is_skipped(self):
        steps = get_lesson_steps("module1", "lesson1")
        runner = LessonRunner(steps, [], module_id="module1", lesson_id="lesson1")
        advance_to(runner, 2)
        runner.record_answer("ghost", False)
        runner.advance()
        runner.record_answer("ghost", False)
        runner.advance()
        assert not runner.state.in_remediation
        assert runner.state.index == 4

    def test_quiz_options_are_stable(self, runner):
        assert runner.remediation_quiz("chetori") == runner.remediation_quiz("chetori")
        assert runner.remediation_quiz("ghost") is None


class TestPersistence:
    def test_state_survives_json(self, runner):
        advance_to(runner, 2)
        runner.record_answer("salam", False)
        runner.advance()
        runner.record_answer("salam", False)

        dumped = runner.state.model_dump(mode="json")
        restored = LessonRunner(
            runner.steps,
            list(runner.vocabulary.values()),
            RunnerState.model_validate(dumped),
            "module1",
            "lesson1",
        )
        assert restored.state.tracked_step_keys == {"salam-2", "salam-3"}
        restored.advance()
        assert restored.current_view()["kind"] == "remediation-flashcard"
