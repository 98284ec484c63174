"""
Lesson runner state machine.

The runner walks a lesson's steps in order. A word answered incorrectly on two
different steps is queued for remediation; once the learner finishes the
current step they see a flashcard and then a quiz for each queued word. A quiz
has to be answered correctly before the next word comes up. The main sequence
then resumes at the step after the one that triggered remediation.

State lives in ``RunnerState`` (a pydantic model) so it can be stored as JSON
between requests and rebuilt with ``LessonRunner(steps, vocabulary, state)``.
"""
import logging
import random
from typing import Literal

from pydantic import BaseModel, Field

from zabaan.curriculum.models import Step, VocabularyItem
from zabaan.services.step_uid import derive_step_uid

logger = logging.getLogger(__name__)

REMEDIATION_THRESHOLD = 2
QUIZ_DISTRACTORS = 3


class RunnerState(BaseModel):
    index: int = 0
    in_remediation: bool = False
    remediation_phase: Literal["flashcard", "quiz"] = "flashcard"
    quiz_passed: bool = False
    remediation_queue: list[str] = Field(default_factory=list)
    pending_remediation: list[str] = Field(default_factory=list)
    remediation_start_index: int | None = None
    incorrect_attempts: dict[str, int] = Field(default_factory=dict)
    remediation_triggered: set[str] = Field(default_factory=set)
    tracked_step_keys: set[str] = Field(default_factory=set)


class AnswerOutcome(BaseModel):
    counted: bool  # False for a retry on the same step
    in_remediation: bool
    incorrect_count: int
    remediation_queued: bool = False


class LessonRunner:
    def __init__(
        self,
        steps: list[Step],
        vocabulary: list[VocabularyItem],
        state: RunnerState | None = None,
        module_id: str | None = None,
        lesson_id: str | None = None,
    ):
        self.steps = steps
        self.vocabulary = {item.id: item for item in vocabulary}
        self.state = state or RunnerState()
        self.module_id = module_id
        self.lesson_id = lesson_id

    @property
    def is_complete(self) -> bool:
        return self.state.index >= len(self.steps) and not self.state.in_remediation

    @property
    def current_step(self) -> Step | None:
        if 0 <= self.state.index < len(self.steps):
            return self.steps[self.state.index]
        return None

    def step_uid(self, index: int | None = None) -> str | None:
        """Uid of the step at ``index``; during remediation, the step that triggered it."""
        if index is None:
            index = self.state.remediation_start_index if self.state.in_remediation else self.state.index
        if index is None or not 0 <= index < len(self.steps):
            return None
        return derive_step_uid(self.steps[index], index, self.module_id, self.lesson_id)

    def record_answer(self, vocabulary_id: str, is_correct: bool) -> AnswerOutcome:
        state = self.state

        if state.in_remediation:
            state.incorrect_attempts[vocabulary_id] = 0
            if (
                is_correct
                and state.remediation_phase == "quiz"
                and state.remediation_queue
                and state.remediation_queue[0] == vocabulary_id
            ):
                state.quiz_passed = True
            return AnswerOutcome(counted=True, in_remediation=True, incorrect_count=0)

        step_key = f"{vocabulary_id}-{state.index}"
        if step_key in state.tracked_step_keys:
            return AnswerOutcome(
                counted=False,
                in_remediation=False,
                incorrect_count=state.incorrect_attempts.get(vocabulary_id, 0),
            )
        state.tracked_step_keys.add(step_key)

        count = state.incorrect_attempts.get(vocabulary_id, 0)
        if is_correct:
            return AnswerOutcome(counted=True, in_remediation=False, incorrect_count=count)

        count += 1
        state.incorrect_attempts[vocabulary_id] = count
        queued = False
        if count >= REMEDIATION_THRESHOLD and vocabulary_id not in state.remediation_triggered:
            state.remediation_triggered.add(vocabulary_id)
            if vocabulary_id not in state.pending_remediation:
                state.pending_remediation.append(vocabulary_id)
            queued = True
            logger.debug("Remediation queued for %s at step %d", vocabulary_id, state.index)
        return AnswerOutcome(counted=True, in_remediation=False, incorrect_count=count, remediation_queued=queued)

    def advance(self) -> None:
        """Finish the current main step: start pending remediation, or move to the next step."""
        state = self.state
        if state.in_remediation:
            return
        if state.pending_remediation:
            state.remediation_queue = list(state.pending_remediation)
            state.pending_remediation = []
            state.in_remediation = True
            state.remediation_phase = "flashcard"
            state.quiz_passed = False
            state.remediation_start_index = state.index
            self._drop_unknown_words()
            if not state.remediation_queue:
                self._finish_remediation()
            return
        if state.index < len(self.steps):
            state.index += 1

    def complete_remediation_item(self) -> None:
        """Flashcard moves on to the quiz; a passed quiz moves on to the next queued word.

        Raises ``ValueError`` when the quiz has not been answered correctly yet.
        """
        state = self.state
        if not state.in_remediation or not state.remediation_queue:
            return
        if state.remediation_phase == "flashcard":
            state.remediation_phase = "quiz"
            return
        if not state.quiz_passed:
            raise ValueError("Answer the quiz correctly first")
        state.remediation_queue.pop(0)
        state.remediation_phase = "flashcard"
        state.quiz_passed = False
        self._drop_unknown_words()
        if not state.remediation_queue:
            self._finish_remediation()

    def go_back(self, index: int) -> None:
        if not 0 <= index < len(self.steps):
            raise ValueError(f"Step index {index} out of range")
        state = self.state
        state.index = index
        state.in_remediation = False
        state.remediation_phase = "flashcard"
        state.quiz_passed = False
        state.remediation_queue = []
        state.pending_remediation = []
        state.remediation_start_index = None

    def _drop_unknown_words(self) -> None:
        state = self.state
        while state.remediation_queue and state.remediation_queue[0] not in self.vocabulary:
            logger.warning("Remediation vocabulary not found: %s", state.remediation_queue[0])
            state.remediation_queue.pop(0)

    def _finish_remediation(self) -> None:
        state = self.state
        state.in_remediation = False
        state.remediation_phase = "flashcard"
        state.quiz_passed = False
        state.index = state.remediation_start_index + 1
        state.remediation_start_index = None

    def remediation_quiz(self, vocabulary_id: str) -> dict | None:
        """Multiple-choice quiz for a word; same options in the same order every time."""
        target = self.vocabulary.get(vocabulary_id)
        if target is None:
            return None
        rng = random.Random(vocabulary_id)
        pool = sorted({item.en for item in self.vocabulary.values() if item.id != vocabulary_id and item.en != target.en})
        distractors = rng.sample(pool, min(QUIZ_DISTRACTORS, len(pool)))
        options = [{"text": target.en, "correct": True}] + [{"text": text, "correct": False} for text in distractors]
        rng.shuffle(options)
        return {"prompt": f'What does "{target.finglish}" mean?', "options": options}

    def current_view(self) -> dict:
        state = self.state
        if state.in_remediation and state.remediation_queue:
            word_id = state.remediation_queue[0]
            word = self.vocabulary[word_id]
            view = {
                "kind": f"remediation-{state.remediation_phase}",
                "index": state.remediation_start_index,
                "vocabulary": word.model_dump(),
                "remaining": len(state.remediation_queue),
            }
            if state.remediation_phase == "quiz":
                view["quiz"] = self.remediation_quiz(word_id)
            return view

        if self.is_complete:
            return {"kind": "complete", "index": state.index, "total_steps": len(self.steps)}

        step = self.current_step
        return {
            "kind": "step",
            "index": state.index,
            "total_steps": len(self.steps),
            "step": step.model_dump(),
            "step_uid": self.step_uid(),
        }

    @property
    def progress_percent(self) -> int:
        if not self.steps:
            return 100
        return min(100, round(self.state.index / len(self.steps) * 100))
