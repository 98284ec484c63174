"""Tests for content-based step uids."""

import pytest

from zabaan.curriculum import get_lesson_steps, get_modules
from zabaan.curriculum.models import Step
from zabaan.services.step_uid import (
    StepUidError,
    derive_step_uid,
    make_step_key,
    parse_step_key,
    simple_hash,
)


class TestSimpleHash:
    def test_known_values(self):
        """FNV-1a 32-bit, base36."""
        assert simple_hash("") == "ztntfp"
        assert simple_hash("a") == "1r9wi7g"

    def test_deterministic(self):
        assert simple_hash("Salam chetori") == simple_hash("Salam chetori")
        assert simple_hash("salam") != simple_hash("Salam")


class TestDeriveStepUid:
    def test_welcome_and_final_are_fixed(self):
        assert derive_step_uid(Step(type="welcome"), 0) == "v3-welcome"
        assert derive_step_uid(Step(type="final", data={"words": []}), 9) == "v3-final-challenge"

    def test_flashcard_uses_vocabulary_id(self):
        step = Step(type="flashcard", data={"vocabularyId": "salam"})
        assert derive_step_uid(step, 1) == "v3-flashcard-salam"

    def test_uid_ignores_position(self):
        step = Step(type="quiz", data={"prompt": "What does 'Salam' mean?", "options": ["Hello"], "correct": 0})
        assert derive_step_uid(step, 2) == derive_step_uid(step, 11)
        expected = "v3-quiz-" + simple_hash("What does 'Salam' mean?-0")
        assert derive_step_uid(step, 2) == expected

    def test_quiz_prefers_vocabulary_id(self):
        step = Step(type="quiz", data={"vocabularyId": "khoobam", "prompt": "?", "correct": 0})
        assert derive_step_uid(step, 3) == "v3-quiz-khoobam"

    def test_input_sanitizes_answer(self):
        step = Step(type="input", data={"answer": "Chetori?"})
        assert derive_step_uid(step, 5) == "v3-input-chetori"

    def test_long_input_answer_is_hashed(self):
        answer = "Esme man Sara ast va az didanet khoshhalam"
        uid = derive_step_uid(Step(type="input", data={"answer": answer}), 0)
        assert uid == f"v3-input-{simple_hash('esmemansaraastvaazdidanetkhoshhalam')}"

    def test_text_sequence(self):
        step = Step(type="text-sequence", data={"finglishText": "Salam chetori"})
        assert derive_step_uid(step, 4) == "v3-text-seq-salamchetori"

    def test_audio_sequence_and_matching_hash_content(self):
        seq = Step(type="audio-sequence", data={"sequence": ["salam", "chetori"]})
        assert derive_step_uid(seq, 9) == f"v3-audio-seq-{simple_hash('salam,chetori')}"

        matching = Step(
            type="matching",
            data={"words": [{"id": "word1", "text": "Salam", "slotId": "slot1"}]},
        )
        assert derive_step_uid(matching, 6) == f"v3-matching-{simple_hash('Salam:slot1')}"

    def test_story_and_grammar(self):
        assert derive_step_uid(Step(type="story-conversation", data={"storyId": "neighbor-sara"}), 0) == (
            "v3-story-neighbor-sara"
        )
        assert derive_step_uid(Step(type="grammar-concept", data={"conceptId": "adjective-suffixes"}), 0) == (
            "v3-grammar-concept-adjective-suffixes"
        )

    @pytest.mark.parametrize(
        "step",
        [
            Step(type="flashcard", data={}),
            Step(type="quiz", data={"prompt": "no answer"}),
            Step(type="input", data={}),
            Step(type="matching", data={"words": []}),
            Step(type="story-conversation", data={}),
        ],
    )
    def test_missing_content_raises(self, step):
        with pytest.raises(StepUidError):
            derive_step_uid(step, 0, "module1", "lesson1")

    def test_unknown_type_hashes_data(self):
        uid = derive_step_uid(Step(type="mystery", data={"b": 1}), 0)
        assert uid == "v3-mystery-" + simple_hash('{"b":1}')

    def test_curriculum_uids_are_unique_per_lesson(self):
        for module in get_modules():
            for lesson in module.lessons:
                steps = get_lesson_steps(module.id, lesson.id)
                uids = [derive_step_uid(step, i, module.id, lesson.id) for i, step in enumerate(steps)]
                assert len(uids) == len(set(uids)), f"{module.id}/{lesson.id}"


class TestStepKey:
    def test_round_trip(self):
        key = make_step_key("module1", "lesson2", "v3-flashcard-merci")
        assert key == "module1:lesson2:v3-flashcard-merci"
        assert parse_step_key(key) == {"module_id": "module1", "lesson_id": "lesson2", "step_uid": "v3-flashcard-merci"}

    def test_malformed_key(self):
        assert parse_step_key("review:matching") is None
