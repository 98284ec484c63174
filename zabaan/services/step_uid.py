"""
Stable, content-based step identifiers.

A step uid never depends on the step's position, so reordering a lesson does
not let a learner earn the same step's XP twice. Uids are combined with the
module and lesson into the XP idempotency key ``module:lesson:uid``.
"""
import json
import logging
import re

from zabaan.curriculum.models import Step

logger = logging.getLogger(__name__)

UID_VERSION = "v3"

_FNV_OFFSET = 2166136261
_FNV_PRIME = 16777619
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_NON_ALNUM = re.compile(r"[^a-z0-9]", re.IGNORECASE)


class StepUidError(ValueError):
    """A step lacks the content its uid is derived from."""


def simple_hash(text: str) -> str:
    """32-bit FNV-1a over UTF-16 code units, base36 encoded."""
    h = _FNV_OFFSET
    raw = text.encode("utf-16-le")
    for i in range(0, len(raw), 2):
        h ^= raw[i] | (raw[i + 1] << 8)
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return _to_base36(h)


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _sanitize(text: str) -> str:
    return _NON_ALNUM.sub("", text).lower()


def _prompt_uid(kind: str, data: dict, where: str) -> str:
    vocab_id = data.get("vocabularyId")
    if vocab_id:
        return f"{UID_VERSION}-{kind}-{vocab_id}"
    prompt = data.get("prompt")
    correct = data.get("correct")
    if prompt is not None and correct is not None:
        return f"{UID_VERSION}-{kind}-{simple_hash(f'{prompt}-{correct}')}"
    raise StepUidError(f"[{where}] {kind} step missing vocabularyId or (prompt + correct)")


def derive_step_uid(step: Step, index: int, module_id: str | None = None, lesson_id: str | None = None) -> str:
    """Return the uid for ``step``; ``index`` only appears in error messages."""
    where = f"{module_id}/{lesson_id} step {index}" if module_id and lesson_id else f"unknown step {index}"
    data = step.data or {}
    kind = step.type

    if kind == "welcome":
        return f"{UID_VERSION}-welcome"

    if kind in ("flashcard", "audio-meaning"):
        vocab_id = data.get("vocabularyId")
        if not vocab_id:
            raise StepUidError(f"[{where}] {kind} step missing vocabularyId")
        return f"{UID_VERSION}-{kind}-{vocab_id}"

    if kind in ("quiz", "reverse-quiz"):
        return _prompt_uid(kind, data, where)

    if kind == "input":
        vocab_id = data.get("vocabularyId")
        if vocab_id:
            return f"{UID_VERSION}-input-{vocab_id}"
        answer = data.get("answer")
        if not answer:
            raise StepUidError(f"[{where}] input step missing vocabularyId or answer")
        sanitized = _sanitize(answer)
        return f"{UID_VERSION}-input-{simple_hash(sanitized) if len(sanitized) > 30 else sanitized}"

    if kind == "matching":
        words = data.get("words")
        if not isinstance(words, list) or not words:
            raise StepUidError(f"[{where}] matching step missing words")
        pairs = ",".join(f"{w.get('text') or w.get('id')}:{w.get('slotId') or ''}" for w in words)
        return f"{UID_VERSION}-matching-{simple_hash(pairs)}"

    if kind == "audio-sequence":
        sequence = data.get("sequence")
        if not isinstance(sequence, list) or not sequence:
            raise StepUidError(f"[{where}] audio-sequence step missing sequence")
        return f"{UID_VERSION}-audio-seq-{simple_hash(','.join(sequence))}"

    if kind == "text-sequence":
        finglish = data.get("finglishText")
        if not finglish:
            raise StepUidError(f"[{where}] text-sequence step missing finglishText")
        sanitized = _sanitize(finglish)
        return f"{UID_VERSION}-text-seq-{sanitized if len(sanitized) <= 50 else simple_hash(sanitized)}"

    if kind == "final":
        return f"{UID_VERSION}-final-challenge"

    if kind == "story-conversation":
        story_id = data.get("storyId")
        if not story_id:
            raise StepUidError(f"[{where}] story-conversation step missing storyId")
        return f"{UID_VERSION}-story-{story_id}"

    if kind == "grammar-concept":
        concept_id = data.get("conceptId")
        if not concept_id:
            raise StepUidError(f"[{where}] grammar-concept step missing conceptId")
        return f"{UID_VERSION}-grammar-concept-{concept_id}"

    logger.warning("Unknown step type %s in %s, using content hash", kind, where)
    payload = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return f"{UID_VERSION}-{kind}-{simple_hash(payload)}"


def make_step_key(module_id: str, lesson_id: str, step_uid: str) -> str:
    return f"{module_id}:{lesson_id}:{step_uid}"


def parse_step_key(key: str) -> dict | None:
    parts = key.split(":")
    if len(parts) != 3:
        return None
    return {"module_id": parts[0], "lesson_id": parts[1], "step_uid": parts[2]}
