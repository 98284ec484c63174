"""Mastery levels, review scheduling and word status classification."""
from dataclasses import dataclass
from datetime import datetime, timedelta

MAX_MASTERY_LEVEL = 5

# Delay until the next review, by mastery level
REVIEW_INTERVALS = {
    0: timedelta(hours=1),
    1: timedelta(hours=8),
    2: timedelta(days=1),
    3: timedelta(days=3),
    4: timedelta(days=7),
    5: timedelta(days=14),
}

DECAY_AFTER = timedelta(days=14)

STATUS_UNCLASSIFIED = "unclassified"
STATUS_MASTERED = "mastered"
STATUS_HARD = "hard"
STATUS_LEARNING = "learning"

MIN_ATTEMPTS_TO_CLASSIFY = 3
MASTERED_STREAK = 5
MASTERED_ACCURACY = 90.0
HARD_ACCURACY = 70.0
HARD_STREAK = 2


@dataclass
class PerformanceCounters:
    total_attempts: int = 0
    total_correct: int = 0
    total_incorrect: int = 0
    consecutive_correct: int = 0
    mastery_level: int = 0


def next_review_at(mastery_level: int, now: datetime) -> datetime:
    level = max(0, min(MAX_MASTERY_LEVEL, mastery_level))
    return now + REVIEW_INTERVALS[level]


def first_attempt(is_correct: bool) -> PerformanceCounters:
    return PerformanceCounters(
        total_attempts=1,
        total_correct=1 if is_correct else 0,
        total_incorrect=0 if is_correct else 1,
        consecutive_correct=1 if is_correct else 0,
        mastery_level=1 if is_correct else 0,
    )


def _streak_floor(consecutive: int) -> int:
    if consecutive >= 5:
        return 5
    if consecutive >= 3:
        return 3
    if consecutive >= 2:
        return 2
    return 0


def _total_floor(total_correct: int) -> int:
    if total_correct >= 10:
        return 4
    if total_correct >= 5:
        return 3
    return 0


def apply_attempt(current: PerformanceCounters | None, is_correct: bool) -> PerformanceCounters:
    """Fold one answer into the counters.

    A miss drops the streak by two instead of zeroing it, and the mastery
    level only ever moves up: it is the highest of the current level, the
    floor earned by the streak and the floor earned by total correct answers.
    """
    if current is None or current.total_attempts == 0:
        return first_attempt(is_correct)

    total_correct = current.total_correct + (1 if is_correct else 0)
    consecutive = current.consecutive_correct + 1 if is_correct else max(0, current.consecutive_correct - 2)
    level = max(current.mastery_level, _streak_floor(consecutive), _total_floor(total_correct))

    return PerformanceCounters(
        total_attempts=current.total_attempts + 1,
        total_correct=total_correct,
        total_incorrect=current.total_incorrect + (0 if is_correct else 1),
        consecutive_correct=consecutive,
        mastery_level=min(MAX_MASTERY_LEVEL, level),
    )


def accuracy(total_correct: int, total_attempts: int) -> float:
    if total_attempts <= 0:
        return 0.0
    return round(total_correct / total_attempts * 100, 1)


def error_rate(total_incorrect: int, total_attempts: int) -> float:
    if total_attempts <= 0:
        return 0.0
    return round(total_incorrect / total_attempts * 100, 1)


def _is_mastered(consecutive: int, acc: float) -> bool:
    return consecutive >= MASTERED_STREAK and acc >= MASTERED_ACCURACY


def classify(total_attempts: int, total_correct: int, consecutive_correct: int) -> str:
    if total_attempts < MIN_ATTEMPTS_TO_CLASSIFY:
        return STATUS_UNCLASSIFIED
    acc = total_correct / total_attempts * 100
    if _is_mastered(consecutive_correct, acc):
        return STATUS_MASTERED
    if acc < HARD_ACCURACY or consecutive_correct < HARD_STREAK:
        return STATUS_HARD
    return STATUS_LEARNING


def confidence(total_attempts: int, total_correct: int, consecutive_correct: int) -> float:
    """0-100 score: 60% accuracy, 30% streak, 10% practice volume."""
    acc = total_correct / total_attempts * 100 if total_attempts > 0 else 0.0
    score = (
        min(acc, 100) * 0.6
        + min(consecutive_correct / 5.0, 1.0) * 30
        + min(total_attempts / 5.0, 1.0) * 10
    )
    return round(score, 1)


def effective_level(mastery_level: int, last_correct_at: datetime | None, now: datetime) -> int:
    """Stored level minus one when the word has not been answered correctly for a while."""
    if last_correct_at is None or now - last_correct_at > DECAY_AFTER:
        return max(0, mastery_level - 1)
    return mastery_level


def parse_vocabulary_id(vocabulary_id: str) -> tuple[str, str | None]:
    """Split a grammar form id ``base|suffix``; plain ids return ``(id, None)``."""
    parts = vocabulary_id.split("|")
    if len(parts) == 2 and parts[0] and parts[1]:
        return parts[0], parts[1]
    return vocabulary_id, None
