from zabaan.services.leveling import calculate_level, get_level_progress
from zabaan.services.mastery import apply_attempt, classify
from zabaan.services.step_uid import derive_step_uid, make_step_key, parse_step_key

__all__ = [
    "apply_attempt",
    "calculate_level",
    "classify",
    "derive_step_uid",
    "get_level_progress",
    "make_step_key",
    "parse_step_key",
]
