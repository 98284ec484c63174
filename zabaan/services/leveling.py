"""XP -> level curve and progress toward the next level."""
import math

# Upper XP bounds of levels 1-4; every 500 XP after that is one more level
LEVEL_THRESHOLDS = [100, 250, 500, 1000]
XP_PER_LEVEL_AFTER = 500


def calculate_level(xp: int) -> int:
    xp = max(0, xp or 0)
    for level, upper in enumerate(LEVEL_THRESHOLDS, start=1):
        if xp < upper:
            return level
    return len(LEVEL_THRESHOLDS) + math.ceil((xp - LEVEL_THRESHOLDS[-1]) / XP_PER_LEVEL_AFTER)


def xp_for_level(level: int) -> int:
    """Minimum XP needed to be at ``level``."""
    if level <= 1:
        return 0
    if level <= len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level - 2]
    return LEVEL_THRESHOLDS[-1] + (level - len(LEVEL_THRESHOLDS) - 1) * XP_PER_LEVEL_AFTER + 1


def get_level_progress(xp: int) -> dict:
    xp = max(0, xp or 0)
    level = calculate_level(xp)
    current = xp_for_level(level)
    nxt = xp_for_level(level + 1)
    remaining = 0 if xp >= nxt else max(1, nxt - xp)
    span = nxt - current
    pct = 0 if span <= 0 else round((xp - current) / span * 100)
    return {
        "level": level,
        "xp": xp,
        "current_level_xp": current,
        "next_level_xp": nxt,
        "xp_to_next_level": remaining,
        "progress_percent": max(0, min(100, pct)),
    }


def check_level_up(old_xp: int, new_xp: int) -> dict:
    old_level = calculate_level(old_xp)
    new_level = calculate_level(new_xp)
    return {"leveled_up": new_level > old_level, "old_level": old_level, "new_level": new_level}
