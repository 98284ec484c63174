"""Who may open which module: the premium gate plus sequential prerequisites."""
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.curriculum import get_module, get_modules, previous_modules
from zabaan.services.lesson_progress import completed_lessons, is_module_completed
from zabaan.services.subscription import has_premium

REASON_NO_PREMIUM = "no_premium"
REASON_INCOMPLETE_PREREQUISITES = "incomplete_prerequisites"
REASON_NOT_FOUND = "not_found"


def check_prerequisites(module_id: str, completed: set[tuple[str, str]]) -> tuple[bool, list[str]]:
    """Every earlier module must be complete; module 1 has no prerequisites."""
    missing = [m.id for m in previous_modules(module_id) if not is_module_completed(m.id, completed)]
    return not missing, missing


def evaluate_access(module_id: str, premium: bool, completed: set[tuple[str, str]]) -> dict:
    module = get_module(module_id)
    if module is None:
        return {
            "can_access": False,
            "reason": REASON_NOT_FOUND,
            "requires_premium": False,
            "has_premium": premium,
            "prerequisites_complete": False,
            "missing_prerequisites": [],
        }

    requires_premium = module.requires_premium
    prerequisites_complete, missing = check_prerequisites(module_id, completed)
    passes_payment = not requires_premium or premium
    # Premium users skip the prerequisite check entirely
    can_access = passes_payment if premium else passes_payment and prerequisites_complete

    reason = None
    if not can_access:
        reason = REASON_NO_PREMIUM if not passes_payment else REASON_INCOMPLETE_PREREQUISITES

    return {
        "can_access": can_access,
        "reason": reason,
        "requires_premium": requires_premium,
        "has_premium": premium,
        "prerequisites_complete": prerequisites_complete,
        "missing_prerequisites": missing,
    }


async def can_access_module(db: AsyncSession, user_id: int, module_id: str) -> dict:
    premium = await has_premium(db, user_id)
    completed = await completed_lessons(db, user_id)
    return evaluate_access(module_id, premium, completed)


async def modules_with_access(db: AsyncSession, user_id: int) -> list[dict]:
    premium = await has_premium(db, user_id)
    completed = await completed_lessons(db, user_id)
    result = []
    for module in get_modules():
        access = evaluate_access(module.id, premium, completed)
        result.append(
            {
                "id": module.id,
                "title": module.title,
                "description": module.description,
                "available": module.available,
                "lesson_count": len(module.lessons),
                "access": {
                    **access,
                    "show_premium_badge": module.requires_premium and not premium,
                    "show_completion_lock": not premium
                    and not access["prerequisites_complete"]
                    and not (module.requires_premium and not premium),
                },
            }
        )
    return result
