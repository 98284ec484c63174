"""SQLAlchemy declarative base and model imports for Alembic."""
from zabaan.db.session import Base

# Import all models so Alembic can see them
from zabaan.models.lesson_progress import LessonProgress  # noqa: F401
from zabaan.models.lesson_session import LessonSession  # noqa: F401
from zabaan.models.subscription import UserSubscription  # noqa: F401
from zabaan.models.user import User  # noqa: F401
from zabaan.models.vocabulary import VocabularyAttempt, VocabularyPerformance  # noqa: F401
from zabaan.models.xp import XpTransaction  # noqa: F401

__all__ = [
    "Base",
    "User",
    "LessonProgress",
    "LessonSession",
    "UserSubscription",
    "VocabularyAttempt",
    "VocabularyPerformance",
    "XpTransaction",
]
