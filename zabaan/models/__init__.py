from zabaan.models.user import User
from zabaan.models.lesson_progress import LessonProgress
from zabaan.models.lesson_session import LessonSession
from zabaan.models.subscription import UserSubscription
from zabaan.models.vocabulary import VocabularyAttempt, VocabularyPerformance
from zabaan.models.xp import XpTransaction

__all__ = [
    "User",
    "LessonProgress",
    "LessonSession",
    "UserSubscription",
    "VocabularyAttempt",
    "VocabularyPerformance",
    "XpTransaction",
]
