from zabaan.schemas.auth import LoginSchema, ProfileUpdateSchema, RegisterSchema, TokenSchema, UserOutSchema
from zabaan.schemas.gamification import DailyGoalUpdateSchema, XpSyncItemSchema, XpSyncSchema
from zabaan.schemas.lesson import AnswerSchema, GoBackSchema, SessionOutSchema, StartSessionSchema
from zabaan.schemas.vocabulary import AttemptSchema, ReviewXpSchema

__all__ = [
    "AnswerSchema",
    "AttemptSchema",
    "DailyGoalUpdateSchema",
    "GoBackSchema",
    "LoginSchema",
    "ProfileUpdateSchema",
    "RegisterSchema",
    "ReviewXpSchema",
    "SessionOutSchema",
    "StartSessionSchema",
    "TokenSchema",
    "UserOutSchema",
    "XpSyncItemSchema",
    "XpSyncSchema",
]
