from zabaan.routers import auth, billing, gamification, leaderboard, lessons, progress, review, vocabulary

__all__ = ["auth", "billing", "gamification", "leaderboard", "lessons", "progress", "review", "vocabulary"]
