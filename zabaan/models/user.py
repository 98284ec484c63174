"""User profile: credentials plus the gamification counters (XP, streak, daily goal)."""
from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from zabaan.db.session import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("total_xp >= 0", name="ck_users_total_xp"),
        CheckConstraint("streak_count >= 0", name="ck_users_streak_count"),
        CheckConstraint("daily_goal_xp > 0 AND daily_goal_xp <= 1000", name="ck_users_daily_goal"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)

    total_xp = Column(Integer, nullable=False, default=0)
    timezone = Column(String(64), nullable=True)  # IANA name; null -> settings.default_timezone

    # Streak dates are calendar dates in the user's timezone
    streak_count = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    last_streak_date = Column(Date, nullable=True)
    daily_goal_xp = Column(Integer, nullable=False, default=50)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    lesson_progress = relationship("LessonProgress", back_populates="user", cascade="all, delete-orphan")
    xp_transactions = relationship("XpTransaction", back_populates="user", cascade="all, delete-orphan")
    subscription = relationship("UserSubscription", back_populates="user", uselist=False, cascade="all, delete-orphan")
