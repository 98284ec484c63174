"""Persisted lesson-runner state, one row per user per lesson."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from zabaan.db.session import Base


class LessonSession(Base):
    __tablename__ = "lesson_sessions"
    __table_args__ = (UniqueConstraint("user_id", "module_id", "lesson_id", name="uq_lesson_session_user_lesson"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    module_id = Column(String(20), nullable=False)
    lesson_id = Column(String(20), nullable=False)
    state_json = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)
