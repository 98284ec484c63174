"""Per-user vocabulary performance (mastery/SRS state) and the raw attempt log."""
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from zabaan.db.session import Base


class VocabularyPerformance(Base):
    __tablename__ = "vocabulary_performance"
    __table_args__ = (
        UniqueConstraint("user_id", "vocabulary_id", name="uq_vocab_perf_user_word"),
        CheckConstraint("mastery_level BETWEEN 0 AND 5", name="ck_vocab_perf_mastery"),
        Index("ix_vocab_perf_user_next_review", "user_id", "next_review_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vocabulary_id = Column(String(64), nullable=False)  # "salam" or grammar form "khoob|am"
    word_text = Column(String(255), nullable=False)  # English label for display

    total_attempts = Column(Integer, nullable=False, default=0)
    total_correct = Column(Integer, nullable=False, default=0)
    total_incorrect = Column(Integer, nullable=False, default=0)
    consecutive_correct = Column(Integer, nullable=False, default=0)

    mastery_level = Column(SmallInteger, nullable=False, default=0)
    last_seen_at = Column(DateTime(timezone=True), nullable=True)
    last_correct_at = Column(DateTime(timezone=True), nullable=True)
    next_review_at = Column(DateTime(timezone=True), nullable=True)

    base_vocab_id = Column(String(64), nullable=True)
    suffix_id = Column(String(32), nullable=True)
    is_grammar_form = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)


class VocabularyAttempt(Base):
    __tablename__ = "vocabulary_attempts"
    __table_args__ = (Index("ix_vocab_attempts_user_word", "user_id", "vocabulary_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vocabulary_id = Column(String(64), nullable=False)

    game_type = Column(String(32), nullable=False)  # flashcard, quiz, review-matching, ...
    module_id = Column(String(20), nullable=True)
    lesson_id = Column(String(20), nullable=True)
    step_uid = Column(String(128), nullable=True)

    is_correct = Column(Boolean, nullable=False)
    time_spent_ms = Column(Integer, nullable=True)
    context_data = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
