"""Initial tables: users, lesson progress and sessions, vocabulary, XP ledger, subscriptions.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("streak_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("last_streak_date", sa.Date(), nullable=True),
        sa.Column("daily_goal_xp", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.CheckConstraint("total_xp >= 0", name="ck_users_total_xp"),
        sa.CheckConstraint("streak_count >= 0", name="ck_users_streak_count"),
        sa.CheckConstraint("daily_goal_xp > 0 AND daily_goal_xp <= 1000", name="ck_users_daily_goal"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "lesson_progress",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("module_id", sa.String(20), nullable=False),
        sa.Column("lesson_id", sa.String(20), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="not_started"),
        sa.Column("progress_percent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "module_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
    )
    op.create_index(op.f("ix_lesson_progress_user_id"), "lesson_progress", ["user_id"], unique=False)

    op.create_table(
        "lesson_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("module_id", sa.String(20), nullable=False),
        sa.Column("lesson_id", sa.String(20), nullable=False),
        sa.Column("state_json", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "module_id", "lesson_id", name="uq_lesson_session_user_lesson"),
    )
    op.create_index(op.f("ix_lesson_sessions_user_id"), "lesson_sessions", ["user_id"], unique=False)

    op.create_table(
        "vocabulary_performance",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("vocabulary_id", sa.String(64), nullable=False),
        sa.Column("word_text", sa.String(255), nullable=False),
        sa.Column("total_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_correct", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_incorrect", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("consecutive_correct", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mastery_level", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_correct_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_review_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("base_vocab_id", sa.String(64), nullable=True),
        sa.Column("suffix_id", sa.String(32), nullable=True),
        sa.Column("is_grammar_form", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.CheckConstraint("mastery_level BETWEEN 0 AND 5", name="ck_vocab_perf_mastery"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "vocabulary_id", name="uq_vocab_perf_user_word"),
    )
    op.create_index(op.f("ix_vocabulary_performance_user_id"), "vocabulary_performance", ["user_id"], unique=False)
    op.create_index("ix_vocab_perf_user_next_review", "vocabulary_performance", ["user_id", "next_review_at"], unique=False)

    op.create_table(
        "vocabulary_attempts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("vocabulary_id", sa.String(64), nullable=False),
        sa.Column("game_type", sa.String(32), nullable=False),
        sa.Column("module_id", sa.String(20), nullable=True),
        sa.Column("lesson_id", sa.String(20), nullable=True),
        sa.Column("step_uid", sa.String(128), nullable=True),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("time_spent_ms", sa.Integer(), nullable=True),
        sa.Column("context_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vocabulary_attempts_user_id"), "vocabulary_attempts", ["user_id"], unique=False)
    op.create_index("ix_vocab_attempts_user_word", "vocabulary_attempts", ["user_id", "vocabulary_id"], unique=False)

    op.create_table(
        "xp_transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(64), nullable=False),
        sa.Column("lesson_id", sa.String(64), nullable=True),
        sa.Column("idempotency_key", sa.String(255), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "idempotency_key", name="uq_xp_idem"),
    )
    op.create_index(op.f("ix_xp_transactions_user_id"), "xp_transactions", ["user_id"], unique=False)
    op.create_index(
        "ix_xp_transactions_user_source_created", "xp_transactions", ["user_id", "source", "created_at"], unique=False
    )

    op.create_table(
        "user_subscriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("plan_type", sa.String(32), nullable=False, server_default="premium"),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_index(
        op.f("ix_user_subscriptions_stripe_subscription_id"), "user_subscriptions", ["stripe_subscription_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_user_subscriptions_stripe_subscription_id"), table_name="user_subscriptions")
    op.drop_table("user_subscriptions")
    op.drop_index("ix_xp_transactions_user_source_created", table_name="xp_transactions")
    op.drop_index(op.f("ix_xp_transactions_user_id"), table_name="xp_transactions")
    op.drop_table("xp_transactions")
    op.drop_index("ix_vocab_attempts_user_word", table_name="vocabulary_attempts")
    op.drop_index(op.f("ix_vocabulary_attempts_user_id"), table_name="vocabulary_attempts")
    op.drop_table("vocabulary_attempts")
    op.drop_index("ix_vocab_perf_user_next_review", table_name="vocabulary_performance")
    op.drop_index(op.f("ix_vocabulary_performance_user_id"), table_name="vocabulary_performance")
    op.drop_table("vocabulary_performance")
    op.drop_index(op.f("ix_lesson_sessions_user_id"), table_name="lesson_sessions")
    op.drop_table("lesson_sessions")
    op.drop_index(op.f("ix_lesson_progress_user_id"), table_name="lesson_progress")
    op.drop_table("lesson_progress")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
