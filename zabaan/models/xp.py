"""XP ledger; (user_id, idempotency_key) is unique so each award lands once."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from zabaan.db.session import Base


class XpTransaction(Base):
    __tablename__ = "xp_transactions"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_xp_idem"),
        Index("ix_xp_transactions_user_source_created", "user_id", "source", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    source = Column(String(64), nullable=False)
    lesson_id = Column(String(64), nullable=True)  # "module1/lesson2"; null for review games
    idempotency_key = Column(String(255), nullable=False)
    metadata_json = Column("metadata", JSON, nullable=True)
    # Set explicitly in UTC by the service so "today" windows are exact
    created_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="xp_transactions")
