# models/match.py
from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func

from .base import Base


class Match(Base):
    __tablename__ = "matches"

    id = Column(BigInteger, primary_key=True, index=True)
    # user1_id всегда меньше user2_id — одна строка на неупорядоченную пару
    user1_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_matches_pair"),
        CheckConstraint("user1_id < user2_id", name="ck_matches_canonical_order"),
    )

    def __repr__(self):
        return f"<Match {self.user1_id}↔{self.user2_id}>"
