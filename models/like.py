# models/like.py
from sqlalchemy import Column, BigInteger, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func

from .base import Base


class Like(Base):
    """Решение liker → liked: лайк (is_like=True) или пропуск. Одна строка на пару."""

    __tablename__ = "likes"

    liker_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    liked_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    is_like = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("liker_id <> liked_id", name="ck_likes_not_self"),
    )

    def __repr__(self):
        verdict = "like" if self.is_like else "pass"
        return f"<Like {self.liker_id}→{self.liked_id} {verdict}>"
