# models/interest.py
from sqlalchemy import Column, BigInteger, String, ForeignKey

from .base import Base


class Interest(Base):
    __tablename__ = "interests"

    id = Column(BigInteger, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False)

    def __repr__(self):
        return f"<Interest {self.id} {self.name!r}>"


class UserInterest(Base):
    __tablename__ = "user_interests"

    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    interest_id = Column(
        BigInteger,
        ForeignKey("interests.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self):
        return f"<UserInterest {self.user_id}→{self.interest_id}>"
