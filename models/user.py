# models/user.py
from sqlalchemy import Column, Integer, BigInteger, DateTime, Boolean, String, Text
from sqlalchemy.sql import func, false

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, index=True)
    # Object ID из Microsoft Entra ID — стабильный внешний идентификатор
    oid = Column(String(64), unique=True, nullable=False)
    email = Column(String(255), nullable=True)
    display_name = Column(String(255), nullable=True)
    tenant_id = Column(String(64), nullable=True)

    full_name = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    is_rso = Column(Boolean, default=False, server_default=false(), nullable=False)
    major = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    image_key = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<User id={self.id} oid={self.oid}>"
