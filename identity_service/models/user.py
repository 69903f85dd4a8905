from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, String, func

from identity_service.models.base import Base

NAME_COLUMN_LENGTH = 100
EMAIL_COLUMN_LENGTH = 100


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(NAME_COLUMN_LENGTH), nullable=False)
    email = Column(String(EMAIL_COLUMN_LENGTH), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Emails differing only in case are the same account.
    __table_args__ = (Index("uq_users_email_lower", func.lower(email), unique=True),)
