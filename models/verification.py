"""
Verification model for one-time tokens (email confirmation).
"""

from sqlalchemy import Column, DateTime, String

from .base import BaseModel


class Verification(BaseModel):
    """A single-use token bound to an identifier such as an email address."""

    __tablename__ = "verification"

    identifier = Column(String(255), nullable=False, index=True)
    value = Column(String(255), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
