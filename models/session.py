"""
Session model for cookie/bearer authenticated logins.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Session(BaseModel):
    """
    Represents one login session.

    The opaque ``token`` is what clients present (wrapped in a signed
    envelope); ``expires_at`` slides forward while the session is in use.
    """

    __tablename__ = "session"

    user_id = Column(UUID(), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(255), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(500))

    user = relationship("User", back_populates="sessions")
