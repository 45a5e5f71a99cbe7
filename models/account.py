"""
Account model linking a user to a login provider.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel

CREDENTIAL_PROVIDER = "credential"


class Account(BaseModel):
    """
    Represents a provider account owned by a user.

    Email/password sign-up creates one ``credential`` account whose
    ``password`` column holds the bcrypt hash.
    """

    __tablename__ = "account"

    account_id = Column(String(255), nullable=False)
    provider_id = Column(String(100), nullable=False, default=CREDENTIAL_PROVIDER)
    user_id = Column(UUID(), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    password = Column(String(255))

    user = relationship("User", back_populates="accounts")
