"""
Provides the User model for the application's database schema.

Users, together with their sessions, credential accounts and verification
tokens, belong to the authentication subsystem. The rest of the application
reads them but never writes them directly.

Relationships
-------------
sessions : sqlalchemy.orm.relationship
    Active login sessions. Deleted together with the user.
accounts : sqlalchemy.orm.relationship
    Credential accounts (hashed password per provider). Deleted together with
    the user.
files : sqlalchemy.orm.relationship
    Uploaded files. Their owner reference is cleared, not cascaded, when the
    user is deleted.
items : sqlalchemy.orm.relationship
    Items created by the user. Same clearing rule as files.
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents an authenticated identity.

    :ivar name: Display name given at sign-up.
    :type name: str
    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar email_verified: Whether the email address has been confirmed.
    :type email_verified: bool
    :ivar image: Optional avatar URL.
    :type image: str
    """

    __tablename__ = "user"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    image = Column(String(1000))

    # Relationships
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan")
    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan")
    files = relationship("FileRecord", back_populates="user")
    items = relationship("Item", back_populates="user")
