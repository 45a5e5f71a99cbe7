"""
Models package initialization.
"""

from .account import CREDENTIAL_PROVIDER, Account
from .base import Base, BaseModel
from .file import FileRecord
from .item import Item
from .session import Session
from .user import User
from .verification import Verification

__all__ = [
    "Base",
    "BaseModel",
    # Auth models
    "User",
    "Session",
    "Account",
    "Verification",
    "CREDENTIAL_PROVIDER",
    # Application models
    "Item",
    "FileRecord",
]
