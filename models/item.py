"""
Item model for the simple CRUD resource.
"""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Item(BaseModel):
    """
    Represents an item entity in the application.
    """

    __tablename__ = "items"

    name = Column(String(100), nullable=False)
    description = Column(Text)
    user_id = Column(UUID(), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="items")
