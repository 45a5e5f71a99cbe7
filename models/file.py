"""
File model for uploaded blob metadata.

The blob bytes live in the active storage backend (local directory or object
bucket); this table only records what was stored under each key.
"""

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class FileRecord(BaseModel):
    """
    Represents the metadata of one uploaded file.

    :ivar key: Storage key, unique across all backends (e.g. ``uploads/1712-a.txt``).
    :type key: str
    :ivar filename: Original client filename.
    :type filename: str
    :ivar mime_type: Content type the blob was stored with.
    :type mime_type: str
    :ivar size: Number of bytes written to the backend.
    :type size: int
    :ivar user_id: Owner, or ``None`` for anonymous uploads.
    :type user_id: UUID
    :ivar extra_metadata: Free-form metadata map (column ``metadata``).
    :type extra_metadata: dict
    """

    __tablename__ = "files"
    __table_args__ = (
        Index("files_user_id_idx", "user_id"),
        Index("files_key_idx", "key"),
    )

    key = Column(String(1024), nullable=False, unique=True)
    filename = Column(String(500), nullable=False)
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    user_id = Column(UUID(), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON)

    user = relationship("User", back_populates="files")
