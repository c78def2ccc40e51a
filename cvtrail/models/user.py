"""User and UserDocument models.

A user owns the documents it uploads or generates. The owner's document list
is an insert-only link table, so concurrent generations for the same user
never overwrite each other's entries.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    """Document owner."""

    __tablename__ = "users"

    user_id = Column(String(128), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    documents = relationship(
        "UserDocument",
        back_populates="user",
        order_by="UserDocument.added_at",
    )


class UserDocument(Base):
    """Entry in a user's document list."""

    __tablename__ = "user_documents"

    user_id = Column(String(128), ForeignKey("users.user_id"), primary_key=True)
    document_id = Column(String(64), ForeignKey("documents.id"), primary_key=True)
    added_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    user = relationship("User", back_populates="documents")
