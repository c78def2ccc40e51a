"""Analysis model."""

from sqlalchemy import Column, Index, String, Text, Integer, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Analysis(Base):
    """One generated review of a document, linked into its version chain.

    ``next_analysis_id`` is null for the head of the chain and is written
    exactly once, by the transaction that appends the successor.
    """

    __tablename__ = "analyses"
    __table_args__ = (
        UniqueConstraint("document_id", "position", name="uq_analyses_document_position"),
        Index("ix_analyses_document_id", "document_id"),
    )

    # Primary key: {document_id}-{position}
    analysis_id = Column(String(100), primary_key=True)

    document_id = Column(String(64), ForeignKey("documents.id"), nullable=False)
    position = Column(Integer, nullable=False)

    # Copied from the document at creation time
    owner = Column(String(128), nullable=False, default="")

    # Tagged parser result: {"kind": "structured", ...} or {"kind": "unstructured", "rawText": ...}
    content = Column(JSON, nullable=False)

    model_identifier = Column(String(255), nullable=False)
    generated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Reviewer feedback, filled in after generation
    user_rating = Column(Integer, nullable=True)
    user_comment = Column(Text, nullable=True)

    next_analysis_id = Column(
        String(100),
        ForeignKey("analyses.analysis_id"),
        nullable=True,
        unique=True,
    )

    document = relationship("Document", back_populates="analyses")
