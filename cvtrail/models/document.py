"""Document model."""

from sqlalchemy import Column, Index, String, Text, Integer, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class Document(Base):
    """One ingested or generated resume file and its analysis history."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_owner", "owner"),
        Index("ix_documents_last_update", "last_update"),
    )

    # Primary key, store-assigned (uuid4 hex)
    id = Column(String(64), primary_key=True)

    owner = Column(String(128), nullable=False, default="")
    filename = Column(String(255), nullable=False, default="")

    # Blob location of the source artifact
    bucket = Column(String(255), nullable=True)
    source_path = Column(Text, nullable=True)

    # 'uploaded' (ingested by the user) or 'generated' (rendered by the pipeline)
    source_type = Column(String(20), nullable=False, default="uploaded")

    # Number of analyses appended so far. Doubles as the optimistic concurrency
    # token: every UPDATE carries "WHERE analysis_count = <value read>", so two
    # writers that read the same count cannot both commit.
    analysis_count = Column(Integer, nullable=False, default=0)

    # {"1": "<id>-1", "2": "<id>-2", ...}; keys are contiguous and never rewritten.
    version_index = Column(JSON, nullable=False, default=dict)

    # Redundant pointer to the chain head, written in the same transaction as
    # the forward pointer it mirrors.
    head_analysis_id = Column(String(100), nullable=True)

    # Timestamps
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
    last_update = Column(DateTime(timezone=True), server_default=func.now())

    analyses = relationship(
        "Analysis",
        back_populates="document",
        order_by="Analysis.position",
    )

    __mapper_args__ = {
        "version_id_col": analysis_count,
        "version_id_generator": False,
    }
