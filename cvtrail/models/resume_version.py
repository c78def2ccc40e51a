"""Resume version lineage model."""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from ..database import Base


class ResumeVersion(Base):
    """Rendering metadata for one version of a user's resume.

    Keyed by the caller-supplied lineage (user, resume, version). Writes are
    merged into the existing row, so repeating a generation is safe.
    """

    __tablename__ = "resume_versions"

    user_id = Column(String(128), primary_key=True)
    resume_id = Column(String(128), primary_key=True)
    version_id = Column(String(128), primary_key=True)

    pdf_url = Column(Text, nullable=True)
    gcs_uri = Column(Text, nullable=True)
    storage_path = Column(Text, nullable=True)
    document_id = Column(String(64), ForeignKey("documents.id"), nullable=True)
    page_count = Column(Integer, nullable=True)
    byte_count = Column("bytes", Integer, nullable=True)
    title = Column(String(255), nullable=True)
    generation_params = Column(JSON, nullable=True)

    generated_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
