"""Document service — creation of document records and their ownership links.

Creating a document, appending it to its owner's document list and, for
generated resumes, merging the version lineage metadata all happen in one
transaction: either every record exists afterwards or none does.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models import Document
from ..repositories import DocumentRepository, ResumeVersionRepository, UserRepository
from ..schemas.document import DocumentCreate
from ..schemas.generation import RenderedArtifact
from .transactions import run_in_transaction

logger = logging.getLogger(__name__)


class DocumentService:
    """Document records, owner document lists, and resume version lineage."""

    def __init__(self, db: Session):
        self.db = db
        self.doc_repo = DocumentRepository(db)
        self.user_repo = UserRepository(db)
        self.version_repo = ResumeVersionRepository(db)

    def register_upload(self, data: DocumentCreate) -> Document:
        """Record a resume the user uploaded to blob storage."""

        def _register() -> str:
            document = self.doc_repo.create(
                owner=data.owner,
                filename=data.filename,
                source_path=data.source_path,
                bucket=data.bucket,
                source_type="uploaded",
            )
            self.user_repo.add_document(data.owner, document.id)
            return document.id

        document_id = run_in_transaction(self.db, _register, key=f"user:{data.owner}")
        logger.info(
            "Registered uploaded document %s", document_id,
            extra={"document_id": document_id, "owner": data.owner, "path": data.source_path},
        )
        return self.doc_repo.get_by_id(document_id)

    def commit_generated_document(
        self,
        owner: str,
        filename: str,
        storage_path: str,
        bucket: Optional[str],
        artifact: RenderedArtifact,
        generation_params: dict,
        resume_id: Optional[str] = None,
        version_id: Optional[str] = None,
    ) -> str:
        """Create the record for a rendered resume. Returns the new document ID.

        When both *resume_id* and *version_id* are given, the lineage row for
        that version is merged with the rendering metadata in the same
        transaction.
        """

        def _commit() -> str:
            document = self.doc_repo.create(
                owner=owner,
                filename=filename,
                source_path=storage_path,
                bucket=bucket,
                source_type="generated",
            )
            self.user_repo.add_document(owner, document.id)

            if resume_id and version_id:
                self.version_repo.merge(
                    owner, resume_id, version_id,
                    pdf_url=artifact.pdf_url,
                    gcs_uri=artifact.gcs_uri,
                    storage_path=storage_path,
                    document_id=document.id,
                    page_count=artifact.page_count,
                    byte_count=artifact.bytes,
                    title=artifact.title,
                    generation_params=generation_params,
                    generated_at=datetime.now(timezone.utc),
                )
            return document.id

        document_id = run_in_transaction(self.db, _commit, key=f"user:{owner}")
        logger.info(
            "Committed generated document %s", document_id,
            extra={
                "document_id": document_id,
                "owner": owner,
                "path": storage_path,
                "resume_id": resume_id,
                "version_id": version_id,
            },
        )
        return document_id

    def get_document(self, document_id: str) -> Document:
        """Get document by ID. Raises DocumentNotFoundError if missing."""
        return self.doc_repo.get_by_id(document_id)

    def list_for_owner(self, owner: str, skip: int = 0, limit: int = 100) -> List[Document]:
        return self.doc_repo.get_by_owner(owner, skip, limit)

    def list_owner_document_ids(self, owner: str) -> List[str]:
        """IDs on the owner's document list, oldest first. Empty for unknown owners."""
        return self.user_repo.list_document_ids(owner)
