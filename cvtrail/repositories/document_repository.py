"""Document repository for database operations."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from ..models import Document
from ..exceptions import DocumentNotFoundError
from .base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for document records."""

    model_class = Document
    id_column = "id"
    not_found_error = DocumentNotFoundError

    def create(
        self,
        owner: str,
        filename: str,
        source_path: Optional[str],
        bucket: Optional[str] = None,
        source_type: str = "uploaded",
    ) -> Document:
        """Create a document with zeroed analysis counters. Flushes, does not commit."""
        db_document = Document(
            id=uuid.uuid4().hex,
            owner=owner,
            filename=filename,
            bucket=bucket,
            source_path=source_path,
            source_type=source_type,
            analysis_count=0,
            version_index={},
            head_analysis_id=None,
        )
        self.db.add(db_document)
        self.db.flush()
        return db_document

    def record_analysis(self, document: Document, position: int, analysis_id: str) -> Document:
        """Advance the analysis counter and index a new position.

        The flush that follows issues a conditional UPDATE against the count
        the caller read; a concurrent writer makes it fail with StaleDataError.
        """
        index = dict(document.version_index or {})
        index[str(position)] = analysis_id
        document.version_index = index
        document.analysis_count = position
        document.head_analysis_id = analysis_id
        document.last_update = datetime.now(timezone.utc)
        return document

    def get_by_owner(self, owner: str, skip: int = 0, limit: int = 100) -> List[Document]:
        """Documents owned by a user, most recently updated first."""
        return self.db.query(Document).filter(
            Document.owner == owner
        ).order_by(Document.last_update.desc()).offset(skip).limit(limit).all()
