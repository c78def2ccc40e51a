"""Analysis repository for database operations."""

from typing import List

from ..models import Analysis, Document
from ..exceptions import AnalysisNotFoundError
from .base import BaseRepository


def make_analysis_id(document_id: str, position: int) -> str:
    """Derive the analysis ID for a chain position."""
    return f"{document_id}-{position}"


class AnalysisRepository(BaseRepository[Analysis]):
    """Repository for analysis records."""

    model_class = Analysis
    id_column = "analysis_id"
    not_found_error = AnalysisNotFoundError

    def create(
        self,
        document: Document,
        position: int,
        content: dict,
        model_identifier: str,
    ) -> Analysis:
        """Stage a new chain head for *document* at *position*. Does not flush."""
        db_analysis = Analysis(
            analysis_id=make_analysis_id(document.id, position),
            document_id=document.id,
            position=position,
            owner=document.owner or "",
            content=content,
            model_identifier=model_identifier,
            user_rating=None,
            user_comment=None,
            next_analysis_id=None,
        )
        self.db.add(db_analysis)
        return db_analysis

    def get_by_document(self, document_id: str, skip: int = 0, limit: int = 100) -> List[Analysis]:
        """All analyses for a document in position order."""
        return self.db.query(Analysis).filter(
            Analysis.document_id == document_id
        ).order_by(Analysis.position.asc()).offset(skip).limit(limit).all()

