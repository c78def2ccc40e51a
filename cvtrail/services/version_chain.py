"""Version chain manager — append-only analysis history per document.

Every analysis of a document gets the next position in that document's
history and becomes the new head of a singly linked chain
(``Analysis.next_analysis_id``). Allocation, insertion and linking happen in
one transaction that is conditional on the analysis count it read, so two
concurrent appends can never claim the same position: the loser's UPDATE
matches no row, the transaction is rolled back and re-executed from fresh
reads.
"""

import logging
import time
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import ChainConflictError
from ..models import Analysis, Document
from ..repositories import AnalysisRepository, DocumentRepository
from .transactions import run_in_transaction

logger = logging.getLogger(__name__)


class VersionChainManager:
    """Allocates analysis positions and maintains the forward-linked chain."""

    def __init__(
        self,
        db: Session,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        backoff_max: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.db = db
        self.doc_repo = DocumentRepository(db)
        self.analysis_repo = AnalysisRepository(db)
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._sleep = sleep

    def append_analysis(
        self,
        document_id: str,
        content: dict,
        model_identifier: str,
        predecessor_analysis_id: Optional[str] = None,
    ) -> str:
        """Persist a new analysis as the head of the document's chain.

        When *predecessor_analysis_id* is given it must be the current head of
        this document's chain; it is linked to the new analysis. Without it,
        whatever analysis is currently the head (if any) is linked instead.

        Returns:
            The derived ID of the new analysis, ``{document_id}-{position}``.

        Raises:
            DocumentNotFoundError: the document does not exist.
            ChainConflictError: the predecessor is missing, belongs to another
                document, or has already been superseded.
            TransientStoreError: write contention outlasted every retry.
        """

        def _append() -> str:
            document = self.doc_repo.get_by_id(document_id)

            if predecessor_analysis_id is not None:
                predecessor = self._require_head(document, predecessor_analysis_id)
            else:
                predecessor = self._current_head(document)

            position = document.analysis_count + 1
            analysis = self.analysis_repo.create(document, position, content, model_identifier)
            self.doc_repo.record_analysis(document, position, analysis.analysis_id)

            # Conditional document UPDATE and the INSERT go out first; the
            # predecessor's pointer references a row that must already exist.
            self.db.flush()

            if predecessor is not None:
                predecessor.next_analysis_id = analysis.analysis_id
                self.db.flush()

            return analysis.analysis_id

        analysis_id = run_in_transaction(
            self.db,
            _append,
            key=document_id,
            max_attempts=self._max_attempts,
            backoff_base=self._backoff_base,
            backoff_max=self._backoff_max,
            sleep=self._sleep,
        )

        logger.info(
            "Analysis saved for document %s", document_id,
            extra={
                "document_id": document_id,
                "analysis_id": analysis_id,
                "predecessor_analysis_id": predecessor_analysis_id,
            },
        )
        return analysis_id

    def _require_head(self, document: Document, analysis_id: str) -> Analysis:
        predecessor = self.analysis_repo.get_by_id_optional(analysis_id)
        if predecessor is None:
            raise ChainConflictError(
                document.id, analysis_id,
                f"Predecessor analysis {analysis_id} does not exist",
            )
        if predecessor.document_id != document.id:
            raise ChainConflictError(
                document.id, analysis_id,
                f"Analysis {analysis_id} belongs to document {predecessor.document_id}",
            )
        if predecessor.next_analysis_id is not None or document.head_analysis_id != analysis_id:
            raise ChainConflictError(document.id, analysis_id)
        return predecessor

    def _current_head(self, document: Document) -> Optional[Analysis]:
        if not document.head_analysis_id:
            return None
        head = self.analysis_repo.get_by_id_optional(document.head_analysis_id)
        if head is None or head.next_analysis_id is not None:
            return None
        return head

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_analysis(self, analysis_id: str) -> Analysis:
        """Get an analysis by ID. Raises AnalysisNotFoundError if missing."""
        return self.analysis_repo.get_by_id(analysis_id)

    def ensure_head(self, document_id: str, analysis_id: str) -> Analysis:
        """Check that *analysis_id* is currently the head of *document_id*'s chain.

        A read-only check outside any transaction: it lets callers skip work
        whose result could not be appended. ``append_analysis`` checks again
        under its conditional update.

        Raises:
            DocumentNotFoundError: the document does not exist.
            ChainConflictError: the analysis is missing, belongs to another
                document, or has already been superseded.
        """
        document = self.doc_repo.get_by_id(document_id)
        return self._require_head(document, analysis_id)

    def get_head(self, document_id: str) -> Optional[Analysis]:
        """The most recent analysis of a document, or None before the first one."""
        document = self.doc_repo.get_by_id(document_id)
        if not document.head_analysis_id:
            return None
        return self.analysis_repo.get_by_id_optional(document.head_analysis_id)

    def get_chain(self, document_id: str) -> List[Analysis]:
        """Walk the chain from position 1 along the forward pointers."""
        self.doc_repo.get_by_id(document_id)
        by_id = {
            a.analysis_id: a
            for a in self.analysis_repo.get_by_document(document_id, limit=None)
        }
        first = next((a for a in by_id.values() if a.position == 1), None)

        chain: List[Analysis] = []
        seen: set[str] = set()
        current = first
        while current is not None and current.analysis_id not in seen:
            seen.add(current.analysis_id)
            chain.append(current)
            current = by_id.get(current.next_analysis_id) if current.next_analysis_id else None
        return chain

    # ------------------------------------------------------------------
    # Reviewer feedback
    # ------------------------------------------------------------------

    def record_feedback(self, analysis_id: str, rating: Optional[int], comment: Optional[str]) -> Analysis:
        """Store a reviewer's rating and comment. Leaves the chain untouched."""
        analysis = self.analysis_repo.get_by_id(analysis_id)
        analysis.user_rating = rating
        analysis.user_comment = comment
        self.db.commit()
        self.db.refresh(analysis)
        return analysis
