"""Document API endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import NoAnalysesError
from ..schemas.analysis import AnalysisResponse
from ..schemas.document import DocumentCreate, DocumentResponse
from ..services import DocumentService, VersionChainManager
from .deps import get_chain_manager

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=201)
def register_document(
    data: DocumentCreate,
    db: Session = Depends(get_db),
):
    """Register an uploaded resume so storage events can analyze it."""
    return DocumentService(db).register_upload(data)


@router.get("", response_model=List[DocumentResponse])
def list_documents(
    owner: str,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """List an owner's documents, most recent first."""
    return DocumentService(db).list_for_owner(owner, skip, limit)


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
):
    """Get a document record."""
    return DocumentService(db).get_document(document_id)


@router.get("/{document_id}/analyses", response_model=List[AnalysisResponse])
def list_analyses(
    document_id: str,
    chain: VersionChainManager = Depends(get_chain_manager),
):
    """Analyses of a document, oldest first, following the chain."""
    return chain.get_chain(document_id)


@router.get("/{document_id}/analyses/head", response_model=AnalysisResponse)
def get_head_analysis(
    document_id: str,
    chain: VersionChainManager = Depends(get_chain_manager),
):
    """Most recent analysis of a document."""
    head = chain.get_head(document_id)
    if head is None:
        raise NoAnalysesError(document_id)
    return head
