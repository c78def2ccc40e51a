"""Owner endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import OwnerDocumentsResponse
from ..services import DocumentService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/documents", response_model=OwnerDocumentsResponse)
def list_owner_documents(
    user_id: str,
    db: Session = Depends(get_db),
):
    """Document IDs on the owner's list, in the order they were added."""
    return OwnerDocumentsResponse(
        user_id=user_id,
        document_ids=DocumentService(db).list_owner_document_ids(user_id),
    )
