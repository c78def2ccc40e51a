"""Document schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentCreate(BaseModel):
    """Registration of an uploaded resume file."""
    owner: str
    filename: str
    source_path: str
    bucket: Optional[str] = None

    @field_validator('source_path')
    @classmethod
    def normalize_path(cls, v: str) -> str:
        v = v.strip().strip('/')
        while '//' in v:
            v = v.replace('//', '/')
        if not v:
            raise ValueError("source_path cannot be empty")
        return v

    @field_validator('owner')
    @classmethod
    def validate_owner(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("owner cannot be empty")
        return v


class DocumentResponse(BaseModel):
    """Schema for document response."""
    id: str
    owner: str
    filename: str
    bucket: Optional[str] = None
    source_path: Optional[str] = None
    source_type: str
    analysis_count: int
    version_index: Dict[str, str]
    head_analysis_id: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    last_update: Optional[datetime] = None

    class Config:
        from_attributes = True


class OwnerDocumentsResponse(BaseModel):
    """An owner's document list, in the order the documents were added."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    document_ids: List[str] = Field(alias="documentIds")
