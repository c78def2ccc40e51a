"""Analysis and trigger schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class StorageObjectMetadata(BaseModel):
    """Custom metadata attached to an uploaded object."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file_id: Optional[str] = Field(default=None, alias="fileID")
    owner: Optional[str] = None


class StorageEvent(BaseModel):
    """Object-finalized notification from blob storage."""
    bucket: Optional[str] = None
    name: Optional[str] = None
    metadata: StorageObjectMetadata = Field(default_factory=StorageObjectMetadata)


class StorageEventResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    reason: Optional[str] = None
    file_id: Optional[str] = Field(default=None, alias="fileID")
    analysis_id: Optional[str] = Field(default=None, alias="analysisID")


class RegenerateRequest(BaseModel):
    """Request to regenerate an analysis using reviewer feedback."""
    model_config = ConfigDict(populate_by_name=True)

    file_id: Optional[str] = Field(default=None, alias="fileID")
    analysis_id: Optional[str] = Field(default=None, alias="analysisID")
    user_rating: Optional[int] = Field(default=None, alias="userRating")
    user_comment: Optional[str] = Field(default=None, alias="userComment")


class RegenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_analysis_id: str = Field(alias="newAnalysisID")


class FeedbackUpdate(BaseModel):
    """Reviewer feedback on an existing analysis."""
    model_config = ConfigDict(populate_by_name=True)

    user_rating: Optional[int] = Field(default=None, ge=1, le=5, alias="userRating")
    user_comment: Optional[str] = Field(default=None, alias="userComment")


class AnalysisResponse(BaseModel):
    """Schema for analysis response."""
    analysis_id: str
    document_id: str
    position: int
    owner: str
    content: Dict[str, Any]
    model_identifier: str
    generated_at: Optional[datetime] = None
    user_rating: Optional[int] = None
    user_comment: Optional[str] = None
    next_analysis_id: Optional[str] = None

    class Config:
        from_attributes = True
