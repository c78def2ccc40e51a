"""Pydantic schemas for API validation."""

from .document import DocumentCreate, DocumentResponse
from .analysis import (
    StorageEvent,
    StorageEventResponse,
    RegenerateRequest,
    RegenerateResponse,
    FeedbackUpdate,
    AnalysisResponse,
)
from .generation import (
    ResumeFields,
    RenderOptions,
    RenderRequest,
    RenderedArtifact,
    GenerateResumeRequest,
    GenerateResumeResponse,
)

__all__ = [
    "DocumentCreate",
    "DocumentResponse",
    "StorageEvent",
    "StorageEventResponse",
    "RegenerateRequest",
    "RegenerateResponse",
    "FeedbackUpdate",
    "AnalysisResponse",
    "ResumeFields",
    "RenderOptions",
    "RenderRequest",
    "RenderedArtifact",
    "GenerateResumeRequest",
    "GenerateResumeResponse",
]
