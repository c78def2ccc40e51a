"""Data access repositories."""

from .base import BaseRepository
from .document_repository import DocumentRepository
from .analysis_repository import AnalysisRepository, make_analysis_id
from .user_repository import UserRepository
from .resume_version_repository import ResumeVersionRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "AnalysisRepository",
    "make_analysis_id",
    "UserRepository",
    "ResumeVersionRepository",
]
