"""Database models."""

from .document import Document
from .analysis import Analysis
from .user import User, UserDocument
from .resume_version import ResumeVersion

__all__ = [
    "Document", "Analysis",
    "User", "UserDocument",
    "ResumeVersion",
]
