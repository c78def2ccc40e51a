"""Custom exception hierarchy for cvtrail."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Record errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    ANALYSIS_NOT_FOUND = "ANALYSIS_NOT_FOUND"

    # Chain errors
    CONFLICT = "CONFLICT"

    # Store errors
    TRANSIENT_STORE_FAILURE = "TRANSIENT_STORE_FAILURE"

    # External collaborators
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    RENDERING_FAILED = "RENDERING_FAILED"
    STORAGE_FAILED = "STORAGE_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CvTrailException(Exception):
    """
    Base exception for all cvtrail errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class DocumentNotFoundError(CvTrailException):
    """Document not found in the record store."""

    def __init__(self, document_id: str):
        super().__init__(
            f"Document not found: {document_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"document_id": document_id}
        )


class AnalysisNotFoundError(CvTrailException):
    """Analysis not found in the record store."""

    def __init__(self, analysis_id: str):
        super().__init__(
            f"Analysis not found: {analysis_id}",
            ErrorCode.ANALYSIS_NOT_FOUND,
            status_code=404,
            details={"analysis_id": analysis_id}
        )


class NoAnalysesError(CvTrailException):
    """The document exists but has not been analyzed yet."""

    def __init__(self, document_id: str):
        super().__init__(
            f"No analyses found for document: {document_id}",
            ErrorCode.ANALYSIS_NOT_FOUND,
            status_code=404,
            details={"document_id": document_id}
        )


class ChainConflictError(CvTrailException):
    """The referenced predecessor is not the current head of its document's chain."""

    def __init__(self, document_id: str, analysis_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Analysis {analysis_id} is not the current head of document {document_id}",
            ErrorCode.CONFLICT,
            status_code=409,
            details={"document_id": document_id, "analysis_id": analysis_id}
        )


class TransientStoreError(CvTrailException):
    """Write contention persisted after every retry. Nothing was committed."""

    def __init__(self, document_id: str, attempts: int, original_error: Optional[Exception] = None):
        details: Dict[str, Any] = {"document_id": document_id, "attempts": attempts}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(
            f"Store contention on document {document_id} after {attempts} attempts",
            ErrorCode.TRANSIENT_STORE_FAILURE,
            status_code=503,
            details=details
        )


class UpstreamUnavailableError(CvTrailException):
    """The generative model could not be reached or timed out."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(
            message,
            ErrorCode.UPSTREAM_UNAVAILABLE,
            status_code=502,
            details=details
        )


class RenderingFailedError(CvTrailException):
    """The external rendering service rejected the request or did not answer."""

    def __init__(self, message: str, upstream_status: Optional[int] = None, upstream_body: Optional[str] = None):
        details: Dict[str, Any] = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        if upstream_body is not None:
            details["upstream_body"] = upstream_body
        super().__init__(
            message,
            ErrorCode.RENDERING_FAILED,
            status_code=502,
            details=details
        )


class StorageFailedError(CvTrailException):
    """An artifact could not be fetched from or written to blob storage."""

    def __init__(self, message: str, path: Optional[str] = None, original_error: Optional[Exception] = None):
        details = {}
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(
            message,
            ErrorCode.STORAGE_FAILED,
            status_code=502,
            details=details
        )


class ValidationError(CvTrailException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )
