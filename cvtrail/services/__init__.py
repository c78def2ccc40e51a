"""Business logic services."""

from .document_service import DocumentService
from .version_chain import VersionChainManager
from .pipeline import (
    AnalysisResult,
    ChainOptions,
    GenerationPipeline,
    GenerationResult,
    PipelineInput,
)

__all__ = [
    "DocumentService",
    "VersionChainManager",
    "GenerationPipeline",
    "PipelineInput",
    "ChainOptions",
    "AnalysisResult",
    "GenerationResult",
]
