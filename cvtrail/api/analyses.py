"""Analysis endpoints: regeneration with feedback, reads, and reviewer feedback."""

from fastapi import APIRouter, Depends

from ..exceptions import ValidationError
from ..schemas.analysis import AnalysisResponse, FeedbackUpdate, RegenerateRequest, RegenerateResponse
from ..services import GenerationPipeline, VersionChainManager
from .deps import get_chain_manager, get_pipeline

router = APIRouter(prefix="/api/analyses", tags=["analyses"])


@router.post("/regenerate", response_model=RegenerateResponse)
def regenerate_analysis(
    data: RegenerateRequest,
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Produce a new analysis of a document that supersedes *analysisID*.

    The superseded analysis must be the current head of the document's
    chain; a stale one yields 409 and nothing is written.
    """
    missing = [
        alias for alias, value in (
            ("fileID", data.file_id),
            ("analysisID", data.analysis_id),
            ("userRating", data.user_rating),
            ("userComment", data.user_comment),
        )
        if value is None or value == ""
    ]
    if missing:
        raise ValidationError(
            "Missing required fields: fileID, analysisID, userRating, userComment",
            field=missing[0],
        )
    if not 1 <= data.user_rating <= 5:
        raise ValidationError("userRating must be between 1 and 5", field="userRating")

    result = pipeline.regenerate(data.file_id, data.analysis_id, data.user_rating, data.user_comment)
    return RegenerateResponse(new_analysis_id=result.analysis_id)


@router.get("/{analysis_id}", response_model=AnalysisResponse)
def get_analysis(
    analysis_id: str,
    chain: VersionChainManager = Depends(get_chain_manager),
):
    """Get a single analysis."""
    return chain.get_analysis(analysis_id)


@router.put("/{analysis_id}/feedback", response_model=AnalysisResponse)
def submit_feedback(
    analysis_id: str,
    data: FeedbackUpdate,
    chain: VersionChainManager = Depends(get_chain_manager),
):
    """Store a reviewer's rating and comment on an analysis."""
    return chain.record_feedback(analysis_id, data.user_rating, data.user_comment)
