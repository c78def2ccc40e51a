"""Resume generation endpoint."""

from fastapi import APIRouter, Depends

from ..exceptions import ValidationError
from ..schemas.generation import GenerateResumeRequest, GenerateResumeResponse
from ..services import ChainOptions, GenerationPipeline, PipelineInput
from .deps import get_pipeline

router = APIRouter(prefix="/api/resumes", tags=["resumes"])


@router.post("/generate", response_model=GenerateResumeResponse)
def generate_resume(
    data: GenerateResumeRequest,
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Render a resume PDF from structured fields, store it, and analyze it.

    Success is reported once the PDF is stored and its document record is
    committed. The follow-up analysis is best effort: its outcome is in
    ``analysis_status`` and never turns the response into an error.
    """
    if not data.user_id:
        raise ValidationError("userId is required", field="userId")
    if not (data.name or data.summary):
        raise ValidationError("Resume needs at least a name or a summary", field="name")

    result = pipeline.generate(
        PipelineInput(resume=data.resume_fields(), render=data.render_options()),
        data.user_id,
        ChainOptions(resume_id=data.resume_id, version_id=data.version_id),
    )
    artifact = result.artifact
    return GenerateResumeResponse(
        file_id=result.document_id,
        pdf_url=artifact.pdf_url,
        storage_path=result.storage_path,
        gcs_uri=artifact.gcs_uri,
        page_count=artifact.page_count,
        bytes=artifact.bytes,
        title=artifact.title,
        rendered_at=artifact.rendered_at,
        analysis_id=result.analysis_id,
        analysis_status=result.analysis_status,
        analysis_error=result.analysis_error,
        generated_at=result.generated_at,
    )
