"""Blob storage event endpoint: analyze resumes as they are uploaded."""

import logging
from fastapi import APIRouter, Depends

from ..exceptions import ValidationError
from ..schemas.analysis import StorageEvent, StorageEventResponse
from ..services import ChainOptions, GenerationPipeline, PipelineInput
from .deps import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("/storage", response_model=StorageEventResponse, response_model_exclude_none=True)
def storage_finalized(
    event: StorageEvent,
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Receive an object-finalized notification and analyze the uploaded resume.

    Objects that are not PDFs are acknowledged and ignored. The object's
    metadata must carry the ``fileID`` of the document record created when
    the upload was registered.
    """
    if not event.name or not event.name.lower().endswith(".pdf"):
        logger.info("Ignoring non-PDF object", extra={"object_name": event.name})
        return StorageEventResponse(status="ignored", reason="Not a PDF file")

    if not event.bucket:
        raise ValidationError("Bucket is missing from the storage event", field="bucket")

    file_id = event.metadata.file_id
    if not file_id:
        raise ValidationError("fileID is missing from the object metadata", field="fileID")

    logger.info(
        "Analyzing uploaded resume %s", event.name,
        extra={"document_id": file_id, "bucket": event.bucket, "object_name": event.name},
    )

    # Fail before any blob read or model call when the record is missing.
    pipeline.documents.get_document(file_id)
    result = pipeline.analyze(
        file_id,
        PipelineInput(source_path=event.name, bucket=event.bucket),
        ChainOptions(document_id=file_id),
    )
    return StorageEventResponse(status="analyzed", file_id=file_id, analysis_id=result.analysis_id)
