"""Generation pipeline — coordinates model, rendering, storage and versioning.

Two paths share the same steps:

Analysis path (uploaded resume, or regeneration with feedback)
    assemble text -> model call -> append to the version chain.
    Every step is fatal: the analysis is the deliverable.

Generation path (resume synthesized from structured fields)
    1. compose text               (short text only warns)
    2. enhancement model call     UpstreamUnavailableError
    3. external rendering         RenderingFailedError
    4. fetch + store artifact     StorageFailedError
    5. metadata commit            must succeed before success is reported
    6. analysis of the new file   best effort: logged, reported, never raised

Nothing after a failed step runs, and no document row exists unless its PDF
was stored.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import CvTrailException, ValidationError
from ..schemas.generation import RenderedArtifact, RenderOptions, RenderRequest, ResumeFields
from .blob_store import BlobStore, build_blob_store
from .document_service import DocumentService
from .output_parser import StructuredResult, UnstructuredResult, to_content
from .rendering import RenderingClient
from .resume_text import compose_resume_text
from .review_model import ReviewModel
from .text_extraction import extract_pdf_text
from .version_chain import VersionChainManager

logger = logging.getLogger(__name__)


@dataclass
class PipelineInput:
    """Raw input for one pipeline run.

    Exactly one text source is used, in this order: structured resume fields,
    literal text, or a PDF in blob storage. Render options select the
    generation path.
    """
    text: Optional[str] = None
    source_path: Optional[str] = None
    bucket: Optional[str] = None
    resume: Optional[ResumeFields] = None
    render: Optional[RenderOptions] = None


@dataclass
class ChainOptions:
    """Where the resulting analysis goes and what lineage it carries."""
    document_id: Optional[str] = None
    predecessor_analysis_id: Optional[str] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
    resume_id: Optional[str] = None
    version_id: Optional[str] = None


@dataclass
class AnalysisResult:
    document_id: str
    analysis_id: str
    content: dict
    structured: bool


@dataclass
class GenerationResult:
    document_id: str
    storage_path: str
    artifact: RenderedArtifact
    generated_at: datetime
    analysis_id: Optional[str]
    analysis_status: str
    analysis_error: Optional[str] = None


PipelineResult = Union[AnalysisResult, GenerationResult]


def build_storage_path(requestor_id: str, title: str, now: datetime) -> str:
    """``{requestor}/{title}-{YYYY-MM-DD-HH-MM-SS-mmm}.pdf``"""
    stamp = now.strftime("%Y-%m-%d-%H-%M-%S") + f"-{now.microsecond // 1000:03d}"
    safe_title = title.replace("/", "-").strip() or "Resume"
    return f"{requestor_id}/{safe_title}-{stamp}.pdf"


class GenerationPipeline:
    """Runs the analysis and generation paths against injected collaborators."""

    def __init__(
        self,
        db: Session,
        model: Optional[ReviewModel] = None,
        renderer: Optional[RenderingClient] = None,
        blob_store: Optional[BlobStore] = None,
        chain: Optional[VersionChainManager] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.db = db
        self.model = model or ReviewModel()
        self.renderer = renderer or RenderingClient()
        self.blob_store = blob_store or build_blob_store()
        self.chain = chain or VersionChainManager(db)
        self.documents = DocumentService(db)
        self._clock = clock

    def run(
        self,
        raw_input: PipelineInput,
        requestor_id: str,
        chain: Optional[ChainOptions] = None,
    ) -> PipelineResult:
        """Dispatch to the generation path (render options present) or the analysis path."""
        chain = chain or ChainOptions()
        if raw_input.render is not None or raw_input.resume is not None:
            return self.generate(raw_input, requestor_id, chain)
        if not chain.document_id:
            raise ValidationError("Analysis requires a document ID", field="fileID")
        return self.analyze(chain.document_id, raw_input, chain)

    # ------------------------------------------------------------------
    # Step 1
    # ------------------------------------------------------------------

    def assemble_text(self, raw_input: PipelineInput) -> str:
        if raw_input.resume is not None:
            text = compose_resume_text(raw_input.resume)
        elif raw_input.text is not None:
            text = raw_input.text
        elif raw_input.source_path:
            data = self.blob_store.get(raw_input.source_path, bucket=raw_input.bucket)
            text = extract_pdf_text(data)
        else:
            raise ValidationError("No resume text or source file supplied")

        if len(text.strip()) < settings.min_resume_text_length:
            logger.warning(
                "Resume text too short or empty (%d chars)", len(text.strip()),
                extra={"source_path": raw_input.source_path},
            )
        return text

    # ------------------------------------------------------------------
    # Analysis path
    # ------------------------------------------------------------------

    def analyze(
        self,
        document_id: str,
        raw_input: PipelineInput,
        chain: Optional[ChainOptions] = None,
    ) -> AnalysisResult:
        """Review the text and append the result to the document's chain."""
        chain = chain or ChainOptions()
        previous = None
        if chain.predecessor_analysis_id:
            # Re-checked at append; a stale predecessor stops here before the model call
            previous = self.chain.ensure_head(document_id, chain.predecessor_analysis_id)

        text = self.assemble_text(raw_input)

        if previous is not None:
            result = self.model.regenerate(text, previous.content, chain.rating, chain.comment)
        else:
            result = self.model.review(text)

        if isinstance(result, UnstructuredResult):
            logger.warning(
                "Model output for document %s was not a JSON object; stored raw text",
                document_id, extra={"document_id": document_id},
            )

        content = to_content(result)
        analysis_id = self.chain.append_analysis(
            document_id,
            content,
            self.model.model_identifier,
            predecessor_analysis_id=chain.predecessor_analysis_id,
        )
        return AnalysisResult(
            document_id=document_id,
            analysis_id=analysis_id,
            content=content,
            structured=isinstance(result, StructuredResult),
        )

    def regenerate(
        self,
        document_id: str,
        analysis_id: str,
        rating: Optional[int],
        comment: Optional[str],
    ) -> AnalysisResult:
        """New analysis of a stored document, superseding *analysis_id*."""
        self.chain.get_analysis(analysis_id)
        document = self.documents.get_document(document_id)
        if not document.source_path:
            raise ValidationError("File path not found in document.", field="source_path")

        return self.analyze(
            document_id,
            PipelineInput(source_path=document.source_path, bucket=document.bucket),
            ChainOptions(
                document_id=document_id,
                predecessor_analysis_id=analysis_id,
                rating=rating,
                comment=comment,
            ),
        )

    # ------------------------------------------------------------------
    # Generation path
    # ------------------------------------------------------------------

    def generate(
        self,
        raw_input: PipelineInput,
        requestor_id: str,
        chain: Optional[ChainOptions] = None,
    ) -> GenerationResult:
        """Synthesize a resume PDF, store it, record it, then try to analyze it."""
        chain = chain or ChainOptions()
        resume = raw_input.resume or ResumeFields()
        options = raw_input.render or RenderOptions()

        # 1. Text
        text = self.assemble_text(raw_input)
        title = options.resolved_title()
        defaults = RenderRequest.from_options(text, options)

        # 2. Enhancement
        enhancement = self.model.enhance(
            resume.model_dump(),
            text,
            defaults.to_payload(),
        )
        render_text = text
        if isinstance(enhancement, StructuredResult) and enhancement.data.enhanced_text:
            render_text = enhancement.data.enhanced_text
        render_request = defaults.model_copy(update={"text": render_text})

        # 3. Rendering
        artifact = self.renderer.render(render_request)

        # 4. Artifact storage
        now = self._clock()
        storage_path = build_storage_path(requestor_id, title, now)
        pdf_bytes = self.renderer.fetch_artifact(artifact.pdf_url)
        self.blob_store.put(
            storage_path,
            pdf_bytes,
            content_type="application/pdf",
            metadata={
                "owner": requestor_id,
                "originalTitle": title,
                "generatedAt": now.isoformat(),
            },
        )
        logger.info("PDF saved to blob storage: %s", storage_path, extra={"storage_path": storage_path})

        # 5. Metadata commit
        document_id = self.documents.commit_generated_document(
            owner=requestor_id,
            filename=title,
            storage_path=storage_path,
            bucket=self.blob_store.default_bucket,
            artifact=artifact,
            generation_params=render_request.to_payload(),
            resume_id=chain.resume_id,
            version_id=chain.version_id,
        )

        # 6. Best-effort analysis
        analysis_id: Optional[str] = None
        analysis_error: Optional[str] = None
        try:
            analysis = self.analyze(document_id, PipelineInput(text=text))
            analysis_id = analysis.analysis_id
            logger.info("Analysis completed for generated resume", extra={"document_id": document_id})
        except Exception as e:
            analysis_error = e.error_code.value if isinstance(e, CvTrailException) else type(e).__name__
            logger.exception(
                "Failed to analyze generated resume %s", document_id,
                extra={"document_id": document_id, "analysis_error": analysis_error},
            )

        return GenerationResult(
            document_id=document_id,
            storage_path=storage_path,
            artifact=artifact,
            generated_at=now,
            analysis_id=analysis_id,
            analysis_status="completed" if analysis_id else "failed",
            analysis_error=analysis_error,
        )
