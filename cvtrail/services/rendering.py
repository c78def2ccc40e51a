"""HTTP client for the external text-to-PDF rendering service."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..exceptions import RenderingFailedError, StorageFailedError
from ..schemas.generation import RenderRequest, RenderedArtifact

logger = logging.getLogger(__name__)

# Upstream error bodies are kept for diagnostics, truncated to this many chars.
MAX_ERROR_BODY_CHARS = 2000


class RenderingClient:
    """Calls the rendering endpoint and downloads the artifacts it produces.

    Both calls are bounded by their own timeout. A rendering failure of any
    kind is a RenderingFailedError; failing to download the produced
    artifact is a StorageFailedError.
    """

    def __init__(
        self,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.service_url = service_url if service_url is not None else settings.render_service_url
        self.timeout = timeout or settings.render_timeout_seconds
        self.fetch_timeout = fetch_timeout or settings.artifact_fetch_timeout_seconds
        self._transport = transport

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self._transport, follow_redirects=True)

    def render(self, request: RenderRequest) -> RenderedArtifact:
        """POST the text and formatting options; return the artifact reference."""
        if not self.service_url:
            raise RenderingFailedError("Rendering service URL is not configured")

        try:
            with self._client(self.timeout) as client:
                resp = client.post(self.service_url, json=request.to_payload())
        except httpx.TimeoutException as e:
            logger.error("Rendering service timed out after %ss", self.timeout)
            raise RenderingFailedError(f"Rendering service timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error("Rendering service unreachable: %s", e)
            raise RenderingFailedError(f"Rendering service unreachable: {e}") from e

        if not resp.is_success:
            body = resp.text[:MAX_ERROR_BODY_CHARS]
            logger.error(
                "PDF generation failed with status %d", resp.status_code,
                extra={"upstream_status": resp.status_code, "upstream_body": body},
            )
            raise RenderingFailedError("PDF generation failed", resp.status_code, body)

        try:
            artifact = RenderedArtifact.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            raise RenderingFailedError(
                "Rendering service returned an unusable response",
                resp.status_code,
                resp.text[:MAX_ERROR_BODY_CHARS],
            ) from e

        logger.info(
            "Rendered %s (%s pages)", artifact.title or request.title, artifact.page_count,
            extra={"pdf_url": artifact.pdf_url},
        )
        return artifact

    def fetch_artifact(self, url: str) -> bytes:
        """Download a rendered artifact."""
        try:
            with self._client(self.fetch_timeout) as client:
                resp = client.get(url)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Fetching rendered artifact failed: %s", e, extra={"url": url})
            raise StorageFailedError("Could not fetch rendered artifact", original_error=e) from e
        return resp.content
