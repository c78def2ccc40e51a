"""Plain-text extraction from PDF resumes."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the text of every page, separated by blank lines.

    Raises:
        ValidationError: the bytes are not a readable PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as e:
        raise ValidationError(f"Unreadable PDF: {e}", field="file") from e

    text = "\n\n".join(p for p in pages if p)
    logger.debug("Extracted %d chars from %d pages", len(text), len(pages))
    return text
