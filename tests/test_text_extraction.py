"""Tests for PDF text extraction."""

import pytest

from cvtrail.exceptions import ValidationError
from cvtrail.services.text_extraction import extract_pdf_text


def test_extracts_page_text(make_pdf):
    text = extract_pdf_text(make_pdf("Jane Doe Senior Engineer"))
    assert "Jane Doe" in text


def test_garbage_is_a_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        extract_pdf_text(b"this is not a pdf")
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["field"] == "file"


def test_empty_bytes_is_a_validation_error():
    with pytest.raises(ValidationError):
        extract_pdf_text(b"")
