"""Shared test fixtures for the cvtrail test suite.

Tests run against a SQLite file in a temporary directory (a file rather than
``:memory:`` so that threads with their own sessions share one database).
Tables are created once and emptied before each test.

External collaborators are never contacted: the model is reached through a
patched ``litellm.completion``, the rendering service through an
``httpx.MockTransport``, and blobs go to a ``LocalBlobStore`` under
``tmp_path``.
"""

import json
import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="cvtrail-test-")

# Point the app at the test database before any app imports.
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_TEST_DIR, 'cvtrail_test.db')}",
)
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FORMAT"] = "text"
os.environ["BLOB_ROOT"] = os.path.join(_TEST_DIR, "blobs")
os.environ["RENDER_SERVICE_URL"] = "http://render.test/txt_to_pdf"

from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from cvtrail.database import SessionLocal, get_db, init_db
from cvtrail.main import app
from cvtrail.schemas.document import DocumentCreate
from cvtrail.services.blob_store import LocalBlobStore
from cvtrail.services.document_service import DocumentService
from cvtrail.services.rendering import RenderingClient

init_db()

# Deleted in this order before each test (children before parents).
_CLEAN_TABLES = ["resume_versions", "user_documents", "analyses", "users", "documents"]

RENDER_URL = "http://render.test/txt_to_pdf"
ARTIFACT_URL = "http://render.test/files/out.pdf"


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test for isolation."""
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def blob_store(tmp_path):
    return LocalBlobStore(root=str(tmp_path / "blobs"), default_bucket="test-bucket")


@pytest.fixture()
def blob_metadata(blob_store):
    """Read the metadata sidecar the local store writes next to each blob."""

    def _read(path, bucket=None):
        sidecar = blob_store.root / (bucket or blob_store.default_bucket) / (path + ".meta.json")
        return json.loads(sidecar.read_text())

    return _read


@pytest.fixture()
def make_document(db):
    """Register an uploaded document and return it."""

    def _make(owner="user-1", filename="resume.pdf", source_path="user-1/resume.pdf", bucket="test-bucket"):
        return DocumentService(db).register_upload(
            DocumentCreate(owner=owner, filename=filename, source_path=source_path, bucket=bucket)
        )

    return _make


@pytest.fixture()
def model_reply():
    """Build a fake ``litellm.completion`` response carrying *content*."""

    def _reply(content):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = content
        return response

    return _reply


class RenderServer:
    """Stand-in for the rendering service and its artifact host."""

    def __init__(self, status=200, fetch_status=200, pdf=b"%PDF-1.4 rendered"):
        self.status = status
        self.fetch_status = fetch_status
        self.pdf = pdf
        self.render_payloads = []
        self.fetches = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.render_payloads.append(json.loads(request.content))
            if self.status != 200:
                return httpx.Response(self.status, text="renderer exploded")
            return httpx.Response(200, json={
                "pdf_url": ARTIFACT_URL,
                "gcs_uri": "gs://render-bucket/out.pdf",
                "page_count": 2,
                "bytes": len(self.pdf),
                "title": "Resume - Jane Doe",
                "rendered_at": "2026-01-02T03:04:05Z",
            })
        self.fetches += 1
        if self.fetch_status != 200:
            return httpx.Response(self.fetch_status, text="gone")
        return httpx.Response(200, content=self.pdf)

    def client(self) -> RenderingClient:
        return RenderingClient(service_url=RENDER_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def render_server():
    return RenderServer()


def _build_pdf(body_text: str) -> bytes:
    """Minimal single-page PDF showing *body_text* in Helvetica."""
    stream = f"BT /F1 12 Tf 72 720 Td ({body_text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture()
def make_pdf():
    return _build_pdf
