"""Blob storage for uploaded and generated artifacts.

Two backends share one interface: a local filesystem store (development and
tests) and Amazon S3 via boto3. Every backend failure is reported as
StorageFailedError.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from ..core.config import BlobBackend, settings
from ..exceptions import StorageFailedError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Put/get binary artifacts by path, with key/value metadata."""

    default_bucket: str

    def put(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        metadata: Optional[dict[str, str]] = None,
        bucket: Optional[str] = None,
    ) -> str: ...

    def get(self, path: str, bucket: Optional[str] = None) -> bytes: ...

    def exists(self, path: str, bucket: Optional[str] = None) -> bool: ...


class LocalBlobStore:
    """Filesystem blob store: ``<root>/<bucket>/<path>`` plus a metadata sidecar."""

    _META_SUFFIX = ".meta.json"

    def __init__(self, root: Optional[str] = None, default_bucket: Optional[str] = None):
        self.root = Path(root or settings.blob_root)
        self.default_bucket = default_bucket or settings.default_bucket

    def _resolve(self, path: str, bucket: Optional[str]) -> Path:
        base = (self.root / (bucket or self.default_bucket)).resolve()
        target = (base / path.lstrip("/")).resolve()
        if base not in target.parents:
            raise StorageFailedError("Blob path escapes its bucket", path=path)
        return target

    def put(self, path, data, content_type="application/octet-stream", metadata=None, bucket=None) -> str:
        target = self._resolve(path, bucket)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            sidecar = target.with_name(target.name + self._META_SUFFIX)
            sidecar.write_text(json.dumps({"contentType": content_type, "metadata": metadata or {}}))
        except OSError as e:
            raise StorageFailedError("Could not write blob", path=path, original_error=e) from e
        logger.debug("Stored %d bytes at %s", len(data), target)
        return path

    def get(self, path, bucket=None) -> bytes:
        target = self._resolve(path, bucket)
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageFailedError("Could not read blob", path=path, original_error=e) from e

    def exists(self, path, bucket=None) -> bool:
        return self._resolve(path, bucket).is_file()


class S3BlobStore:
    """Amazon S3 blob store."""

    def __init__(self, default_bucket: Optional[str] = None, region: Optional[str] = None, client=None):
        self.default_bucket = default_bucket or settings.default_bucket
        self.region = region or settings.s3_region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            try:
                import boto3
            except ImportError:
                raise RuntimeError(
                    "boto3 is required for the S3 blob backend. "
                    "Install it: pip install boto3"
                )
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def put(self, path, data, content_type="application/octet-stream", metadata=None, bucket=None) -> str:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self.client.put_object(
                Bucket=bucket or self.default_bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageFailedError("Could not write blob", path=path, original_error=e) from e
        logger.debug("Stored %d bytes at s3://%s/%s", len(data), bucket or self.default_bucket, path)
        return path

    def get(self, path, bucket=None) -> bytes:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            response = self.client.get_object(Bucket=bucket or self.default_bucket, Key=path)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageFailedError("Could not read blob", path=path, original_error=e) from e

    def exists(self, path, bucket=None) -> bool:
        from botocore.exceptions import ClientError

        try:
            self.client.head_object(Bucket=bucket or self.default_bucket, Key=path)
        except ClientError:
            return False
        return True


def build_blob_store() -> BlobStore:
    """Blob store selected by ``settings.blob_backend``."""
    if settings.blob_backend == BlobBackend.S3:
        return S3BlobStore()
    return LocalBlobStore()
