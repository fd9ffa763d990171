"""Filesystem implementation of StorageAdapter.

Buckets are directories below the storage root:

    <root>/<bucket>/<filename>

Public URLs are built from ``Storage.public_base_url``; without one the
``file://`` URI of the stored file is returned.
"""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import List
from urllib.parse import quote

from checklists.adapters.storage_adapter import StorageAdapter
from checklists.exceptions.errors import StorageUploadError

log = logging.getLogger(__name__)


class FilesystemStorageAdapter(StorageAdapter):
    """Local filesystem implementation of StorageAdapter."""

    def __init__(self, root_path: str | Path | None = None, *, public_base_url: str | None = None):
        """
        Initialize filesystem storage.

        Args:
            root_path: Root directory for all buckets (``Storage.root`` when omitted)
            public_base_url: Prefix for public URLs (``Storage.public_base_url`` when omitted)
        """
        if root_path is None or public_base_url is None:
            from core.config.config_loader import config_loader  # lazy import
            if root_path is None:
                root_path = config_loader.get_storage_root()
            if public_base_url is None:
                public_base_url = config_loader.get_public_base_url()
        self._root = Path(root_path)
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = (public_base_url or "").rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _object_path(self, bucket: str, filename: str) -> Path:
        # names come from code, but never let them escape the bucket directory
        if not bucket or "/" in bucket or "\\" in bucket or bucket in (".", ".."):
            raise StorageUploadError(f"invalid bucket name: {bucket!r}")
        name = Path(filename).name
        if not name or name != filename:
            raise StorageUploadError(f"invalid object name: {filename!r}")
        return self._root / bucket / name

    def upload(self, bucket, filename, data, *, content_type="application/pdf", upsert=True) -> str:
        if not data:
            raise StorageUploadError("storage/invalid-file: File is empty")
        target = self._object_path(bucket, filename)
        if target.exists() and not upsert:
            raise StorageUploadError(f"storage/already-exists: {bucket}/{filename}")
        tmp = target.with_name(target.name + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, target)
        except OSError as exc:
            raise StorageUploadError(f"storage/upload-failed: {exc}") from exc
        log.info("stored %s/%s (%d bytes, %s)", bucket, filename, len(data), content_type)
        return self.public_url(bucket, filename)

    def list(self, bucket: str) -> List[str]:
        directory = self._root / bucket
        if not directory.is_dir():
            return []
        return sorted(p.name for p in directory.iterdir() if p.is_file() and not p.name.endswith(".part"))

    def exists(self, bucket: str, filename: str) -> bool:
        return self._object_path(bucket, filename).is_file()

    def public_url(self, bucket: str, filename: str) -> str:
        if self._base_url:
            return f"{self._base_url}/{quote(bucket)}/{quote(filename)}"
        return self._object_path(bucket, filename).resolve().as_uri()

    def download(self, bucket: str, filename: str) -> bytes:
        path = self._object_path(bucket, filename)
        if not path.is_file():
            raise FileNotFoundError(f"{bucket}/{filename}")
        return path.read_bytes()
