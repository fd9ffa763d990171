"""Storage adapter abstraction.

Defines the interface for storing generated PDFs and photos in buckets.
Allows switching between local filesystem and an object store.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List


class StorageAdapter(ABC):
    """Abstract bucket storage for checklist PDFs and ticket photos."""

    @abstractmethod
    def upload(
        self,
        bucket: str,
        filename: str,
        data: bytes,
        *,
        content_type: str = "application/pdf",
        upsert: bool = True,
    ) -> str:
        """
        Store *data* as *filename* in *bucket*.

        Args:
            bucket: Bucket name (e.g. "checklist-staff-practices")
            filename: Object name inside the bucket
            data: File content
            content_type: MIME type of the content
            upsert: Replace an existing object of the same name

        Returns:
            Public URL of the stored object

        Raises:
            StorageUploadError: when the object could not be stored
        """
        raise NotImplementedError

    @abstractmethod
    def list(self, bucket: str) -> List[str]:
        """
        List object names in *bucket* (empty list for an unknown bucket).
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, bucket: str, filename: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def public_url(self, bucket: str, filename: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def download(self, bucket: str, filename: str) -> bytes:
        """
        Read an object back.

        Raises:
            FileNotFoundError: when the object does not exist
        """
        raise NotImplementedError
