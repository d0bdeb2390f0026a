from abc import ABC, abstractmethod

from docsplit.storage.models import StoredArtifact


class BaseArtifactStore(ABC):
    """Contract for artifact storage adapters."""

    @abstractmethod
    def save(self, data: bytes, filename: str, mime_type: str) -> StoredArtifact:
        """Persist bytes under a new key.

        Raises:
            UploadError: if the bytes cannot be stored.
        """

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Fetch the bytes stored under ``key``.

        Raises:
            ArtifactNotFoundError: if nothing is stored under ``key``.
            UploadError: on any other storage failure.
        """

    @abstractmethod
    def signed_url(self, key: str, ttl_seconds: int) -> str:
        """Mint a read URL for ``key`` that expires after ``ttl_seconds``.

        Raises:
            UploadError: if the URL cannot be produced.
        """
