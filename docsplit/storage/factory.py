from pathlib import Path

from docsplit.config.settings import Settings
from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.local_adapter import LocalArtifactStore
from docsplit.storage.s3_adapter import S3ArtifactStore


class ArtifactStoreFactory:
    """Creates the configured artifact store."""

    BACKENDS = ("local", "s3")

    @classmethod
    def create(cls, settings: Settings) -> BaseArtifactStore:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalArtifactStore(
                files_root=Path(settings.storage_files_root),
                public_base_url=settings.storage_public_base_url,
                signing_secret=settings.storage_signing_secret,
            )
        if backend == "s3":
            return S3ArtifactStore(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
