from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.factory import ArtifactStoreFactory
from docsplit.storage.models import StoredArtifact

__all__ = ["ArtifactStoreFactory", "BaseArtifactStore", "StoredArtifact"]
