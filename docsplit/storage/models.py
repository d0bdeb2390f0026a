from dataclasses import dataclass


@dataclass(frozen=True)
class StoredArtifact:
    """Identity of persisted bytes in the artifact store."""

    id: str
    key: str
