class PipelineError(Exception):
    """Base exception for all splitting pipeline errors."""


class ValidationError(PipelineError):
    """Raised when boundaries or page ranges are invalid."""


class AnalysisError(PipelineError):
    """Raised when the boundary detector is unreachable or returns an unusable result."""


class ExtractionError(PipelineError):
    """Raised when pages cannot be copied out of the source PDF."""


class UploadError(PipelineError):
    """Raised when the artifact store cannot persist or serve a segment."""


class ArtifactNotFoundError(UploadError):
    """Raised when an artifact key does not resolve to stored bytes."""


class PersistenceError(PipelineError):
    """Raised when a staging record or derived document write fails."""


class RecordNotFoundError(PersistenceError):
    """Raised when a staging record cannot be found in the database."""
