from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from docsplit.pipeline.models import StagingStatus


@dataclass
class StagingRecord:
    """Represents a row from the staging_records table."""

    id: int
    project_id: int
    uploader_id: int
    source_file_id: str
    source_file_key: str
    original_name: str
    status: StagingStatus
    boundaries: list[int] | None = None
    stage_log: list[dict[str, Any]] = field(default_factory=list)
    derived_ids: list[int] = field(default_factory=list)
    error: str | None = None
    attempt: int = 1
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DerivedDocumentDraft:
    """Values needed to insert one derived_documents row."""

    project_id: int
    title: str
    file_id: str
    file_key: str
    page_start: int
    page_end: int
    source_staging_id: int | None = None


@dataclass
class DerivedDocumentRecord:
    """Represents a row from the derived_documents table."""

    id: int
    project_id: int
    title: str
    file_id: str
    file_key: str
    page_start: int
    page_end: int
    status: str = "pending"
    source_staging_id: int | None = None
    created_at: datetime | None = None
