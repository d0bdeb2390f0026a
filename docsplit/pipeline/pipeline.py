from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from docsplit.database.models import StagingRecord
from docsplit.detection.models import BoundaryDetection
from docsplit.splitting.ranges import PageRange
from docsplit.storage.models import StoredArtifact


@dataclass(slots=True)
class PipelineContext:
    record: StagingRecord
    signed_url: str = ""
    detection: BoundaryDetection | None = None
    source_bytes: bytes = b""
    total_pages: int = 0
    ranges: list[PageRange] = field(default_factory=list)
    segments: list[bytes] = field(default_factory=list)
    artifacts: list[StoredArtifact] = field(default_factory=list)
    derived_ids: list[int] = field(default_factory=list)

    @property
    def record_id(self) -> int:
        return self.record.id

    @property
    def boundaries(self) -> list[int]:
        return list(self.detection.pages) if self.detection is not None else []


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
