from dataclasses import asdict

from docsplit.database.models import DerivedDocumentDraft
from docsplit.database.repositories.derived_documents_repository import DerivedDocumentsRepository
from docsplit.database.repositories.staging_repository import StagingRepository
from docsplit.detection.base import BaseBoundaryDetector
from docsplit.logging.logger import Log
from docsplit.pdf.base import BasePdfInspector
from docsplit.pipeline.exceptions import AnalysisError, ExtractionError, PersistenceError
from docsplit.pipeline.models import (
    STEP_DETECTION,
    STEP_SEGMENT,
    STEP_SPLIT,
    LogStatus,
    StageLogEntry,
    StagingStatus,
)
from docsplit.pipeline.pipeline import PipelineContext, PipelineStep
from docsplit.splitting.extractor import SegmentExtractor
from docsplit.splitting.ranges import compute_page_ranges
from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.naming import segment_filename, segment_title

PDF_MIME_TYPE = "application/pdf"


class MintSignedUrlStep(PipelineStep):
    def __init__(self, store: BaseArtifactStore, ttl_seconds: int) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        context.signed_url = self._store.signed_url(
            context.record.source_file_key, self._ttl_seconds
        )
        Log.info(
            f"Signed URL for record {context.record_id} valid for {self._ttl_seconds}s"
        )
        return context


class DetectBoundariesStep(PipelineStep):
    def __init__(
        self, detector: BaseBoundaryDetector, staging_repo: StagingRepository
    ) -> None:
        self._detector = detector
        self._staging_repo = staging_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.signed_url:
            raise ValueError("PipelineContext.signed_url must be set before detection")
        detection = self._detector.detect(context.signed_url)
        if not detection.pages:
            raise AnalysisError("Detector returned an empty boundary list")
        context.detection = detection

        entry = StageLogEntry(
            step=STEP_DETECTION,
            status=LogStatus.SUCCESS,
            details=f"Boundary detection completed - {len(detection.pages)} documents detected",
            data={
                "pages": list(detection.pages),
                "method": detection.method,
                "model": detection.model,
                "usage": asdict(detection.usage) if detection.usage else None,
            },
        )
        self._staging_repo.save_boundaries(context.record_id, detection.pages, entry)
        Log.info(f"Record {context.record_id}: boundaries {detection.pages}")
        return context


class StartSplittingStep(PipelineStep):
    def __init__(self, staging_repo: StagingRepository) -> None:
        self._staging_repo = staging_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        count = len(context.boundaries)
        entry = StageLogEntry(
            step=STEP_SPLIT,
            status=LogStatus.STARTED,
            details=f"Splitting started with {count} boundaries",
            data={"boundaryCount": count},
        )
        self._staging_repo.transition(
            context.record_id, StagingStatus.PROCESSING, StagingStatus.SPLITTING, entry
        )
        context.record.status = StagingStatus.SPLITTING
        Log.info(f"Record {context.record_id} marked as splitting")
        return context


class ComputeRangesStep(PipelineStep):
    def __init__(
        self,
        store: BaseArtifactStore,
        inspector: BasePdfInspector,
        staging_repo: StagingRepository,
    ) -> None:
        self._store = store
        self._inspector = inspector
        self._staging_repo = staging_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.source_bytes = self._store.read(context.record.source_file_key)
        context.total_pages = self._inspector.page_count(context.source_bytes)
        context.ranges = compute_page_ranges(context.boundaries, context.total_pages)

        entry = StageLogEntry(
            step=STEP_SPLIT,
            status=LogStatus.PROGRESS,
            details=(
                f"{len(context.ranges)} ranges computed over {context.total_pages} pages"
            ),
            data={
                "totalPages": context.total_pages,
                "ranges": [r.to_dict() for r in context.ranges],
            },
        )
        self._staging_repo.append_log(context.record_id, entry)
        Log.info(
            f"Record {context.record_id}: {context.total_pages} pages -> "
            f"{', '.join(str(r) for r in context.ranges)}"
        )
        return context


class ExtractSegmentsStep(PipelineStep):
    def __init__(self, extractor: SegmentExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.ranges:
            raise ValueError("PipelineContext.ranges must be set before extraction")
        context.segments = self._extractor.split(context.source_bytes, context.ranges)
        if len(context.segments) != len(context.ranges):
            raise ExtractionError(
                f"Expected {len(context.ranges)} segments, got {len(context.segments)}"
            )
        context.source_bytes = b""
        Log.info(
            f"Record {context.record_id}: extracted {len(context.segments)} segments "
            f"({sum(len(s) for s in context.segments)} bytes)"
        )
        return context


class PersistSegmentsStep(PipelineStep):
    """Upload each segment and create its derived document, in range order."""

    def __init__(
        self,
        store: BaseArtifactStore,
        derived_repo: DerivedDocumentsRepository,
        staging_repo: StagingRepository,
    ) -> None:
        self._store = store
        self._derived_repo = derived_repo
        self._staging_repo = staging_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        record = context.record
        total = len(context.segments)
        for index, (data, page_range) in enumerate(
            zip(context.segments, context.ranges), start=1
        ):
            artifact = self._store.save(
                data, segment_filename(record.original_name, index), PDF_MIME_TYPE
            )
            context.artifacts.append(artifact)

            derived_id = self._derived_repo.create(
                DerivedDocumentDraft(
                    project_id=record.project_id,
                    title=segment_title(record.original_name, index),
                    file_id=artifact.id,
                    file_key=artifact.key,
                    page_start=page_range.start,
                    page_end=page_range.end,
                    source_staging_id=record.id,
                )
            )
            entry = StageLogEntry(
                step=STEP_SEGMENT,
                status=LogStatus.PROGRESS,
                details=f"Segment {index}/{total}",
                data={
                    "range": page_range.to_dict(),
                    "artifactKey": artifact.key,
                    "derivedId": derived_id,
                    "bytes": len(data),
                },
            )
            self._staging_repo.append_derived_id(record.id, derived_id, entry)
            context.derived_ids.append(derived_id)
            Log.info(
                f"Record {record.id}: segment {index}/{total} pages {page_range} "
                f"-> document {derived_id}"
            )
        context.segments = []
        return context


class MarkDoneStep(PipelineStep):
    def __init__(self, staging_repo: StagingRepository) -> None:
        self._staging_repo = staging_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if len(context.derived_ids) != len(context.ranges):
            raise PersistenceError(
                f"Created {len(context.derived_ids)} documents for {len(context.ranges)} ranges"
            )
        entry = StageLogEntry(
            step=STEP_SPLIT,
            status=LogStatus.SUCCESS,
            details=f"Split completed - {len(context.derived_ids)} documents created",
            data={
                "segmentCount": len(context.derived_ids),
                "artifactKeys": [a.key for a in context.artifacts],
                "derivedIds": list(context.derived_ids),
            },
        )
        self._staging_repo.transition(
            context.record_id, StagingStatus.SPLITTING, StagingStatus.DONE, entry
        )
        context.record.status = StagingStatus.DONE
        Log.info(f"Record {context.record_id} marked as done")
        return context
