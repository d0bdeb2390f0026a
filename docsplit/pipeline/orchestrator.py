"""Staging record state machine: pending -> processing -> splitting -> done.

The worker claims a record (pending -> processing) and hands its ID to
``SplitPipeline.run``, which executes two phases:

* detection: mint a signed URL for the source and persist the boundaries
  returned by the detector;
* splitting: move to splitting, compute ranges from the real page count,
  extract and optimize segments, store each one and create its derived
  document, then move to done.

A failure in either phase is recorded as an error entry in the stage log
and the record moves to error. Whatever earlier phases persisted
(boundaries, log entries, derived IDs) is left in place.
"""

from docsplit.config.settings import Settings
from docsplit.database.repositories.derived_documents_repository import DerivedDocumentsRepository
from docsplit.database.repositories.staging_repository import StagingRepository
from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.factory import BoundaryDetectorFactory
from docsplit.logging.logger import Log
from docsplit.pdf.base import BasePdfInspector
from docsplit.pdf.factory import PdfInspectorFactory
from docsplit.pipeline.models import (
    STEP_DETECTION,
    STEP_SPLIT,
    LogStatus,
    StageLogEntry,
    StagingStatus,
)
from docsplit.pipeline.pipeline import PipelineContext, PipelineStep
from docsplit.pipeline.steps import (
    ComputeRangesStep,
    DetectBoundariesStep,
    ExtractSegmentsStep,
    MarkDoneStep,
    MintSignedUrlStep,
    PersistSegmentsStep,
    StartSplittingStep,
)
from docsplit.splitting.extractor import SegmentExtractor
from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.factory import ArtifactStoreFactory


class SplitPipeline:
    """Runs one claimed staging record to done or error. Never raises."""

    def __init__(
        self,
        *,
        staging_repo: StagingRepository,
        detection_steps: list[PipelineStep],
        splitting_steps: list[PipelineStep],
    ) -> None:
        self._staging_repo = staging_repo
        self._detection_steps = detection_steps
        self._splitting_steps = splitting_steps

    def run(self, record_id: int) -> StagingStatus:
        """Process a record that is already in processing and return its final status."""
        Log.info(f"Starting split pipeline for record {record_id}")
        try:
            record = self._staging_repo.find_by_id(record_id)
        except Exception as exc:
            Log.error(f"Could not load record {record_id}: {exc}")
            self._fail(record_id, STEP_DETECTION, "Could not load staging record", exc)
            return StagingStatus.ERROR

        if record.status is not StagingStatus.PROCESSING:
            Log.warning(
                f"Record {record_id} is {record.status.value}, expected processing; skipping"
            )
            return record.status

        context = PipelineContext(record=record)

        error = self._run_phase(context, self._detection_steps)
        if error is not None:
            self._fail(record_id, STEP_DETECTION, "Boundary detection failed", error)
            return StagingStatus.ERROR

        error = self._run_phase(context, self._splitting_steps)
        if error is not None:
            self._fail(record_id, STEP_SPLIT, "Splitting failed", error)
            return StagingStatus.ERROR

        Log.info(
            f"Record {record_id} done: {len(context.derived_ids)} derived documents"
        )
        return StagingStatus.DONE

    @staticmethod
    def _run_phase(
        context: PipelineContext, steps: list[PipelineStep]
    ) -> Exception | None:
        try:
            for step in steps:
                context = step.run(context)
        except Exception as exc:
            return exc
        return None

    def _fail(
        self, record_id: int, step: str, summary: str, exc: Exception | None
    ) -> None:
        message = f"{summary}: {exc}" if exc is not None else summary
        Log.error(f"Record {record_id}: {message}")
        entry = StageLogEntry(
            step=step,
            status=LogStatus.ERROR,
            details=summary,
            data={
                "error": str(exc) if exc is not None else None,
                "type": type(exc).__name__ if exc is not None else None,
            },
        )
        try:
            self._staging_repo.mark_error(record_id, message, entry)
        except Exception as persist_exc:
            Log.exception(
                f"Could not record failure for record {record_id}: {persist_exc}"
            )


def build_pipeline(
    settings: Settings,
    *,
    staging_repo: StagingRepository | None = None,
    derived_repo: DerivedDocumentsRepository | None = None,
    store: BaseArtifactStore | None = None,
    detector: BaseBoundaryDetector | None = None,
    inspector: BasePdfInspector | None = None,
    extractor: SegmentExtractor | None = None,
) -> SplitPipeline:
    """Build a SplitPipeline with all required adapters."""
    staging_repo = staging_repo or StagingRepository()
    derived_repo = derived_repo or DerivedDocumentsRepository()
    store = store or ArtifactStoreFactory.create(settings)
    detector = detector or BoundaryDetectorFactory.create(settings)
    inspector = inspector or PdfInspectorFactory.create(settings)
    extractor = extractor or SegmentExtractor()

    return SplitPipeline(
        staging_repo=staging_repo,
        detection_steps=[
            MintSignedUrlStep(store, settings.signed_url_ttl_seconds),
            DetectBoundariesStep(detector, staging_repo),
        ],
        splitting_steps=[
            StartSplittingStep(staging_repo),
            ComputeRangesStep(store, inspector, staging_repo),
            ExtractSegmentsStep(extractor),
            PersistSegmentsStep(store, derived_repo, staging_repo),
            MarkDoneStep(staging_repo),
        ],
    )
