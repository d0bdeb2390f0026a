import time

from docsplit.config.settings import Settings
from docsplit.database.connection import get_connection
from docsplit.database.models import StagingRecord
from docsplit.database.repositories.staging_repository import StagingRepository
from docsplit.logging.logger import Log
from docsplit.pipeline.models import STEP_WORKER, LogStatus, StageLogEntry
from docsplit.pipeline.orchestrator import SplitPipeline

REAP_INTERVAL_SECONDS = 60


class Worker:
    """Poll loop: claim -> run pipeline, sleep when idle, reap stale records."""

    def __init__(
        self,
        staging_repo: StagingRepository,
        pipeline: SplitPipeline,
        settings: Settings,
    ) -> None:
        self._staging_repo = staging_repo
        self._pipeline = pipeline
        self._settings = settings
        self._last_reap: float | None = None

    def run(self, max_records: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_records is set, stop after processing that many records (for testing).
        """
        Log.info("Worker started, polling for staging records")
        records_done = 0
        try:
            while True:
                if max_records is not None and records_done >= max_records:
                    break
                record = self._try_claim_record()
                if record:
                    status = self._pipeline.run(record.id)
                    Log.info(f"Record {record.id} finished with status {status.value}")
                    records_done += 1
                else:
                    self._maybe_reap_stale()
                    Log.debug("No staging records available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _try_claim_record(self) -> StagingRecord | None:
        """Attempt to claim the next pending record. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._staging_repo.claim_next_pending(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None

    def _maybe_reap_stale(self) -> None:
        """Divert records abandoned mid-pipeline (e.g. after a crash) to error."""
        now = time.monotonic()
        if self._last_reap is not None and now - self._last_reap < REAP_INTERVAL_SECONDS:
            return
        self._last_reap = now

        max_age = self._settings.stale_lock_seconds
        entry = StageLogEntry(
            step=STEP_WORKER,
            status=LogStatus.ERROR,
            details=f"Worker lost the record: no progress for {max_age}s",
            data={"staleLockSeconds": max_age},
        )
        try:
            reaped = self._staging_repo.reap_stale(max_age, entry)
        except Exception as exc:
            Log.warning(f"Could not reap stale records: {exc}")
            return
        if reaped:
            Log.warning(f"Marked stale records as error: {reaped}")
