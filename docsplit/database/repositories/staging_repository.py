from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docsplit.database.connection import get_connection
from docsplit.database.models import StagingRecord
from docsplit.pipeline.exceptions import PersistenceError, RecordNotFoundError
from docsplit.pipeline.models import (
    IN_FLIGHT_STATUSES,
    StageLogEntry,
    StagingStatus,
    can_transition,
)

_COLUMNS = """
    id, project_id, uploader_id, source_file_id, source_file_key, original_name,
    status, boundaries, stage_log, derived_ids, error, attempt,
    locked_at, created_at, updated_at
"""


def _row_to_record(row: dict[str, Any]) -> StagingRecord:
    return StagingRecord(
        id=row["id"],
        project_id=row["project_id"],
        uploader_id=row["uploader_id"],
        source_file_id=row["source_file_id"],
        source_file_key=row["source_file_key"],
        original_name=row["original_name"],
        status=StagingStatus(row["status"]),
        boundaries=row["boundaries"],
        stage_log=row["stage_log"] or [],
        derived_ids=row["derived_ids"] or [],
        error=row["error"],
        attempt=row["attempt"],
        locked_at=row["locked_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _log_param(entry: StageLogEntry) -> Jsonb:
    return Jsonb([entry.to_dict()])


class StagingRepository:
    """Database operations for the staging_records table.

    Every write is a single guarded UPDATE that also appends to ``stage_log``
    in the database, so a transition and its log entry are durable together.
    Writes to an in-flight record also refresh ``locked_at``; the stale-record
    reaper reads it as the time of the last progress.
    """

    def create(
        self,
        *,
        project_id: int,
        uploader_id: int,
        source_file_id: str,
        source_file_key: str,
        original_name: str,
    ) -> StagingRecord:
        """Insert a new staging record in status=pending."""
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO staging_records
                        (project_id, uploader_id, source_file_id, source_file_key,
                         original_name, status)
                        VALUES (%s, %s, %s, %s, %s, 'pending')
                        RETURNING {_COLUMNS}
                        """,
                        (project_id, uploader_id, source_file_id, source_file_key, original_name),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to create staging record: {exc}") from exc

        if row is None:
            raise PersistenceError("Staging record insert returned no row")
        return _row_to_record(row)

    def claim_next_pending(self, conn: psycopg.Connection[Any]) -> StagingRecord | None:
        """Claim the oldest pending record using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staging_records
                WHERE status = 'pending'
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()

        if row is None:
            return None

        conn.execute(
            """
            UPDATE staging_records
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        record = _row_to_record(row)
        record.status = StagingStatus.PROCESSING
        return record

    def find_by_id(self, record_id: int) -> StagingRecord:
        """Find a staging record by ID.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM staging_records WHERE id = %s",
                    (record_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Staging record {record_id} not found")
        return _row_to_record(row)

    def append_log(self, record_id: int, entry: StageLogEntry) -> None:
        """Append one entry to the stage log without touching status."""
        self._update(
            """
            UPDATE staging_records
            SET stage_log = stage_log || %s,
                locked_at = CASE
                    WHEN status IN ('processing', 'splitting') THEN NOW()
                    ELSE locked_at
                END,
                updated_at = NOW()
            WHERE id = %s
            """,
            (_log_param(entry), record_id),
            f"Staging record {record_id} not found",
        )

    def save_boundaries(
        self, record_id: int, boundaries: list[int], entry: StageLogEntry
    ) -> None:
        """Persist detected boundaries while the record is processing."""
        self._update(
            """
            UPDATE staging_records
            SET boundaries = %s, stage_log = stage_log || %s,
                locked_at = NOW(), updated_at = NOW()
            WHERE id = %s AND status = 'processing'
            """,
            (Jsonb(list(boundaries)), _log_param(entry), record_id),
            f"Staging record {record_id} is not processing",
        )

    def transition(
        self,
        record_id: int,
        current: StagingStatus,
        target: StagingStatus,
        entry: StageLogEntry,
    ) -> None:
        """Move a record from ``current`` to ``target`` and append ``entry``.

        Raises:
            PersistenceError: if the transition is not allowed or the record
                is no longer in ``current``.
        """
        if not can_transition(current, target):
            raise PersistenceError(
                f"Illegal staging transition {current.value} -> {target.value}"
            )
        self._update(
            """
            UPDATE staging_records
            SET status = %s, stage_log = stage_log || %s,
                locked_at = CASE WHEN %s THEN NOW() ELSE NULL END,
                updated_at = NOW()
            WHERE id = %s AND status = %s
            """,
            (
                target.value,
                _log_param(entry),
                target in IN_FLIGHT_STATUSES,
                record_id,
                current.value,
            ),
            f"Staging record {record_id} is not {current.value}",
        )

    def append_derived_id(
        self, record_id: int, derived_id: int, entry: StageLogEntry
    ) -> None:
        """Append a derived document ID while the record is splitting."""
        self._update(
            """
            UPDATE staging_records
            SET derived_ids = derived_ids || %s,
                stage_log = stage_log || %s,
                locked_at = NOW(),
                updated_at = NOW()
            WHERE id = %s AND status = 'splitting'
            """,
            (Jsonb([derived_id]), _log_param(entry), record_id),
            f"Staging record {record_id} is not splitting",
        )

    def mark_error(self, record_id: int, message: str, entry: StageLogEntry) -> None:
        """Divert an in-flight record to error, keeping boundaries and prior log."""
        self._update(
            """
            UPDATE staging_records
            SET status = 'error', error = %s, stage_log = stage_log || %s,
                locked_at = NULL, updated_at = NOW()
            WHERE id = %s AND status IN ('processing', 'splitting')
            """,
            (message, _log_param(entry), record_id),
            f"Staging record {record_id} is not in flight",
        )

    def requeue(self, record_id: int, entry: StageLogEntry) -> None:
        """Return an errored record to pending for a fresh run.

        Boundaries, derived IDs and the error message are cleared; the log
        is kept and ``entry`` is appended.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
            PersistenceError: if the record is not in error.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE staging_records
                        SET status = 'pending', boundaries = NULL,
                            derived_ids = '[]'::jsonb, error = NULL,
                            attempt = attempt + 1, locked_at = NULL,
                            stage_log = stage_log || %s, updated_at = NOW()
                        WHERE id = %s AND status = 'error'
                        """,
                        (_log_param(entry), record_id),
                    )
                    updated = cur.rowcount
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to requeue staging record {record_id}: {exc}") from exc

        if updated == 0:
            record = self.find_by_id(record_id)
            raise PersistenceError(
                f"Staging record {record_id} is {record.status.value}, only error records can be retried"
            )

    def reap_stale(self, max_age_seconds: int, entry: StageLogEntry) -> list[int]:
        """Move records stuck in flight longer than ``max_age_seconds`` to error."""
        in_flight = [status.value for status in IN_FLIGHT_STATUSES]
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE staging_records
                        SET status = 'error', error = %s, stage_log = stage_log || %s,
                            locked_at = NULL, updated_at = NOW()
                        WHERE status = ANY(%s)
                          AND locked_at < NOW() - %s * INTERVAL '1 second'
                        RETURNING id
                        """,
                        (entry.details, _log_param(entry), in_flight, max_age_seconds),
                    )
                    rows = cur.fetchall()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to reap stale staging records: {exc}") from exc
        return [row[0] for row in rows]

    def _update(self, sql: str, params: tuple[Any, ...], missing_message: str) -> None:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)  # type: ignore[arg-type]
                    if cur.rowcount == 0:
                        raise PersistenceError(missing_message)
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Staging record write failed: {exc}") from exc
