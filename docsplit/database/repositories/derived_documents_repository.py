from typing import Any

import psycopg
from psycopg.rows import dict_row

from docsplit.database.connection import get_connection
from docsplit.database.models import DerivedDocumentDraft, DerivedDocumentRecord
from docsplit.pipeline.exceptions import PersistenceError

_COLUMNS = """
    id, project_id, title, file_id, file_key, page_start, page_end,
    status, source_staging_id, created_at
"""


def _row_to_record(row: dict[str, Any]) -> DerivedDocumentRecord:
    return DerivedDocumentRecord(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        file_id=row["file_id"],
        file_key=row["file_key"],
        page_start=row["page_start"],
        page_end=row["page_end"],
        status=row["status"],
        source_staging_id=row["source_staging_id"],
        created_at=row["created_at"],
    )


class DerivedDocumentsRepository:
    """Database operations for the derived_documents table."""

    def create(self, draft: DerivedDocumentDraft) -> int:
        """Insert one derived document in status=pending and return its ID.

        Raises:
            PersistenceError: if the insert fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO derived_documents
                        (project_id, title, file_id, file_key, page_start, page_end,
                         status, source_staging_id)
                        VALUES (%s, %s, %s, %s, %s, %s, 'pending', %s)
                        RETURNING id
                        """,
                        (
                            draft.project_id,
                            draft.title,
                            draft.file_id,
                            draft.file_key,
                            draft.page_start,
                            draft.page_end,
                            draft.source_staging_id,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to create derived document: {exc}") from exc

        if row is None:
            raise PersistenceError("Derived document insert returned no row")
        return int(row[0])

    def find_by_ids(self, document_ids: list[int]) -> list[DerivedDocumentRecord]:
        """Fetch derived documents, preserving the order of ``document_ids``."""
        if not document_ids:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM derived_documents WHERE id = ANY(%s)",
                    (list(document_ids),),
                )
                rows = cur.fetchall()

        by_id = {row["id"]: _row_to_record(row) for row in rows}
        return [by_id[doc_id] for doc_id in document_ids if doc_id in by_id]
