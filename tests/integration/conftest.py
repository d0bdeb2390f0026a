import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from docsplit.config.settings import Settings
from docsplit.database.connection import apply_schema, close_pool, get_connection, init_pool
from docsplit.database.repositories.staging_repository import StagingRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docsplit_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        psycopg.connect(
            host=test_settings.db_host,
            port=test_settings.db_port,
            dbname=test_settings.db_database,
            user=test_settings.db_username,
            password=test_settings.db_password,
            connect_timeout=3,
        ).close()
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        apply_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "derived_documents":
                    cur.execute("DELETE FROM derived_documents WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "staging_records":
                    cur.execute(
                        "DELETE FROM derived_documents WHERE source_staging_id = %s",
                        (row_id,),
                    )
                    cur.execute("DELETE FROM staging_records WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_record(integration_cleanup: list[tuple[str, int]]):
    """Factory inserting a pending staging record that is removed after the test."""

    def _seed(source_file_id: str = "seed", source_file_key: str = "seed/a.pdf") -> int:
        record = StagingRepository().create(
            project_id=1,
            uploader_id=1,
            source_file_id=source_file_id,
            source_file_key=source_file_key,
            original_name="Integration batch",
        )
        integration_cleanup.append(("staging_records", record.id))
        return record.id

    return _seed
