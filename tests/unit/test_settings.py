import pytest
from pydantic import ValidationError

from docsplit.config.settings import Settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        assert Settings().app_env == "dev"

    def test_default_db_port(self) -> None:
        assert Settings().db_port == 5432

    def test_default_signed_url_ttl(self) -> None:
        assert Settings().signed_url_ttl_seconds == 1800

    def test_default_detector(self) -> None:
        s = Settings()
        assert s.boundary_detector == "openai"
        assert s.detector_openai_max_output_tokens == 150

    def test_default_storage_backend(self) -> None:
        assert Settings().storage_backend == "local"

    def test_default_pdf_engine(self) -> None:
        assert Settings().pdf_engine == "pymupdf"


class TestSettingsFromEnv:
    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        assert Settings().db_host == "db.example.com"

    def test_loads_detector_pages_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXAMPLE_DETECTOR_PAGES", "[1, 4, 8]")
        assert Settings().example_detector_pages == [1, 4, 8]

    def test_reads_dotenv_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        (tmp_path / ".env").write_text("STORAGE_BACKEND=s3\nS3_BUCKET=docs\n")
        s = Settings()
        assert s.storage_backend == "s3"
        assert s.s3_bucket == "docs"


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_ttl_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIGNED_URL_TTL_SECONDS", "soon")
        with pytest.raises(ValidationError):
            Settings()
