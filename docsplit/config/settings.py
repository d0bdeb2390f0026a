from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docsplit"
    db_username: str = "docsplit"
    db_password: str = "secret"

    job_poll_interval_seconds: int = 5
    stale_lock_seconds: int = 3600

    pdf_engine: str = "pymupdf"
    signed_url_ttl_seconds: int = 1800

    storage_backend: str = "local"
    storage_files_root: str = "/app/files"
    storage_public_base_url: str = "http://localhost:8000/files"
    storage_signing_secret: str = "secret"
    s3_bucket: str = ""
    s3_region: str = ""
    s3_endpoint_url: str = ""

    boundary_detector: str = "openai"
    detector_timeout_seconds: int = 30
    detector_webhook_url: str = ""
    detector_webhook_bearer_token: str = ""
    detector_openai_api_key: str = ""
    detector_openai_model_name: str = "gpt-4.1-mini"
    detector_openai_max_output_tokens: int = 150
    example_detector_pages: list[int] = [1]
