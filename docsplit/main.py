from docsplit.config.settings import Settings
from docsplit.database.connection import close_pool, init_pool
from docsplit.database.repositories.staging_repository import StagingRepository
from docsplit.detection.factory import BoundaryDetectorFactory
from docsplit.logging.logger import Log
from docsplit.pipeline.orchestrator import build_pipeline
from docsplit.worker.worker import Worker


def main(max_records: int | None = None) -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        detector = BoundaryDetectorFactory.create(settings)
        try:
            staging_repo = StagingRepository()
            pipeline = build_pipeline(settings, staging_repo=staging_repo, detector=detector)
            worker = Worker(staging_repo, pipeline, settings)
            worker.run(max_records=max_records)
        finally:
            detector.close()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
