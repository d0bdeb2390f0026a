from docsplit.config.settings import Settings
from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.example_adapter import ExampleBoundaryDetector
from docsplit.detection.openai_adapter import OpenAIBoundaryDetector
from docsplit.detection.webhook_adapter import WebhookBoundaryDetector


class BoundaryDetectorFactory:
    """Creates the configured boundary detector."""

    DETECTORS = ("example", "openai", "webhook")

    @classmethod
    def create(cls, settings: Settings) -> BaseBoundaryDetector:
        detector = settings.boundary_detector.lower()
        if detector == "example":
            return ExampleBoundaryDetector(pages=settings.example_detector_pages)
        if detector == "webhook":
            return WebhookBoundaryDetector(
                endpoint_url=settings.detector_webhook_url,
                timeout_seconds=settings.detector_timeout_seconds,
                bearer_token=settings.detector_webhook_bearer_token,
            )
        if detector == "openai":
            return OpenAIBoundaryDetector(
                api_key=settings.detector_openai_api_key,
                model=settings.detector_openai_model_name,
                timeout_seconds=settings.detector_timeout_seconds,
                max_output_tokens=settings.detector_openai_max_output_tokens,
            )
        raise ValueError(
            f"Unknown boundary detector '{detector}'. Choose from: {list(cls.DETECTORS)}"
        )
