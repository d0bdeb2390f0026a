import httpx

from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.models import BoundaryDetection
from docsplit.detection.parsing import coerce_pages
from docsplit.logging.logger import Log
from docsplit.pipeline.exceptions import AnalysisError


class WebhookBoundaryDetector(BaseBoundaryDetector):
    """Delegates detection to an external HTTP service.

    Request: ``POST {"url": <signed url>}``; response: ``{"pages": [...]}``.
    """

    def __init__(
        self,
        *,
        endpoint_url: str,
        timeout_seconds: int,
        bearer_token: str = "",
        client: httpx.Client | None = None,
    ) -> None:
        if not endpoint_url:
            raise ValueError("detector_webhook_url is required for boundary_detector=webhook")
        self._endpoint_url = endpoint_url
        self._bearer_token = bearer_token
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def detect(self, file_url: str) -> BoundaryDetection:
        headers = {"Content-Type": "application/json"}
        if self._bearer_token:
            headers["Authorization"] = f"Bearer {self._bearer_token}"

        Log.info(f"Calling boundary webhook {self._endpoint_url}")
        try:
            response = self._client.post(
                self._endpoint_url, json={"url": file_url}, headers=headers
            )
        except httpx.HTTPError as exc:
            raise AnalysisError(f"Boundary webhook unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise AnalysisError(f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise AnalysisError(f"Boundary webhook returned invalid JSON: {exc}") from exc

        raw_pages = payload.get("pages") if isinstance(payload, dict) else None
        pages = coerce_pages(raw_pages)
        if not pages:
            raise AnalysisError("Boundary webhook response is invalid or empty")
        return BoundaryDetection(pages=pages, method="webhook")

    def close(self) -> None:
        self._client.close()
