import json

import httpx
import pytest

from docsplit.detection.webhook_adapter import WebhookBoundaryDetector
from docsplit.pipeline.exceptions import AnalysisError

ENDPOINT = "https://detector.example.com/boundaries"


def _make_detector(
    handler, bearer_token: str = "token-123"
) -> WebhookBoundaryDetector:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WebhookBoundaryDetector(
        endpoint_url=ENDPOINT,
        timeout_seconds=5,
        bearer_token=bearer_token,
        client=client,
    )


class TestWebhookBoundaryDetector:
    def test_posts_signed_url_with_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"pages": [1, 4, 8]})

        result = _make_detector(handler).detect("https://files/a.pdf?sig=x")

        assert result.pages == [1, 4, 8]
        assert result.method == "webhook"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Authorization"] == "Bearer token-123"
        assert json.loads(request.content) == {"url": "https://files/a.pdf?sig=x"}

    def test_omits_authorization_without_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"pages": [1]})

        _make_detector(handler, bearer_token="").detect("https://files/a.pdf")

        assert "Authorization" not in seen[0].headers

    def test_filters_invalid_page_values(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"pages": [1, 0, -3, "x", 6]})

        assert _make_detector(handler).detect("u").pages == [1, 6]

    def test_huge_page_number_does_not_overflow(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b'{"pages": [1, ' + b"9" * 400 + b"]}")

        assert _make_detector(handler).detect("u").pages[0] == 1

    def test_http_error_includes_status_and_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream down" + "!" * 500)

        with pytest.raises(AnalysisError, match=r"^HTTP 503: upstream down") as exc_info:
            _make_detector(handler).detect("u")
        assert len(str(exc_info.value)) == len("HTTP 503: ") + 200

    def test_empty_pages_raise(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"pages": []})

        with pytest.raises(AnalysisError, match="invalid or empty"):
            _make_detector(handler).detect("u")

    def test_missing_pages_key_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[1, 2])

        with pytest.raises(AnalysisError, match="invalid or empty"):
            _make_detector(handler).detect("u")

    def test_invalid_json_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(AnalysisError, match="invalid JSON"):
            _make_detector(handler).detect("u")

    def test_connection_failure_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AnalysisError, match="unreachable"):
            _make_detector(handler).detect("u")

    def test_requires_endpoint(self) -> None:
        with pytest.raises(ValueError, match="detector_webhook_url is required"):
            WebhookBoundaryDetector(endpoint_url="", timeout_seconds=5)

    def test_close_releases_http_client(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        detector = WebhookBoundaryDetector(
            endpoint_url=ENDPOINT, timeout_seconds=5, client=client
        )

        detector.close()

        assert client.is_closed
