from pathlib import Path
from typing import Any

import httpx
import openai

from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.models import BoundaryDetection, TokenUsage
from docsplit.detection.parsing import parse_pages_text
from docsplit.detection.prompt_loader import load_prompt
from docsplit.logging.logger import Log
from docsplit.pipeline.exceptions import AnalysisError


class OpenAIBoundaryDetector(BaseBoundaryDetector):
    """Asks a vision-capable OpenAI model where each document starts.

    The PDF is downloaded from the signed URL, attached through the Files
    API and analyzed with the Responses API in JSON mode.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        max_output_tokens: int = 150,
        prompt_path: Path | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout_seconds)
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._prompt = load_prompt(prompt_path)

    def detect(self, file_url: str) -> BoundaryDetection:
        pdf_bytes = self._download(file_url)
        Log.info(f"Analyzing {len(pdf_bytes)} bytes with {self._model}")

        try:
            upload = self._client.files.create(
                file=("document.pdf", pdf_bytes, "application/pdf"),
                purpose="user_data",
            )
            try:
                response = self._client.responses.create(
                    model=self._model,
                    input=[
                        {
                            "role": "user",
                            "content": [
                                {"type": "input_text", "text": self._prompt},
                                {"type": "input_file", "file_id": upload.id},
                            ],
                        }
                    ],
                    text={"format": {"type": "json_object"}},
                    max_output_tokens=self._max_output_tokens,
                )
            finally:
                self._delete_upload(upload.id)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisError(f"AI provider API error: {exc}") from exc

        raw_text = (response.output_text or "").strip()
        if not raw_text:
            raise AnalysisError("AI returned empty response")
        Log.debug(f"Boundary detector raw response: {raw_text}")

        pages = sorted(set(parse_pages_text(raw_text)))
        if not pages:
            raise AnalysisError("AI found no valid boundary pages")
        return BoundaryDetection(
            pages=pages,
            method="vision-analysis",
            model=self._model,
            usage=self._usage(response),
        )

    def _download(self, file_url: str) -> bytes:
        try:
            response = self._http.get(file_url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AnalysisError(
                f"Could not download PDF: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AnalysisError(f"Could not download PDF: {exc}") from exc
        return response.content

    def _delete_upload(self, file_id: str) -> None:
        try:
            self._client.files.delete(file_id)
        except openai.APIError as exc:
            Log.warning(f"Could not delete uploaded file {file_id}: {exc}")

    def close(self) -> None:
        self._http.close()
        self._client.close()

    @staticmethod
    def _usage(response: Any) -> TokenUsage | None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return None
        return TokenUsage(
            prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
            completion_tokens=getattr(usage, "output_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )
