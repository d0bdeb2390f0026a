"""Example boundary detector.

Use this module as a reference when implementing new detector adapters.
Implement BaseBoundaryDetector and register it in BoundaryDetectorFactory.
"""

from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.models import BoundaryDetection
from docsplit.pipeline.exceptions import AnalysisError


class ExampleBoundaryDetector(BaseBoundaryDetector):
    """Returns fixed boundary pages without any network call.

    Useful for local development and tests: the default ``[1]`` turns every
    upload into a single segment.
    """

    def __init__(self, pages: list[int] | None = None) -> None:
        self._pages = list(pages) if pages is not None else [1]

    def detect(self, file_url: str) -> BoundaryDetection:
        _ = file_url
        if not self._pages:
            raise AnalysisError("Detector returned no boundary pages")
        return BoundaryDetection(pages=list(self._pages), method="fixed")
