from abc import ABC, abstractmethod

from docsplit.detection.models import BoundaryDetection


class BaseBoundaryDetector(ABC):
    """Contract for all boundary detection adapters."""

    @abstractmethod
    def detect(self, file_url: str) -> BoundaryDetection:
        """Find where each logical document starts inside a multi-document PDF.

        Args:
            file_url: Time-limited signed URL to the source PDF.

        Returns:
            BoundaryDetection with at least one 1-based page number.

        Raises:
            AnalysisError: if the detector is unreachable or returns an empty
                or malformed result.
        """

    def close(self) -> None:
        """Release network clients. Adapters without any keep this no-op."""
