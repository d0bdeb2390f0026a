from docsplit.detection.base import BaseBoundaryDetector
from docsplit.detection.factory import BoundaryDetectorFactory
from docsplit.detection.models import BoundaryDetection

__all__ = ["BaseBoundaryDetector", "BoundaryDetection", "BoundaryDetectorFactory"]
