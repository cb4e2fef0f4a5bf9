"""
Detection Module for SnapCrop.

Usage:
    from snapcrop.detection import get_detector

    detector = get_detector()
    detections = detector.detect(displayed.rendered_image())

The active detector can be swapped with ``set_detector`` (tests, or an
alternative backend exposing the same ``detect`` method).
"""

from typing import List, Optional, Protocol

from PIL import Image

from .detection import BoundingBox, Detection, DisplayedImage
from .detector import ObjectDetector


class Detector(Protocol):
    """Anything that maps an image to detections in its own pixel space."""

    def detect(self, image: Image.Image) -> List[Detection]:
        ...


_detector: Optional[Detector] = None


def get_detector() -> Detector:
    """Return the active detector, creating the default one on first use."""
    global _detector
    if _detector is None:
        _detector = ObjectDetector()
    return _detector


def set_detector(detector: Optional[Detector]) -> None:
    """Replace the active detector; ``None`` restores the default."""
    global _detector
    _detector = detector


__all__ = [
    'BoundingBox',
    'Detection',
    'DisplayedImage',
    'Detector',
    'ObjectDetector',
    'get_detector',
    'set_detector',
]
