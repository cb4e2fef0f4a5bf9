"""
Region Extraction Module for SnapCrop.

Maps detections from rendered to native coordinates, crops each one at
native resolution and draws the annotated overlay.
"""

from .extractor import (
    NO_OBJECTS_MESSAGE,
    CroppedRegion,
    RegionExtraction,
    RegionExtractor,
    extract_regions,
)
from .overlay import OverlayAnnotation, OverlayRenderer
from .scaling import NativeRect, ScaleFactor, compute_scale_factor, to_native

__all__ = [
    'NO_OBJECTS_MESSAGE',
    'CroppedRegion',
    'RegionExtraction',
    'RegionExtractor',
    'extract_regions',
    'OverlayAnnotation',
    'OverlayRenderer',
    'NativeRect',
    'ScaleFactor',
    'compute_scale_factor',
    'to_native',
]
