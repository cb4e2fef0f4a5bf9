"""
Input Handler Module for SnapCrop.

This module provides functionality for:
    - Loading and validating a single image file (image MIME types only)
    - Decoding, EXIF orientation and RGB normalization
    - Capturing a still from a live camera

Author: SnapCrop Team
"""

from .handler import InputHandler, InputResult
from .image_processor import ImageProcessor
from .camera import CameraCapture, capture_still

__all__ = ['InputHandler', 'InputResult', 'ImageProcessor', 'CameraCapture', 'capture_still']
