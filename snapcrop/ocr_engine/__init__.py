"""
OCR Engine Module for SnapCrop.

This module provides:
    - Text extraction from images (Tesseract)
    - Word and line grouping
    - Single-call recognition yielding full text and digit runs

Author: SnapCrop Team
"""

from typing import Optional

from .engine import OCREngine
from .tesseract_backend import TesseractBackend
from .ocr_result import OCRResult, OCRWord, OCRLine
from .recognition import (
    NO_NUMBERS_MESSAGE,
    RecognitionResult,
    TextRecognizer,
    extract_numbers,
)

_recognizer: Optional[TextRecognizer] = None


def get_recognizer() -> TextRecognizer:
    """Return the active text recognizer, creating the default one on first use."""
    global _recognizer
    if _recognizer is None:
        _recognizer = TextRecognizer()
    return _recognizer


def set_recognizer(recognizer: Optional[TextRecognizer]) -> None:
    """Replace the active recognizer; ``None`` restores the default."""
    global _recognizer
    _recognizer = recognizer


__all__ = [
    'OCREngine',
    'TesseractBackend',
    'OCRResult',
    'OCRWord',
    'OCRLine',
    'NO_NUMBERS_MESSAGE',
    'RecognitionResult',
    'TextRecognizer',
    'extract_numbers',
    'get_recognizer',
    'set_recognizer',
]
