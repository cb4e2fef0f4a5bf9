"""
Main OCR Engine Module.

OCREngine is the unified entry point for OCR. It owns the backend and
accepts either PIL images or image paths.

Usage:
    from snapcrop.ocr_engine import OCREngine

    engine = OCREngine()
    result = engine.extract(image)
    print(result.text)

Author: SnapCrop Team
"""

from pathlib import Path
from typing import Any, Optional, Union

from PIL import Image

from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import OCRProcessingError
from .ocr_result import OCRResult
from .tesseract_backend import TesseractBackend

logger = get_logger(__name__)


class OCREngine:
    """
    Main OCR engine providing a unified interface for text extraction.

    The backend is created lazily so that constructing an engine never
    probes the system for a Tesseract binary.

    Attributes:
        backend: The active OCR backend instance (anything with
                 ``extract(image) -> OCRResult``)

    Example:
        >>> engine = OCREngine()
        >>> result = engine.extract("receipt.png")
        >>> print(f"Extracted {result.word_count} words")
    """

    def __init__(self, backend: Optional[Any] = None) -> None:
        self._backend = backend

    @property
    def backend(self) -> Any:
        if self._backend is None:
            self._backend = TesseractBackend()
            logger.info("OCR Engine initialized with backend: tesseract")
        return self._backend

    def extract(self, image: Union[Image.Image, str, Path]) -> OCRResult:
        """
        Extract text and word boxes from an image.

        Args:
            image: PIL Image or path to image file.

        Returns:
            OCRResult containing words and lines.

        Raises:
            OCREngineNotAvailableError: If the backend is not installed.
            OCRProcessingError: If extraction fails.
        """
        if isinstance(image, (str, Path)):
            image_path = str(image)
            logger.debug(f"Loading image from: {image_path}")
            try:
                with Image.open(image_path) as source:
                    image = source.convert('RGB')
            except OSError as e:
                raise OCRProcessingError(image_path, f"Failed to load image: {e}")

        if not isinstance(image, Image.Image):
            raise OCRProcessingError("unknown", "Invalid image input")

        return self.backend.extract(image)
