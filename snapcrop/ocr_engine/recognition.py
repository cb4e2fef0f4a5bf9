"""
Text Recognition Module.

Runs OCR once and derives both outputs used when drafting an invoice:
the full recognized text and every maximal digit run in it.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from pathlib import Path

from PIL import Image

from snapcrop.utils.logger import get_logger
from .engine import OCREngine
from .ocr_result import OCRResult

logger = get_logger(__name__)

DIGIT_RUN = re.compile(r'\d+')
NUMBER_SEPARATOR = ", "
NO_NUMBERS_MESSAGE = "No numbers found."


def extract_numbers(text: str) -> List[str]:
    """
    Return every maximal run of digits in ``text``, in order.

    Example:
        >>> extract_numbers("INV 2041, total 1,250")
        ['2041', '1', '250']
    """
    return DIGIT_RUN.findall(text)


@dataclass(frozen=True)
class RecognitionResult:
    """
    Both outputs of a single recognition call.

    Attributes:
        text: Full recognized text, stripped
        numbers: Digit runs found in ``text``
        ocr: The underlying OCR result, when available
    """
    text: str
    numbers: List[str] = field(default_factory=list)
    ocr: Optional[OCRResult] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_numbers(self) -> bool:
        return bool(self.numbers)

    @property
    def numbers_text(self) -> str:
        """Digit runs joined by ``", "``; empty when there are none."""
        return NUMBER_SEPARATOR.join(self.numbers)

    @property
    def numbers_display(self) -> str:
        return self.numbers_text if self.has_numbers else NO_NUMBERS_MESSAGE

    @classmethod
    def from_text(cls, text: str, ocr: Optional[OCRResult] = None) -> 'RecognitionResult':
        text = text.strip()
        return cls(text=text, numbers=extract_numbers(text), ocr=ocr)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'numbers': list(self.numbers),
            'numbers_text': self.numbers_text,
            'ocr': self.ocr.to_dict() if self.ocr else None,
        }


class TextRecognizer:
    """
    Single-call text recognizer.

    Example:
        >>> recognizer = TextRecognizer()
        >>> result = recognizer.recognize(image)
        >>> result.numbers_text
        '2041, 1250'
    """

    def __init__(self, engine: Optional[OCREngine] = None) -> None:
        self.engine = engine or OCREngine()

    def recognize(self, image: Union[Image.Image, str, Path]) -> RecognitionResult:
        """
        Recognize text in an image.

        Raises:
            OCRError: If the OCR engine is unavailable or fails.
        """
        ocr_result = self.engine.extract(image)
        result = RecognitionResult.from_text(ocr_result.text, ocr=ocr_result)

        logger.info(
            f"Recognized {len(result.text)} characters, "
            f"{len(result.numbers)} number(s)"
        )
        return result
