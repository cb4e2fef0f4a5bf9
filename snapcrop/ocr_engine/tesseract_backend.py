"""
Tesseract OCR Backend.

Reads text from images with the Tesseract binary through pytesseract.
Only the word-level ``image_to_data`` table is used; line text is
rebuilt from the block/paragraph/line numbers Tesseract reports.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package

Author: SnapCrop Team
"""

import time
from itertools import groupby
from typing import Any, Dict, List

import pytesseract
from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError
from .ocr_result import OCRLine, OCRResult, OCRWord

logger = get_logger(__name__)


class TesseractBackend:
    """
    pytesseract-backed OCR.

    The Tesseract binary is probed on construction, so a missing install
    surfaces before any image is processed.

    Attributes:
        language: Tesseract language code(s), e.g. "eng" or "eng+deu"
        psm: Page segmentation mode
        oem: OCR engine mode
        extra_config: Additional command-line flags
        version: Detected Tesseract version
    """

    def __init__(self) -> None:
        self.language = get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")
        self.version = self._probe_version()

    @staticmethod
    def _probe_version() -> str:
        try:
            version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError(f"tesseract ({e})")
        logger.info(f"Using Tesseract {version}")
        return version

    @property
    def command_line(self) -> str:
        """Flags passed to the tesseract binary."""
        flags = f"--psm {self.psm} --oem {self.oem}"
        return f"{flags} {self.extra_config}".strip()

    def extract(self, image: Image.Image) -> OCRResult:
        """
        Read every word in ``image``.

        Raises:
            OCRProcessingError: If Tesseract fails on the image.
        """
        started = time.time()
        rgb = image if image.mode == 'RGB' else image.convert('RGB')

        try:
            table = pytesseract.image_to_data(
                rgb,
                lang=self.language,
                config=self.command_line,
                output_type=pytesseract.Output.DICT
            )
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            logger.error(f"Tesseract failed: {e}")
            raise OCRProcessingError("image", str(e))

        words = list(self._words_from_table(table))
        result = OCRResult(
            words=words,
            lines=self._lines_from_words(words),
            image_width=rgb.width,
            image_height=rgb.height,
            language=self.language,
            engine="tesseract",
            processing_time=time.time() - started,
            metadata={'psm': self.psm, 'oem': self.oem, 'tesseract_version': self.version}
        )

        logger.info(
            f"OCR read {result.word_count} word(s) on {result.line_count} line(s), "
            f"mean confidence {result.average_confidence:.1f}% ({result.processing_time:.2f}s)"
        )
        return result

    @staticmethod
    def _words_from_table(table: Dict[str, List[Any]]):
        """Yield an OCRWord for every non-blank row with a positive-area box."""
        rows = zip(
            table['text'], table['left'], table['top'], table['width'], table['height'],
            table['conf'], table['block_num'], table['par_num'], table['line_num']
        )
        for text, left, top, width, height, conf, block, par, line in rows:
            text = (text or '').strip()
            if not text or width <= 0 or height <= 0:
                continue
            yield OCRWord(
                text=text,
                bbox=(left, top, left + width, top + height),
                # Structural rows carry conf -1
                confidence=max(float(conf), 0.0),
                line_key=(block, par, line)
            )

    @staticmethod
    def _lines_from_words(words: List[OCRWord]) -> List[OCRLine]:
        ordered = sorted(words, key=lambda word: word.line_key)
        return [
            OCRLine(words=sorted(group, key=lambda word: word.left), line_index=index)
            for index, (_, group) in enumerate(groupby(ordered, key=lambda word: word.line_key))
        ]
