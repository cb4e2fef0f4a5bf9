"""
OCR Result Data Classes.

What a single OCR pass over an image produced: positioned words,
grouped into reading-order lines.

Classes:
    OCRWord: One recognized token and its pixel box
    OCRLine: Words sharing a Tesseract (block, paragraph, line) key
    OCRResult: Everything recognized in one image

Author: SnapCrop Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

PixelBox = Tuple[int, int, int, int]
LineKey = Tuple[int, int, int]


@dataclass
class OCRWord:
    """
    A recognized token.

    Attributes:
        text: Token text, stripped
        bbox: (left, top, right, bottom) in image pixels
        confidence: Engine confidence, 0-100
        line_key: (block, paragraph, line) the token was read in
    """
    text: str
    bbox: PixelBox
    confidence: float = 0.0
    line_key: LineKey = (0, 0, 0)

    @property
    def left(self) -> int:
        return self.bbox[0]


@dataclass
class OCRLine:
    """Words of one text line, ordered left to right."""
    words: List[OCRWord] = field(default_factory=list)
    line_index: int = 0

    @property
    def text(self) -> str:
        return ' '.join(word.text for word in self.words)

    @property
    def bbox(self) -> Optional[PixelBox]:
        """Union of the word boxes, None for an empty line."""
        if not self.words:
            return None
        lefts, tops, rights, bottoms = zip(*(word.bbox for word in self.words))
        return (min(lefts), min(tops), max(rights), max(bottoms))

    @property
    def average_confidence(self) -> float:
        return _mean_confidence(self.words)

    def to_dict(self) -> Dict[str, Any]:
        bbox = self.bbox
        return {
            'line_index': self.line_index,
            'text': self.text,
            'bbox': list(bbox) if bbox else None,
            'average_confidence': self.average_confidence,
        }


@dataclass
class OCRResult:
    """
    Complete OCR output for one image.

    Attributes:
        words: Every recognized token, in engine order
        lines: Tokens grouped into lines, top to bottom
        image_width: Width of the image that was read
        image_height: Height of the image that was read
        language: Engine language code
        engine: Engine name
        processing_time: Seconds spent in the engine
        metadata: Engine settings and version
    """
    words: List[OCRWord] = field(default_factory=list)
    lines: List[OCRLine] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0
    language: str = "eng"
    engine: str = "unknown"
    processing_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Line texts joined by newlines; falls back to a flat word list."""
        if self.lines:
            return '\n'.join(line.text for line in self.lines)
        return ' '.join(word.text for word in self.words)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def average_confidence(self) -> float:
        return _mean_confidence(self.words)

    def is_empty(self) -> bool:
        return not self.words

    def to_dict(self) -> Dict[str, Any]:
        return {
            'engine': self.engine,
            'language': self.language,
            'image_size': [self.image_width, self.image_height],
            'word_count': self.word_count,
            'average_confidence': self.average_confidence,
            'processing_time': self.processing_time,
            'lines': [line.to_dict() for line in self.lines],
        }

    def __repr__(self) -> str:
        return (
            f"OCRResult(engine={self.engine!r}, words={self.word_count}, "
            f"lines={self.line_count}, confidence={self.average_confidence:.1f}%)"
        )


def _mean_confidence(words: List[OCRWord]) -> float:
    if not words:
        return 0.0
    return sum(word.confidence for word in words) / len(words)
