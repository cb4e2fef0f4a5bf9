import base64
import io
from collections.abc import Generator
from pathlib import Path
from typing import List, Optional

import pytest
from PIL import Image

from snapcrop.detection import BoundingBox, Detection, set_detector
from snapcrop.ocr_engine import RecognitionResult, set_recognizer


def make_image(width: int = 200, height: int = 100, color: str = "white", mode: str = "RGB") -> Image.Image:
    """Solid-colour test image."""
    return Image.new(mode, (width, height), color=color)


def save_image(path: Path, image: Image.Image, fmt: Optional[str] = None) -> Path:
    image.save(path, format=fmt)
    return path


def decode_region(data_uri: str) -> Image.Image:
    """Open the PNG payload of a data URI."""
    payload = data_uri.split(",", 1)[1]
    return Image.open(io.BytesIO(base64.b64decode(payload)))


def make_detection(label: str, score: float, x: float, y: float, w: float, h: float) -> Detection:
    return Detection(label=label, score=score, bbox=BoundingBox(x, y, w, h))


class FakeDetector:
    """Records the images it sees and returns canned detections"""

    def __init__(self, detections: Optional[List[Detection]] = None, error: Optional[Exception] = None) -> None:
        self.detections = detections or []
        self.error = error
        self.seen_sizes: List[tuple] = []

    def detect(self, image: Image.Image) -> List[Detection]:
        self.seen_sizes.append(image.size)
        if self.error is not None:
            raise self.error
        return list(self.detections)


class FakeRecognizer:
    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def recognize(self, image: Image.Image) -> RecognitionResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return RecognitionResult.from_text(self.text)


@pytest.fixture(autouse=True)
def reset_collaborators() -> Generator[None, None, None]:
    yield
    set_detector(None)
    set_recognizer(None)


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    """A 400x200 white PNG."""
    return save_image(tmp_path / "photo.png", make_image(400, 200))


@pytest.fixture
def wide_png_file(tmp_path: Path) -> Path:
    """A 1600x800 PNG, wider than the default display column."""
    image = make_image(1600, 800)
    image.paste((0, 0, 255), (200, 100, 600, 300))
    return save_image(tmp_path / "wide.png", image)
