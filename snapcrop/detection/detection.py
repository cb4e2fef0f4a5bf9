"""
Detection Data Classes.

Structures exchanged between the detection model and the region
extractor. All bounding boxes are in rendered-image pixel coordinates.

Classes:
    BoundingBox: (x, y, width, height) rectangle
    Detection: Labelled, scored bounding box
    DisplayedImage: Native image plus the size it is laid out at

Author: SnapCrop Team
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from PIL import Image

from config import get_config


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned rectangle in (x, y, width, height) form.

    Example:
        >>> BoundingBox(10, 20, 100, 50).right
        110
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_corners(cls, xmin: float, ymin: float, xmax: float, ymax: float) -> 'BoundingBox':
        """Build a box from corner coordinates."""
        return cls(x=xmin, y=ymin, width=xmax - xmin, height=ymax - ymin)


@dataclass(frozen=True)
class Detection:
    """
    One object reported by the detection model.

    Attributes:
        label: Class label, e.g. "person"
        score: Confidence in [0.0, 1.0]
        bbox: Bounding box in rendered-image coordinates
    """
    label: str
    score: float
    bbox: BoundingBox

    @property
    def display_label(self) -> str:
        """Overlay caption, e.g. ``person (87.34%)``."""
        return f"{self.label} ({self.score * 100:.2f}%)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'score': self.score,
            'bbox': list(self.bbox.as_tuple()),
        }


@dataclass(frozen=True)
class DisplayedImage:
    """
    A decoded image together with the size it is rendered at.

    The native size is the image's own pixel size; the rendered size is
    what a display lays it out as, which is what the detector sees.

    Attributes:
        image: Native-resolution PIL Image
        rendered_width: Width as laid out for display
        rendered_height: Height as laid out for display
    """
    image: Image.Image
    rendered_width: int
    rendered_height: int

    @property
    def native_width(self) -> int:
        return self.image.width

    @property
    def native_height(self) -> int:
        return self.image.height

    @property
    def is_laid_out(self) -> bool:
        """True once both rendered dimensions are positive."""
        return self.rendered_width > 0 and self.rendered_height > 0

    @property
    def is_scaled(self) -> bool:
        return (self.rendered_width, self.rendered_height) != (self.native_width, self.native_height)

    def rendered_image(self) -> Image.Image:
        """
        Return the image resampled to its rendered size.

        Raises:
            ValueError: If the image has not been laid out yet.
        """
        if not self.is_laid_out:
            raise ValueError(
                f"Image is not laid out (rendered size "
                f"{self.rendered_width}x{self.rendered_height})"
            )
        if not self.is_scaled:
            return self.image
        return self.image.resize(
            (self.rendered_width, self.rendered_height),
            Image.Resampling.BILINEAR
        )

    @classmethod
    def fit_width(cls, image: Image.Image, max_width: Optional[int] = None) -> 'DisplayedImage':
        """
        Lay an image out in a column of ``max_width`` pixels.

        Wider images shrink to the column width keeping their aspect
        ratio; narrower images keep their native size.

        Example:
            >>> DisplayedImage.fit_width(Image.new("RGB", (1600, 1200)), 800).rendered_height
            600
        """
        if max_width is None:
            max_width = get_config("display.max_width", 760)

        if image.width <= max_width:
            return cls(image=image, rendered_width=image.width, rendered_height=image.height)

        rendered_height = int(round(image.height * max_width / image.width))
        return cls(image=image, rendered_width=max_width, rendered_height=rendered_height)
