"""
Coordinate scaling between rendered and native pixel spaces.

Detectors see the image at its rendered size, crops are cut from the
native pixels. A ScaleFactor maps one space onto the other.
"""

from dataclasses import dataclass
from typing import Tuple

from snapcrop.detection.detection import BoundingBox


@dataclass(frozen=True)
class ScaleFactor:
    """Per-axis ratio native / rendered."""
    x: float
    y: float

    @property
    def is_identity(self) -> bool:
        return self.x == 1.0 and self.y == 1.0


@dataclass(frozen=True)
class NativeRect:
    """
    Bounding box mapped into native coordinates.

    Values stay fractional; ``raster_size`` applies the truncation a
    raster surface of that size would get.
    """
    x: float
    y: float
    width: float
    height: float

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    @property
    def raster_size(self) -> Tuple[int, int]:
        return (int(self.width), int(self.height))

    @property
    def is_degenerate(self) -> bool:
        """True when the truncated raster would have no area."""
        width, height = self.raster_size
        return width <= 0 or height <= 0


def compute_scale_factor(
    native_width: float,
    native_height: float,
    rendered_width: float,
    rendered_height: float
) -> ScaleFactor:
    """
    Compute (native / rendered) for both axes.

    Raises:
        ValueError: If a rendered dimension is not positive.

    Example:
        >>> compute_scale_factor(1600, 1200, 800, 600)
        ScaleFactor(x=2.0, y=2.0)
    """
    if rendered_width <= 0 or rendered_height <= 0:
        raise ValueError(
            f"Rendered size must be positive, got {rendered_width}x{rendered_height}"
        )
    return ScaleFactor(
        x=native_width / rendered_width,
        y=native_height / rendered_height
    )


def to_native(bbox: BoundingBox, scale: ScaleFactor) -> NativeRect:
    """
    Map a rendered-space box into native space.

    Example:
        >>> to_native(BoundingBox(10, 20, 30, 40), ScaleFactor(2.0, 0.5))
        NativeRect(x=20.0, y=10.0, width=60.0, height=20.0)
    """
    return NativeRect(
        x=bbox.x * scale.x,
        y=bbox.y * scale.y,
        width=bbox.width * scale.x,
        height=bbox.height * scale.y
    )
