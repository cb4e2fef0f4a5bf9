"""
Overlay Drawing Module.

Draws detection boxes and their captions on top of the rendered image.
The drawing is described by OverlayAnnotation instructions first and
then rasterized with Pillow, so callers (and tests) can inspect exactly
what was drawn where.

Author: SnapCrop Team
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.detection.detection import BoundingBox, Detection

logger = get_logger(__name__)


@dataclass(frozen=True)
class OverlayAnnotation:
    """
    One drawing instruction in rendered coordinates.

    Attributes:
        bbox: Rectangle outline to stroke
        text: Caption, e.g. ``cup (91.20%)``
        text_origin: Left end of the caption's baseline
    """
    bbox: BoundingBox
    text: str
    text_origin: Tuple[float, float]


class OverlayRenderer:
    """
    Rasterizes annotations onto a copy of the rendered image.

    Attributes:
        color: Stroke and text color
        line_width: Rectangle outline width in pixels
        font_size: Caption size in pixels
        label_offset: Gap between the caption baseline and the box top
    """

    def __init__(
        self,
        color: Optional[str] = None,
        line_width: Optional[int] = None,
        font_size: Optional[int] = None,
        label_offset: Optional[int] = None
    ) -> None:
        self.color = color or get_config("overlay.color", "red")
        self.line_width = line_width or get_config("overlay.line_width", 2)
        self.font_size = font_size or get_config("overlay.font_size", 16)
        self.label_offset = label_offset if label_offset is not None else \
            get_config("overlay.label_offset", 5)
        self.font = self._load_font(get_config("overlay.font", "arial.ttf"))

    def _load_font(self, font_name: str) -> ImageFont.ImageFont:
        try:
            return ImageFont.truetype(font_name, self.font_size)
        except OSError:
            logger.debug(f"Font '{font_name}' not found, using Pillow default font")
            return ImageFont.load_default(size=self.font_size)

    def annotate(self, detection: Detection) -> OverlayAnnotation:
        """Build the drawing instruction for one detection."""
        bbox = detection.bbox
        return OverlayAnnotation(
            bbox=bbox,
            text=detection.display_label,
            text_origin=(bbox.x, bbox.y - self.label_offset)
        )

    def render(
        self,
        base: Image.Image,
        annotations: Sequence[OverlayAnnotation]
    ) -> Image.Image:
        """
        Draw annotations on a copy of ``base``.

        Args:
            base: Rendered-size image.
            annotations: Instructions in drawing order.

        Returns:
            New RGB image with boxes and captions.
        """
        overlay = base.convert('RGB').copy()
        draw = ImageDraw.Draw(overlay)

        for annotation in annotations:
            box = annotation.bbox
            # Pillow rejects inverted corners; detector boxes may have negative extents
            draw.rectangle(
                [
                    min(box.x, box.right), min(box.y, box.bottom),
                    max(box.x, box.right), max(box.y, box.bottom),
                ],
                outline=self.color,
                width=self.line_width
            )
            self._draw_caption(draw, annotation)

        return overlay

    def _draw_caption(self, draw: ImageDraw.ImageDraw, annotation: OverlayAnnotation) -> None:
        x, baseline = annotation.text_origin
        if isinstance(self.font, ImageFont.FreeTypeFont):
            draw.text((x, baseline), annotation.text, fill=self.color, font=self.font, anchor='ls')
            return

        # Bitmap fonts have no anchors: place the glyph bottom on the baseline
        _, _, _, bottom = draw.textbbox((0, 0), annotation.text, font=self.font)
        draw.text((x, baseline - bottom), annotation.text, fill=self.color, font=self.font)
