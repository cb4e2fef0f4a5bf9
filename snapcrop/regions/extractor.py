"""
Region Extractor Module.

Turns detections made on the rendered image into native-resolution
crops and an annotated overlay.

Algorithm:
    1. scale = native size / rendered size, per axis
    2. For each detection, in input order:
        a. annotate the rendered box with "<label> (<score>%)"
        b. map the box to native coordinates
        c. cut a raster of the truncated native size starting at the
           native origin (pixels outside the source stay transparent)
        d. encode the raster as a PNG data URI
    3. Return regions in input order plus the rendered overlay

Author: SnapCrop Team
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.helpers import encode_data_uri
from snapcrop.detection.detection import Detection, DisplayedImage
from .overlay import OverlayAnnotation, OverlayRenderer
from .scaling import NativeRect, ScaleFactor, compute_scale_factor, to_native

logger = get_logger(__name__)

NO_OBJECTS_MESSAGE = "No objects detected."


@dataclass(frozen=True)
class CroppedRegion:
    """
    A native-resolution crop of one detection.

    Attributes:
        label: Class label copied from the detection
        image_data: Self-contained ``data:image/png;base64,...`` URI
        score: Detection confidence
        native_rect: Crop rectangle in native coordinates
    """
    label: str
    image_data: str
    score: float
    native_rect: NativeRect

    @property
    def size(self) -> tuple:
        return self.native_rect.raster_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'score': self.score,
            'native_rect': list(self.native_rect.as_tuple()),
            'size': list(self.size),
        }


@dataclass
class RegionExtraction:
    """
    Output of one extraction pass.

    Attributes:
        regions: Crops in detection order (degenerate crops omitted)
        overlay: Rendered image with boxes and captions, None when the
                 pass was skipped
        annotations: Drawing instructions behind the overlay
        scale: Native / rendered scale used, None when skipped
        detection_count: Number of detections received
        skipped_degenerate: Detections whose crop had no area
        skipped: True when the image was not laid out and nothing ran
    """
    regions: List[CroppedRegion] = field(default_factory=list)
    overlay: Optional[Image.Image] = None
    annotations: List[OverlayAnnotation] = field(default_factory=list)
    scale: Optional[ScaleFactor] = None
    detection_count: int = 0
    skipped_degenerate: int = 0
    skipped: bool = False

    @property
    def no_objects_detected(self) -> bool:
        return not self.skipped and self.detection_count == 0

    @property
    def message(self) -> Optional[str]:
        """Informational message for the user, if any."""
        if self.no_objects_detected:
            return NO_OBJECTS_MESSAGE
        return None


class RegionExtractor:
    """
    Crops detections out of a displayed image at native resolution.

    Attributes:
        renderer: OverlayRenderer used for boxes and captions
        encoding_format: Pillow format for the crop data URIs

    Example:
        >>> extractor = RegionExtractor()
        >>> result = extractor.extract(displayed, detections)
        >>> [(r.label, r.size) for r in result.regions]
        [('dog', (412, 380))]
    """

    def __init__(
        self,
        renderer: Optional[OverlayRenderer] = None,
        encoding_format: Optional[str] = None
    ) -> None:
        self.renderer = renderer or OverlayRenderer()
        self.encoding_format = encoding_format or get_config("regions.encoding.format", "PNG")

    def extract(
        self,
        image: DisplayedImage,
        detections: Sequence[Detection]
    ) -> RegionExtraction:
        """
        Extract labelled crops and the annotated overlay.

        Args:
            image: Displayed image (native pixels + rendered size).
            detections: Detections in rendered coordinates.

        Returns:
            RegionExtraction. Empty when there are no detections or the
            image has not been laid out.
        """
        detections = list(detections)

        if not image.is_laid_out:
            logger.warning(
                f"Skipping extraction: image not laid out "
                f"(rendered {image.rendered_width}x{image.rendered_height})"
            )
            return RegionExtraction(detection_count=len(detections), skipped=True)

        if not detections:
            logger.info(NO_OBJECTS_MESSAGE)
            return RegionExtraction()

        scale = compute_scale_factor(
            image.native_width, image.native_height,
            image.rendered_width, image.rendered_height
        )
        logger.debug(f"Scale factor: x={scale.x:.4f}, y={scale.y:.4f}")

        source = image.image.convert('RGBA')
        annotations = []
        regions = []
        skipped = 0

        for index, detection in enumerate(detections):
            annotations.append(self.renderer.annotate(detection))

            rect = to_native(detection.bbox, scale)
            if rect.is_degenerate:
                logger.debug(
                    f"Skipping degenerate crop #{index} ({detection.label}): "
                    f"{rect.width:.2f}x{rect.height:.2f}"
                )
                skipped += 1
                continue

            crop = self.crop(source, rect)
            regions.append(CroppedRegion(
                label=detection.label,
                image_data=encode_data_uri(crop, self.encoding_format),
                score=detection.score,
                native_rect=rect,
            ))

        overlay = self.renderer.render(image.rendered_image(), annotations)

        logger.info(
            f"Extracted {len(regions)} region(s) from {len(detections)} detection(s)"
            + (f", {skipped} degenerate skipped" if skipped else "")
        )

        return RegionExtraction(
            regions=regions,
            overlay=overlay,
            annotations=annotations,
            scale=scale,
            detection_count=len(detections),
            skipped_degenerate=skipped,
        )

    @staticmethod
    def crop(source: Image.Image, rect: NativeRect) -> Image.Image:
        """
        Copy the native sub-rectangle into a new raster at (0, 0).

        The raster is ``rect.raster_size``; areas outside ``source``
        come back as zero (transparent for RGBA sources).
        """
        width, height = rect.raster_size
        left = math.floor(rect.x)
        top = math.floor(rect.y)
        return source.crop((left, top, left + width, top + height))


def extract_regions(image: DisplayedImage, detections: Sequence[Detection]) -> RegionExtraction:
    """Run a one-off extraction with a default-configured extractor."""
    return RegionExtractor().extract(image, detections)
