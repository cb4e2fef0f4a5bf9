"""
Image Processor Module.

This module handles decoding of image files and frames:
    - Image loading and validation
    - Orientation correction from EXIF data
    - Conversion to RGB

Author: SnapCrop Team
"""

from pathlib import Path
from typing import Any, Dict, Tuple, Union

from PIL import Image, ImageOps

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import CorruptedFileError

logger = get_logger(__name__)


class ImageProcessor:
    """
    Decoder for image files (JPG, PNG, GIF, BMP, WEBP, TIFF).

    Unlike scanned-document pipelines, no resizing or enhancement is
    applied: the native pixels are what regions are cropped from.

    Attributes:
        auto_orient: Whether to auto-correct orientation from EXIF.

    Example:
        >>> processor = ImageProcessor()
        >>> image, metadata = processor.process("photo.jpg")
        >>> image.size
        (1920, 1080)
    """

    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.auto_orient = get_config("input.image.auto_orient", True)
        logger.debug(f"ImageProcessor initialized (auto_orient={self.auto_orient})")

    def process(self, filepath: Union[str, Path]) -> Tuple[Image.Image, Dict[str, Any]]:
        """
        Decode an image file.

        Args:
            filepath: Path to the image file.

        Returns:
            Tuple of (decoded RGB PIL Image, metadata dictionary).

        Raises:
            CorruptedFileError: If the image cannot be decoded.
        """
        filepath = Path(filepath)
        logger.debug(f"Decoding image: {filepath.name}")

        try:
            with Image.open(filepath) as source:
                source.load()
                metadata = self._extract_metadata(filepath, source)
                image = self.normalize(source)
                if image is source:
                    # Must outlive the file handle
                    image = source.copy()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.error(f"Failed to decode image {filepath}: {e}")
            raise CorruptedFileError(str(filepath), str(e))

        metadata['native_width'] = image.width
        metadata['native_height'] = image.height

        logger.info(
            f"Decoded image: {image.width}x{image.height} "
            f"({metadata['format']}, mode {metadata['original_mode']})"
        )
        return image, metadata

    def normalize(self, image: Image.Image) -> Image.Image:
        """
        Apply orientation correction and RGB conversion.

        Args:
            image: Decoded PIL Image.

        Returns:
            Upright RGB image.
        """
        if self.auto_orient:
            image = self._fix_orientation(image)
        return self._convert_to_rgb(image)

    def _fix_orientation(self, image: Image.Image) -> Image.Image:
        """
        Rotate/flip the pixels according to the EXIF Orientation tag.

        Cameras often store rotation in metadata instead of rotating the
        pixels, which would put native coordinates out of step with what
        is displayed.
        """
        orientation = image.getexif().get(0x0112)
        if orientation in (None, 1):
            return image

        logger.debug(f"Fixing image orientation (EXIF orientation={orientation})")
        return ImageOps.exif_transpose(image)

    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        """
        Convert image to RGB mode.

        Handles various input modes:
            - RGBA / LA / transparent P: composite onto white
            - L, P, CMYK, I;16: plain conversion
        """
        if image.mode == 'RGB':
            return image

        original_mode = image.mode

        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            image = background
        else:
            image = image.convert('RGB')

        logger.debug(f"Converted image from {original_mode} to RGB")
        return image

    def _extract_metadata(self, filepath: Path, image: Image.Image) -> Dict[str, Any]:
        """
        Extract metadata from the image file before normalization.

        Args:
            filepath: Path to image file.
            image: Loaded PIL Image.

        Returns:
            Dictionary of metadata.
        """
        return {
            'original_filename': filepath.name,
            'file_size_bytes': filepath.stat().st_size,
            'original_width': image.width,
            'original_height': image.height,
            'original_mode': image.mode,
            'format': image.format,
        }
