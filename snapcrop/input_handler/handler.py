"""
Main Input Handler Module.

This module provides the InputHandler class, the file-picker side of
SnapCrop: it accepts a single image file, rejects anything that is not
an image MIME type, and decodes it for display and processing.

Usage:
    from snapcrop.input_handler import InputHandler

    handler = InputHandler()
    result = handler.load("photo.jpg")
    image = result.image

Classes:
    InputResult: Decoded image plus metadata
    InputHandler: Main class for file input handling
"""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.helpers import get_file_extension
from snapcrop.utils.exceptions import (
    CorruptedFileError,
    ImageNotFoundError,
    InputError,
    UnsupportedFileTypeError,
)

from .image_processor import ImageProcessor

logger = get_logger(__name__)

# Older interpreters do not map .webp
mimetypes.add_type('image/webp', '.webp')


@dataclass
class InputResult:
    """
    Result of loading an input image.

    Attributes:
        source: Original file path, or a device description for captures
        filename: Display name of the input
        mime_type: Detected MIME type (always image/*)
        image: Decoded RGB PIL Image at native resolution
        metadata: Additional file metadata
    """
    source: str
    filename: str
    mime_type: str
    image: Image.Image
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"InputResult(filename='{self.filename}', "
            f"type='{self.mime_type}', "
            f"size={self.image.width}x{self.image.height})"
        )


class InputHandler:
    """
    Loader for single image files.

    Attributes:
        supported_extensions: Set of accepted file extensions
        image_processor: ImageProcessor used for decoding

    Example:
        >>> handler = InputHandler()
        >>> result = handler.load("shelf.png")
        >>> result.mime_type
        'image/png'
    """

    IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.tiff', '.tif'}

    def __init__(self, image_processor: Optional[ImageProcessor] = None) -> None:
        """
        Initialize the InputHandler.

        Args:
            image_processor: Optional processor override.
        """
        self.supported_extensions = {
            ext.lower()
            for ext in get_config("input.supported_extensions", sorted(self.IMAGE_EXTENSIONS))
        }
        self.image_processor = image_processor or ImageProcessor()

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    def detect_mime_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the MIME type of an input file and require image/*.

        Args:
            filepath: Path to the file to analyze.

        Returns:
            MIME type string, e.g. 'image/jpeg'.

        Raises:
            UnsupportedFileTypeError: If the file is not an accepted image type.
        """
        extension = get_file_extension(filepath)
        mime_type, _ = mimetypes.guess_type(str(filepath))

        if extension not in self.supported_extensions or not (mime_type or '').startswith('image/'):
            raise UnsupportedFileTypeError(
                mime_type or extension or 'unknown',
                sorted(self.supported_extensions)
            )
        return mime_type

    def validate_file(self, filepath: Union[str, Path]) -> Tuple[Path, str]:
        """
        Validate that a file exists, is an image and is not empty.

        Args:
            filepath: Path to the file to validate.

        Returns:
            Tuple of (validated Path, detected MIME type).

        Raises:
            ImageNotFoundError: If file doesn't exist.
            UnsupportedFileTypeError: If file is not an image.
            CorruptedFileError: If file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise ImageNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        mime_type = self.detect_mime_type(path)

        if path.stat().st_size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")

        logger.debug(f"File validated: {filepath} ({mime_type})")
        return path, mime_type

    def load(self, filepath: Union[str, Path]) -> InputResult:
        """
        Load and decode an image file.

        Args:
            filepath: Path to the image.

        Returns:
            InputResult with the decoded image.

        Raises:
            InputError: Any validation or decoding failure.
        """
        logger.info(f"Loading file: {filepath}")

        path, mime_type = self.validate_file(filepath)
        image, metadata = self.image_processor.process(path)

        result = InputResult(
            source=str(filepath),
            filename=path.name,
            mime_type=mime_type,
            image=image,
            metadata=metadata,
        )
        logger.info(f"Loaded: {result!r}")
        return result

    def from_frame(self, image: Image.Image, source: str, filename: str = "capture.png") -> InputResult:
        """
        Wrap an in-memory frame (e.g. a camera capture) as an InputResult.

        Args:
            image: Captured PIL Image.
            source: Description of where the frame came from.
            filename: Display name for the frame.

        Returns:
            InputResult with the normalized image.
        """
        image = self.image_processor.normalize(image)
        return InputResult(
            source=source,
            filename=filename,
            mime_type='image/png',
            image=image,
            metadata={'native_width': image.width, 'native_height': image.height},
        )
