"""
Helper Utilities Module.

Small filesystem and encoding helpers shared by the input, region and
output modules.

Functions:
    - ensure_directory: mkdir -p that returns the Path
    - get_file_extension: Lower-cased suffix used for type checks
    - safe_filename: Turn a detection label into a usable file name
    - encode_data_uri / decode_data_uri: Self-contained image payloads
"""

import base64
import io
import re
from pathlib import Path
from typing import Tuple, Union

from PIL import Image

DATA_URI_PATTERN = re.compile(r'^data:(?P<mime>[\w/+.-]+);base64,(?P<payload>.*)$', re.DOTALL)
UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
ALPHA_FORMATS = frozenset({"PNG", "WEBP", "TIFF", "GIF"})


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create ``path`` (and parents) if missing and return it as a Path."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Lower-cased suffix including the dot, or "" when there is none.

    Example:
        >>> get_file_extension("shelf.JPG")
        '.jpg'
    """
    return Path(filepath).suffix.lower()


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Replace characters most filesystems reject.

    Labels such as "cell phone/2" become "cell phone_2"; a name that is
    empty after trimming dots and spaces becomes "unnamed".
    """
    cleaned = UNSAFE_FILENAME_CHARS.sub(replacement, filename).strip('. ')
    return cleaned or "unnamed"


def encode_data_uri(image: Image.Image, image_format: str = "PNG") -> str:
    """
    Encode a PIL image into a self-contained base64 data URI.

    Formats without an alpha channel (JPEG, BMP) get the image
    flattened to RGB first; transparent areas come out black.

    Args:
        image: Image to encode.
        image_format: Pillow format name (PNG keeps alpha).

    Returns:
        String of the form ``data:image/png;base64,...``.
    """
    image_format = image_format.upper()
    if image_format not in ALPHA_FORMATS and image.mode not in ('RGB', 'L'):
        image = image.convert('RGB')

    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    payload = base64.b64encode(buffer.getvalue()).decode('ascii')
    mime_type = Image.MIME.get(image_format, f"image/{image_format.lower()}")
    return f"data:{mime_type};base64,{payload}"


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into its MIME type and raw bytes.

    Raises:
        ValueError: If the string is not a base64 data URI.
    """
    match = DATA_URI_PATTERN.match(data_uri)
    if match is None:
        raise ValueError("Not a base64 data URI")
    return match.group('mime'), base64.b64decode(match.group('payload'))
