"""
Camera Capture Module.

Live camera capture through OpenCV. The device is a scoped resource:
it is opened on entry and released on every exit path, including
failed reads and exceptions raised by the caller.

Usage:
    from snapcrop.input_handler.camera import CameraCapture

    with CameraCapture(device_index=0) as camera:
        frame = camera.capture()

Author: SnapCrop Team
"""

from typing import Optional

import cv2
from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import DeviceUnavailableError

logger = get_logger(__name__)


class CameraCapture:
    """
    Context manager around a single OpenCV capture device.

    Attributes:
        device_index: OpenCV device index (0 = default camera)
        warmup_frames: Frames discarded before capturing, letting
                       auto-exposure settle

    Example:
        >>> with CameraCapture() as camera:
        ...     image = camera.capture()
        >>> image.mode
        'RGB'
    """

    def __init__(
        self,
        device_index: Optional[int] = None,
        warmup_frames: Optional[int] = None
    ) -> None:
        self.device_index = device_index if device_index is not None else \
            get_config("camera.device_index", 0)
        self.warmup_frames = warmup_frames if warmup_frames is not None else \
            get_config("camera.warmup_frames", 5)
        self._capture = None

    @property
    def device_name(self) -> str:
        return f"camera:{self.device_index}"

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def open(self) -> None:
        """
        Acquire the capture device.

        Raises:
            DeviceUnavailableError: If capture is unsupported or the
                                    device cannot be opened (absent or
                                    permission denied).
        """
        if self._capture is not None:
            return

        try:
            capture = cv2.VideoCapture(self.device_index)
        except cv2.error as e:
            raise DeviceUnavailableError(self.device_name, str(e), unsupported=True)

        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailableError(
                self.device_name,
                "device could not be opened (missing or permission denied)"
            )

        self._capture = capture
        logger.info(f"Opened {self.device_name}")

    def capture(self) -> Image.Image:
        """
        Grab a single frame as an RGB PIL Image.

        Raises:
            DeviceUnavailableError: If the device is not open or a frame
                                    cannot be read.
        """
        if self._capture is None:
            raise DeviceUnavailableError(self.device_name, "device is not open")

        for _ in range(self.warmup_frames):
            self._capture.grab()

        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise DeviceUnavailableError(self.device_name, "failed to read a frame")

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image = Image.fromarray(rgb)
        logger.info(f"Captured frame {image.width}x{image.height} from {self.device_name}")
        return image

    def release(self) -> None:
        """Stop the device. Safe to call more than once."""
        if self._capture is None:
            return
        self._capture.release()
        self._capture = None
        logger.debug(f"Released {self.device_name}")

    def __enter__(self) -> 'CameraCapture':
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def capture_still(device_index: Optional[int] = None) -> Image.Image:
    """
    Open the camera, capture one frame and release the device.

    Args:
        device_index: Optional OpenCV device index.

    Returns:
        Captured RGB image.
    """
    with CameraCapture(device_index=device_index) as camera:
        return camera.capture()
