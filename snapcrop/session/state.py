"""
Session State.

A SessionState is an immutable snapshot of everything the user sees:
the current image, derived overlay/crops or recognized text, and the
status line. Every transition builds a new snapshot, so a pass that
fails halfway never leaves a half-updated state behind.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from PIL import Image

from snapcrop.detection.detection import DisplayedImage
from snapcrop.ocr_engine.recognition import RecognitionResult
from snapcrop.regions.extractor import NO_OBJECTS_MESSAGE, CroppedRegion


class Status(Enum):
    EMPTY = "empty"
    READY = "ready"
    PROCESSING = "processing"
    COMPLETED = "completed"
    NO_RESULTS = "no_results"
    FAILED = "failed"


class ErrorKind(Enum):
    INPUT_MISSING = "input_missing"
    NO_RESULTS = "no_results"
    COLLABORATOR_FAILURE = "collaborator_failure"
    DEVICE_UNAVAILABLE = "device_unavailable"
    INVALID_INPUT = "invalid_input"


# User-facing messages
MSG_INPUT_MISSING = "Please upload an image first."
MSG_NO_OBJECTS = NO_OBJECTS_MESSAGE
MSG_NO_TEXT = "No text found."
MSG_DETECTION_FAILED = "An error occurred during detection. Please try again."
MSG_RECOGNITION_FAILED = "Error during text recognition."
MSG_CAMERA_UNSUPPORTED = "Camera not supported on this device."
MSG_CAMERA_FAILED = "Error accessing camera. Please try again."
MSG_NOT_LAID_OUT = "Image is not displayed yet. Please try again."


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of the session.

    Attributes:
        image: Current displayed image, if any
        source_name: Filename or device the image came from
        overlay: Annotated rendered image from the last detection pass
        regions: Crops from the last detection pass, in detection order
        recognition: Result of the last recognition pass
        status: Where the session is in its workflow
        message: Single human-readable status or error message
        error_kind: Category of ``message`` when it reports a problem
    """
    image: Optional[DisplayedImage] = None
    source_name: Optional[str] = None
    overlay: Optional[Image.Image] = None
    regions: Tuple[CroppedRegion, ...] = ()
    recognition: Optional[RecognitionResult] = None
    status: Status = Status.EMPTY
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def is_loading(self) -> bool:
        return self.status is Status.PROCESSING

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def has_error(self) -> bool:
        return self.status is Status.FAILED

    def with_image(self, image: DisplayedImage, source_name: str) -> 'SessionState':
        """New image: everything derived from the previous one is dropped."""
        return SessionState(image=image, source_name=source_name, status=Status.READY)

    def processing(self) -> 'SessionState':
        """Enter a pass; previous results and messages are cleared."""
        return replace(
            self,
            overlay=None,
            regions=(),
            recognition=None,
            status=Status.PROCESSING,
            message=None,
            error_kind=None,
        )

    def failed(self, message: str, kind: ErrorKind) -> 'SessionState':
        """Fail without partial results."""
        return replace(
            self,
            overlay=None,
            regions=(),
            recognition=None,
            status=Status.FAILED,
            message=message,
            error_kind=kind,
        )
