"""
Image Session Controller.

ImageSession drives the user-facing workflow: pick or capture an image,
then run object detection or text recognition on it. Passes run one at
a time and every outcome, including failures, ends up as a single
message on a fresh SessionState.

Usage:
    from snapcrop.session import ImageSession

    session = ImageSession()
    session.select_image("shelf.jpg")
    state = session.detect_objects()
    for region in state.regions:
        print(region.label)

Author: SnapCrop Team
"""

from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Union

from PIL import Image

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.exceptions import (
    DeviceUnavailableError,
    InputError,
    ModelError,
    OCRError,
    SessionBusyError,
)
from snapcrop.detection import Detector, DisplayedImage, get_detector
from snapcrop.input_handler import CameraCapture, InputHandler
from snapcrop.ocr_engine import TextRecognizer, get_recognizer
from snapcrop.regions import RegionExtractor
from .state import (
    MSG_CAMERA_FAILED,
    MSG_CAMERA_UNSUPPORTED,
    MSG_DETECTION_FAILED,
    MSG_INPUT_MISSING,
    MSG_NO_OBJECTS,
    MSG_NO_TEXT,
    MSG_NOT_LAID_OUT,
    MSG_RECOGNITION_FAILED,
    ErrorKind,
    SessionState,
    Status,
)

logger = get_logger(__name__)

StateListener = Callable[[SessionState], None]


class ImageSession:
    """
    Single-user, single-threaded image workflow.

    Collaborators default to the module-level detector and recognizer,
    resolved at call time so they can be swapped with ``set_detector``
    and ``set_recognizer``.

    Attributes:
        input_handler: Loads image files
        extractor: RegionExtractor for detection passes
        camera_factory: Callable returning a CameraCapture context manager
        max_width: Display column width images are laid out in
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        detector: Optional[Detector] = None,
        recognizer: Optional[TextRecognizer] = None,
        extractor: Optional[RegionExtractor] = None,
        camera_factory: Optional[Callable[[], CameraCapture]] = None,
        max_width: Optional[int] = None
    ) -> None:
        self.input_handler = input_handler or InputHandler()
        self.extractor = extractor or RegionExtractor()
        self.camera_factory = camera_factory or CameraCapture
        if max_width is None:
            max_width = get_config("display.max_width", 760)
        if max_width <= 0:
            raise ValueError(f"Display width must be positive, got {max_width}")
        self.max_width = max_width
        self._detector = detector
        self._recognizer = recognizer
        self._state = SessionState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def detector(self) -> Detector:
        return self._detector or get_detector()

    @property
    def recognizer(self) -> TextRecognizer:
        return self._recognizer or get_recognizer()

    def subscribe(self, listener: StateListener) -> None:
        """Call ``listener`` with every new snapshot."""
        self._listeners.append(listener)

    def _transition(self, state: SessionState) -> SessionState:
        self._state = state
        logger.debug(f"Session -> {state.status.value}" + (f" ({state.message})" if state.message else ""))
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                # A listener never decides the session state
                logger.exception(f"State listener {listener!r} failed: {e}")
        return state

    def _ensure_idle(self, action: str) -> None:
        if self._state.is_loading:
            raise SessionBusyError(action)

    # ------------------------------------------------------------------
    # Image selection
    # ------------------------------------------------------------------

    def select_image(self, filepath: Union[str, Path]) -> SessionState:
        """
        Load an image file and make it the current image.

        An unreadable or non-image file leaves the current image in place
        and reports the problem as the session message.
        """
        self._ensure_idle("image selection")
        try:
            loaded = self.input_handler.load(filepath)
        except InputError as e:
            logger.error(f"Could not load {filepath}: {e}")
            return self._transition(self._state.failed(e.message, ErrorKind.INVALID_INPUT))

        return self.use_image(loaded.image, loaded.filename)

    def use_image(self, image: Image.Image, source_name: str) -> SessionState:
        """Make an in-memory image current, replacing all previous results."""
        self._ensure_idle("image selection")
        displayed = DisplayedImage.fit_width(image, self.max_width)
        logger.info(
            f"Current image: {source_name} "
            f"(native {displayed.native_width}x{displayed.native_height}, "
            f"rendered {displayed.rendered_width}x{displayed.rendered_height})"
        )
        return self._transition(self._state.with_image(displayed, source_name))

    def capture_from_camera(self) -> SessionState:
        """
        Capture a still from the camera and make it the current image.

        The device is released whether or not the capture succeeds.
        """
        self._ensure_idle("camera capture")
        try:
            with self.camera_factory() as camera:
                frame = camera.capture()
                device_name = camera.device_name
        except DeviceUnavailableError as e:
            logger.error(f"Camera capture failed: {e}")
            message = MSG_CAMERA_UNSUPPORTED if e.unsupported else MSG_CAMERA_FAILED
            return self._transition(self._state.failed(message, ErrorKind.DEVICE_UNAVAILABLE))

        loaded = self.input_handler.from_frame(frame, source=device_name)
        return self.use_image(loaded.image, loaded.filename)

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def detect_objects(self) -> SessionState:
        """
        Run object detection on the current image and crop every hit.

        Returns:
            COMPLETED with overlay and regions, NO_RESULTS when nothing
            was detected, or FAILED with a single message.
        """
        self._ensure_idle("object detection")
        state = self._state

        if not state.has_image:
            return self._transition(state.failed(MSG_INPUT_MISSING, ErrorKind.INPUT_MISSING))

        displayed = state.image
        if not displayed.is_laid_out:
            logger.warning("Detection deferred: image has no rendered size")
            return self._transition(replace(state, message=MSG_NOT_LAID_OUT))

        self._transition(state.processing())

        try:
            detections = self.detector.detect(displayed.rendered_image())
            extraction = self.extractor.extract(displayed, detections)
        except ModelError as e:
            logger.error(f"Detection Error: {e}")
            return self._transition(
                self._state.failed(MSG_DETECTION_FAILED, ErrorKind.COLLABORATOR_FAILURE)
            )
        except Exception as e:
            logger.exception(f"Unexpected detection error: {e}")
            return self._transition(
                self._state.failed(MSG_DETECTION_FAILED, ErrorKind.COLLABORATOR_FAILURE)
            )

        if extraction.no_objects_detected:
            return self._transition(replace(
                self._state,
                status=Status.NO_RESULTS,
                message=MSG_NO_OBJECTS,
                error_kind=ErrorKind.NO_RESULTS,
            ))

        return self._transition(replace(
            self._state,
            overlay=extraction.overlay,
            regions=tuple(extraction.regions),
            status=Status.COMPLETED,
        ))

    def recognize_text(self) -> SessionState:
        """
        Run text recognition on the current image at native resolution.

        Returns:
            COMPLETED with the recognition result, NO_RESULTS when no
            text was found, or FAILED with a single message.
        """
        self._ensure_idle("text recognition")
        state = self._state

        if not state.has_image:
            return self._transition(state.failed(MSG_INPUT_MISSING, ErrorKind.INPUT_MISSING))

        self._transition(state.processing())

        try:
            recognition = self.recognizer.recognize(state.image.image)
        except OCRError as e:
            logger.error(f"OCR Error: {e}")
            return self._transition(
                self._state.failed(MSG_RECOGNITION_FAILED, ErrorKind.COLLABORATOR_FAILURE)
            )
        except Exception as e:
            logger.exception(f"Unexpected OCR error: {e}")
            return self._transition(
                self._state.failed(MSG_RECOGNITION_FAILED, ErrorKind.COLLABORATOR_FAILURE)
            )

        if not recognition.has_text:
            return self._transition(replace(
                self._state,
                recognition=recognition,
                status=Status.NO_RESULTS,
                message=MSG_NO_TEXT,
                error_kind=ErrorKind.NO_RESULTS,
            ))

        return self._transition(replace(
            self._state,
            recognition=recognition,
            status=Status.COMPLETED,
        ))
