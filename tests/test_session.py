import pytest
from PIL import Image

from snapcrop.session import ErrorKind, ImageSession, SessionState, Status
from snapcrop.session.state import (
    MSG_CAMERA_FAILED,
    MSG_CAMERA_UNSUPPORTED,
    MSG_DETECTION_FAILED,
    MSG_INPUT_MISSING,
    MSG_NO_OBJECTS,
    MSG_NO_TEXT,
    MSG_NOT_LAID_OUT,
    MSG_RECOGNITION_FAILED,
)
from snapcrop.utils.exceptions import (
    DeviceUnavailableError,
    InferenceError,
    ModelLoadError,
    OCREngineNotAvailableError,
    SessionBusyError,
)

from conftest import FakeDetector, FakeRecognizer, decode_region, make_detection, make_image


class FakeCamera:
    """Stands in for CameraCapture; records whether it was released."""

    def __init__(self, frame=None, error=None):
        self.frame = frame
        self.error = error
        self.released = False
        self.device_name = "camera:0"

    def __call__(self):
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.released = True

    def capture(self):
        if self.error is not None:
            raise self.error
        return self.frame


def make_session(detections=None, detector_error=None, text="", recognizer_error=None, camera=None):
    return ImageSession(
        detector=FakeDetector(detections, error=detector_error),
        recognizer=FakeRecognizer(text=text, error=recognizer_error),
        camera_factory=camera,
        max_width=400,
    )


class TestImageSelection:
    def test_initial_state(self):
        state = make_session().state

        assert state.status is Status.EMPTY
        assert not state.has_image
        assert state.message is None

    @pytest.mark.parametrize("width", [0, -100])
    def test_display_width_must_be_positive(self, width):
        with pytest.raises(ValueError):
            ImageSession(detector=FakeDetector(), recognizer=FakeRecognizer(), max_width=width)

    def test_select_lays_out_image(self, wide_png_file):
        state = make_session().select_image(wide_png_file)

        assert state.status is Status.READY
        assert state.source_name == "wide.png"
        assert (state.image.native_width, state.image.native_height) == (1600, 800)
        assert (state.image.rendered_width, state.image.rendered_height) == (400, 200)

    def test_invalid_file_keeps_current_image(self, png_file, tmp_path):
        session = make_session()
        session.select_image(png_file)
        bad = tmp_path / "notes.txt"
        bad.write_text("hello")

        state = session.select_image(bad)

        assert state.has_error
        assert state.error_kind is ErrorKind.INVALID_INPUT
        assert state.source_name == "photo.png"

    def test_new_image_discards_previous_results(self, wide_png_file, png_file):
        session = make_session([make_detection("box", 0.9, 50, 25, 100, 50)])
        session.select_image(wide_png_file)
        assert session.detect_objects().regions

        state = session.select_image(png_file)

        assert state.regions == ()
        assert state.overlay is None
        assert state.message is None


class TestDetectObjects:
    def test_without_image(self):
        state = make_session().detect_objects()

        assert state.status is Status.FAILED
        assert state.message == MSG_INPUT_MISSING == "Please upload an image first."
        assert state.error_kind is ErrorKind.INPUT_MISSING

    def test_detector_sees_rendered_image(self, wide_png_file):
        session = make_session([make_detection("box", 0.9, 50, 25, 100, 50)])
        session.select_image(wide_png_file)

        session.detect_objects()

        assert session.detector.seen_sizes == [(400, 200)]

    def test_regions_are_cut_at_native_resolution(self, wide_png_file):
        session = make_session([make_detection("box", 0.9, 50, 25, 100, 50)])
        session.select_image(wide_png_file)

        state = session.detect_objects()

        assert state.status is Status.COMPLETED
        assert state.message is None
        assert state.overlay.size == (400, 200)
        region = state.regions[0]
        assert region.size == (400, 200)
        crop = decode_region(region.image_data)
        assert crop.getpixel((0, 0))[:3] == (0, 0, 255)
        assert crop.getpixel((399, 199))[:3] == (0, 0, 255)

    def test_regions_follow_detection_order(self, png_file):
        session = make_session([
            make_detection("second", 0.6, 100, 0, 50, 50),
            make_detection("first", 0.95, 0, 0, 50, 50),
        ])
        session.select_image(png_file)

        state = session.detect_objects()

        assert [r.label for r in state.regions] == ["second", "first"]

    def test_no_objects(self, png_file):
        session = make_session([])
        session.select_image(png_file)

        state = session.detect_objects()

        assert state.status is Status.NO_RESULTS
        assert state.message == MSG_NO_OBJECTS == "No objects detected."
        assert state.error_kind is ErrorKind.NO_RESULTS
        assert state.regions == ()

    @pytest.mark.parametrize("error", [
        InferenceError("timeout"),
        ModelLoadError("test/model", "offline"),
        RuntimeError("unexpected"),
    ])
    def test_detector_failure_leaves_no_partial_results(self, png_file, error):
        session = make_session([make_detection("box", 0.9, 0, 0, 50, 50)])
        session.select_image(png_file)
        session.detect_objects()
        session.detector.error = error

        state = session.detect_objects()

        assert state.status is Status.FAILED
        assert state.message == MSG_DETECTION_FAILED
        assert state.error_kind is ErrorKind.COLLABORATOR_FAILURE
        assert state.regions == ()
        assert state.overlay is None
        assert state.has_image

    def test_repeat_detection_replaces_regions(self, png_file):
        session = make_session([make_detection("box", 0.9, 0, 0, 50, 50)])
        session.select_image(png_file)

        session.detect_objects()
        state = session.detect_objects()

        assert len(state.regions) == 1

    def test_image_without_layout_is_deferred(self):
        session = make_session([make_detection("box", 0.9, 0, 0, 5, 5)])
        session.use_image(Image.new("RGB", (0, 0)), "blank.png")

        state = session.detect_objects()

        assert state.message == MSG_NOT_LAID_OUT
        assert state.status is Status.READY
        assert session.detector.seen_sizes == []

    def test_listener_sees_processing_then_result(self, png_file):
        session = make_session([make_detection("box", 0.9, 0, 0, 50, 50)])
        session.select_image(png_file)
        seen = []
        session.subscribe(lambda state: seen.append(state.status))

        session.detect_objects()

        assert seen == [Status.PROCESSING, Status.COMPLETED]

    def test_overlapping_pass_is_rejected(self, png_file):
        session = make_session([make_detection("box", 0.9, 0, 0, 50, 50)])
        session.select_image(png_file)
        rejected = []

        def listener(state):
            if state.is_loading:
                with pytest.raises(SessionBusyError):
                    session.detect_objects()
                with pytest.raises(SessionBusyError):
                    session.select_image("other.png")
                rejected.append(True)

        session.subscribe(listener)
        state = session.detect_objects()

        assert rejected == [True]
        assert state.status is Status.COMPLETED

    def test_failing_listener_does_not_leave_session_busy(self, png_file):
        session = make_session(detections=[make_detection("cup", 0.9, 10, 10, 50, 40)])
        session.select_image(png_file)
        seen = []

        def listener(state):
            seen.append(state.status)
            if state.is_loading:
                raise RuntimeError("listener crashed")

        session.subscribe(listener)
        first = session.detect_objects()
        second = session.detect_objects()

        assert first.status is Status.COMPLETED
        assert second.status is Status.COMPLETED
        assert not session.state.is_loading
        assert seen.count(Status.COMPLETED) == 2

    def test_failing_listener_during_recognition(self, png_file):
        session = make_session(text="Total 42")
        session.select_image(png_file)

        def listener(state):
            raise RuntimeError("listener crashed")

        session.subscribe(listener)
        state = session.recognize_text()

        assert state.status is Status.COMPLETED
        assert session.recognize_text().recognition.numbers_text == "42"


class TestRecognizeText:
    def test_without_image(self):
        state = make_session().recognize_text()

        assert state.message == MSG_INPUT_MISSING
        assert state.error_kind is ErrorKind.INPUT_MISSING

    def test_text_and_numbers(self, png_file):
        session = make_session(text="Invoice 2041\nTotal 1250 EUR")
        session.select_image(png_file)

        state = session.recognize_text()

        assert state.status is Status.COMPLETED
        assert state.recognition.text == "Invoice 2041\nTotal 1250 EUR"
        assert state.recognition.numbers_text == "2041, 1250"
        assert session.recognizer.calls == 1

    def test_no_text(self, png_file):
        session = make_session(text="  ")
        session.select_image(png_file)

        state = session.recognize_text()

        assert state.status is Status.NO_RESULTS
        assert state.message == MSG_NO_TEXT == "No text found."

    def test_text_without_numbers(self, png_file):
        session = make_session(text="Thank you")
        session.select_image(png_file)

        state = session.recognize_text()

        assert state.status is Status.COMPLETED
        assert state.recognition.numbers_text == ""
        assert state.recognition.numbers_display == "No numbers found."

    @pytest.mark.parametrize("error", [OCREngineNotAvailableError("tesseract"), ValueError("bad")])
    def test_failure(self, png_file, error):
        session = make_session(recognizer_error=error)
        session.select_image(png_file)

        state = session.recognize_text()

        assert state.status is Status.FAILED
        assert state.message == MSG_RECOGNITION_FAILED == "Error during text recognition."
        assert state.recognition is None

    def test_recognition_runs_on_native_pixels(self, wide_png_file):
        seen = []

        class SizeRecognizer(FakeRecognizer):
            def recognize(self, image):
                seen.append(image.size)
                return super().recognize(image)

        session = ImageSession(recognizer=SizeRecognizer(text="1"), max_width=400)
        session.select_image(wide_png_file)

        session.recognize_text()

        assert seen == [(1600, 800)]


class TestCameraCapture:
    def test_capture_becomes_current_image(self):
        camera = FakeCamera(frame=make_image(1200, 600))
        session = make_session(camera=camera)

        state = session.capture_from_camera()

        assert state.status is Status.READY
        assert state.source_name == "capture.png"
        assert state.image.rendered_width == 400
        assert camera.released

    def test_unsupported_device(self):
        camera = FakeCamera(error=DeviceUnavailableError("camera:0", "no backend", unsupported=True))
        session = make_session(camera=camera)

        state = session.capture_from_camera()

        assert state.message == MSG_CAMERA_UNSUPPORTED == "Camera not supported on this device."
        assert state.error_kind is ErrorKind.DEVICE_UNAVAILABLE
        assert camera.released

    def test_denied_device(self):
        camera = FakeCamera(error=DeviceUnavailableError("camera:0", "permission denied"))
        session = make_session(camera=camera)

        state = session.capture_from_camera()

        assert state.message == MSG_CAMERA_FAILED == "Error accessing camera. Please try again."
        assert camera.released


class TestSessionState:
    def test_is_immutable(self):
        state = SessionState()
        with pytest.raises(AttributeError):
            state.message = "changed"

    def test_failed_clears_results(self):
        state = SessionState(regions=("r",), status=Status.COMPLETED).failed("boom", ErrorKind.COLLABORATOR_FAILURE)

        assert state.regions == ()
        assert state.has_error
