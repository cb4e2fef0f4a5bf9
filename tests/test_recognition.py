from unittest.mock import MagicMock, patch

import pytesseract
import pytest

from snapcrop.ocr_engine import (
    NO_NUMBERS_MESSAGE,
    OCREngine,
    OCRLine,
    OCRResult,
    OCRWord,
    RecognitionResult,
    TesseractBackend,
    TextRecognizer,
    extract_numbers,
    get_recognizer,
    set_recognizer,
)
from snapcrop.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

from conftest import FakeRecognizer, make_image, save_image


def tesseract_data(rows):
    """Build an ``image_to_data`` dict from (text, left, top, width, height, conf, block, par, line) rows."""
    keys = ['text', 'left', 'top', 'width', 'height', 'conf', 'block_num', 'par_num', 'line_num']
    return {key: [row[i] for row in rows] for i, key in enumerate(keys)}


def ocr_result_for(*lines):
    ocr_lines = []
    for index, text in enumerate(lines):
        words = [OCRWord(text=t, bbox=(0, 0, 1, 1), confidence=90.0) for t in text.split()]
        ocr_lines.append(OCRLine(words=words, line_index=index))
    return OCRResult(
        words=[w for line in ocr_lines for w in line.words],
        lines=ocr_lines,
        image_width=100,
        image_height=100
    )


class TestExtractNumbers:
    def test_maximal_digit_runs_in_order(self):
        assert extract_numbers("INV 2041, total 1,250 due 03/11") == ['2041', '1', '250', '03', '11']

    def test_digits_glued_to_letters(self):
        assert extract_numbers("A12B345") == ['12', '345']

    def test_leading_zeros_are_kept(self):
        assert extract_numbers("code 007") == ['007']

    def test_no_digits(self):
        assert extract_numbers("Thank you!") == []


class TestRecognitionResult:
    def test_from_text_strips_and_extracts(self):
        result = RecognitionResult.from_text("  Total: 42 items, 7 boxes \n")

        assert result.text == "Total: 42 items, 7 boxes"
        assert result.numbers == ['42', '7']
        assert result.numbers_text == "42, 7"
        assert result.numbers_display == "42, 7"

    def test_no_numbers(self):
        result = RecognitionResult.from_text("hello world")

        assert result.has_text
        assert not result.has_numbers
        assert result.numbers_text == ""
        assert result.numbers_display == NO_NUMBERS_MESSAGE == "No numbers found."

    def test_empty_text(self):
        result = RecognitionResult.from_text("   ")
        assert not result.has_text

    def test_to_dict(self):
        result = RecognitionResult.from_text("Qty 3", ocr=ocr_result_for("Qty 3"))

        data = result.to_dict()

        assert data['numbers'] == ['3']
        assert data['numbers_text'] == "3"
        assert data['ocr']['average_confidence'] == 90.0
        assert data['ocr']['lines'][0]['text'] == "Qty 3"


class TestTextRecognizer:
    def test_single_engine_call_yields_text_and_numbers(self):
        engine = MagicMock()
        engine.extract.return_value = ocr_result_for("Invoice 2041", "Amount 1250")

        result = TextRecognizer(engine=engine).recognize(make_image())

        engine.extract.assert_called_once()
        assert result.text == "Invoice 2041\nAmount 1250"
        assert result.numbers_text == "2041, 1250"
        assert result.ocr is engine.extract.return_value

    def test_engine_errors_propagate(self):
        engine = MagicMock()
        engine.extract.side_effect = OCRProcessingError("image", "boom")

        with pytest.raises(OCRProcessingError):
            TextRecognizer(engine=engine).recognize(make_image())


class TestOCREngine:
    def test_accepts_paths(self, tmp_path):
        backend = MagicMock()
        path = save_image(tmp_path / "scan.png", make_image(30, 20, mode="L"))

        OCREngine(backend=backend).extract(path)

        passed = backend.extract.call_args[0][0]
        assert passed.mode == "RGB"
        assert passed.size == (30, 20)

    def test_unreadable_path_raises(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(OCRProcessingError):
            OCREngine(backend=MagicMock()).extract(path)

    def test_rejects_other_inputs(self):
        with pytest.raises(OCRProcessingError):
            OCREngine(backend=MagicMock()).extract(b"raw bytes")


class TestTesseractBackend:
    @pytest.fixture
    def backend(self):
        with patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0"):
            yield TesseractBackend()

    def test_missing_binary_raises(self):
        with patch.object(
            pytesseract, "get_tesseract_version",
            side_effect=pytesseract.TesseractNotFoundError()
        ):
            with pytest.raises(OCREngineNotAvailableError):
                TesseractBackend()

    def test_groups_words_into_lines(self, backend):
        data = tesseract_data([
            ("", 0, 0, 100, 100, -1, 1, 0, 0),
            ("2041", 80, 10, 30, 12, 91.0, 1, 1, 1),
            ("Invoice", 10, 10, 60, 12, 96.0, 1, 1, 1),
            ("Total", 10, 40, 40, 12, 88.0, 1, 1, 2),
            ("1250", 60, 40, 30, 12, 93.0, 1, 1, 2),
            ("ghost", 10, 60, 0, 12, 50.0, 1, 1, 3),
        ])

        with patch.object(pytesseract, "image_to_data", return_value=data):
            result = backend.extract(make_image(200, 100))

        assert result.word_count == 4
        assert result.line_count == 2
        assert result.text == "Invoice 2041\nTotal 1250"
        assert result.engine == "tesseract"
        assert result.metadata['tesseract_version'] == "5.3.0"

    def test_passes_configured_options(self, backend):
        with patch.object(pytesseract, "image_to_data", return_value=tesseract_data([])) as mock_data:
            backend.extract(make_image(10, 10))

        kwargs = mock_data.call_args.kwargs
        assert kwargs['lang'] == "eng"
        assert "--psm 3" in kwargs['config']
        assert "--oem 3" in kwargs['config']

    def test_empty_page(self, backend):
        with patch.object(pytesseract, "image_to_data", return_value=tesseract_data([])):
            result = backend.extract(make_image(10, 10))

        assert result.is_empty()
        assert result.text == ""

    def test_tesseract_failure_raises(self, backend):
        with patch.object(
            pytesseract, "image_to_data",
            side_effect=pytesseract.TesseractError(1, "Error during processing")
        ):
            with pytest.raises(OCRProcessingError):
                backend.extract(make_image(10, 10))


class TestRecognizerFactory:
    def test_default_is_text_recognizer(self):
        assert isinstance(get_recognizer(), TextRecognizer)

    def test_set_recognizer_swaps_backend(self):
        fake = FakeRecognizer(text="1 2 3")
        set_recognizer(fake)
        assert get_recognizer() is fake
