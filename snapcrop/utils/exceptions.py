"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout SnapCrop.
Third-party failures (Pillow, OpenCV, pytesseract, transformers) are
wrapped in these types at the backend boundary so callers only ever
handle SnapCrop errors.

Exception Hierarchy:
    SnapCropError (base)
    ├── InputError
    │   ├── ImageNotFoundError
    │   ├── UnsupportedFileTypeError
    │   └── CorruptedFileError
    ├── DeviceError
    │   └── DeviceUnavailableError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── ModelError
    │   ├── ModelLoadError
    │   └── InferenceError
    ├── SessionError
    │   └── SessionBusyError
    └── OutputError
        ├── ArtifactWriteError
        └── ExcelExportError
"""


class SnapCropError(Exception):
    """
    Base exception for all SnapCrop errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(SnapCropError):
    """Base exception for input handling errors."""


class ImageNotFoundError(InputError):
    """Raised when an input image cannot be found."""

    def __init__(self, filepath: str):
        message = f"Image not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class UnsupportedFileTypeError(InputError):
    """
    Raised when a file that is not an image is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".pdf", [".png", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Not an image file ({file_type}); please choose an image"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Could not decode image: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# DEVICE ERRORS
# =============================================================================

class DeviceError(SnapCropError):
    """Base exception for capture device errors."""


class DeviceUnavailableError(DeviceError):
    """
    Raised when the camera is missing, unsupported or access was denied.

    Attributes:
        unsupported: True when no capture backend/device exists at all,
                     False when the device exists but could not be used.
    """

    def __init__(self, device: str, reason: str = None, unsupported: bool = False):
        self.unsupported = unsupported
        message = f"Capture device unavailable: {device}"
        details = {"device": device, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(SnapCropError):
    """Base exception for OCR-related errors."""


class OCREngineNotAvailableError(OCRError):
    """Raised when the OCR engine is not installed or not on PATH."""

    def __init__(self, engine_name: str):
        message = f"No OCR engine available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR processing fails."""

    def __init__(self, source: str, reason: str = None):
        message = f"Text recognition failed on {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# MODEL ERRORS
# =============================================================================

class ModelError(SnapCropError):
    """Base exception for detection model errors."""


class ModelLoadError(ModelError):
    """Raised when the detection model fails to load."""

    def __init__(self, model_name: str, reason: str = None):
        message = f"Could not load detection model {model_name}"
        details = {"model": model_name, "reason": reason}
        super().__init__(message, details)


class InferenceError(ModelError):
    """Raised when model inference fails."""

    def __init__(self, reason: str = None):
        message = "Detection model failed while running"
        details = {"reason": reason}
        super().__init__(message, details)


# =============================================================================
# SESSION ERRORS
# =============================================================================

class SessionError(SnapCropError):
    """Base exception for session workflow errors."""


class SessionBusyError(SessionError):
    """Raised when a pass is triggered while another one is in flight."""

    def __init__(self, action: str):
        message = f"Cannot start {action}: another pass is still processing"
        details = {"action": action}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(SnapCropError):
    """Base exception for output handling errors."""


class ArtifactWriteError(OutputError):
    """Raised when an overlay, crop or manifest cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Could not write {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class ExcelExportError(OutputError):
    """Raised when Excel export fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Could not write invoice draft {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'SnapCropError',
    'InputError',
    'ImageNotFoundError',
    'UnsupportedFileTypeError',
    'CorruptedFileError',
    'DeviceError',
    'DeviceUnavailableError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'ModelError',
    'ModelLoadError',
    'InferenceError',
    'SessionError',
    'SessionBusyError',
    'OutputError',
    'ArtifactWriteError',
    'ExcelExportError',
]
