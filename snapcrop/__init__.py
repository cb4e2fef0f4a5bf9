"""
SnapCrop - Source Package.

Pick or capture an image, then either crop every detected object at
native resolution or recognize its text for an invoice draft.

Modules:
    - input_handler: Image file and camera input
    - detection: Detection data types and the object-detection model
    - regions: Rendered-to-native scaling, cropping and overlay drawing
    - ocr_engine: Text recognition and digit-run extraction
    - session: User workflow state and error reporting
    - output_handler: Overlay, crop, text and Excel artefacts

Architecture:
    Input → DisplayedImage → Detection → Region Extraction → Output
                          ↘ Text Recognition ─────────────↗
"""

__version__ = "1.0.0"
__author__ = "SnapCrop Team"

__all__ = [
    'input_handler',
    'detection',
    'regions',
    'ocr_engine',
    'session',
    'output_handler',
    'utils'
]
