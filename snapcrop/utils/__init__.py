"""
Utility Module for SnapCrop.

Common utilities used across all other modules:
    - Logging configuration
    - File operations
    - Data URI encoding
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension'
]
