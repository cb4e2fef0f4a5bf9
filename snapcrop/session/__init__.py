"""
Session Module for SnapCrop.

Immutable session snapshots and the controller that moves between them.
"""

from .controller import ImageSession
from .state import ErrorKind, SessionState, Status

__all__ = ['ImageSession', 'SessionState', 'Status', 'ErrorKind']
