"""
Output Handler Module for SnapCrop.

Writes overlays, crops, manifests, recognized text and invoice drafts.

Author: SnapCrop Team
"""

from .handler import OutputHandler
from .excel_exporter import InvoiceDraftExporter

__all__ = ['OutputHandler', 'InvoiceDraftExporter']
