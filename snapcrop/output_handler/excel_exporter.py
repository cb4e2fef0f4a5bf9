"""
Invoice Draft Exporter Module.

Writes recognized invoice numbers into an Excel workbook the user can
finish by hand. Uses openpyxl for modern Excel format support.

Sheets:
    - Line Items: one row per recognized number
    - Recognized Text: the full OCR text, one line per row

Author: SnapCrop Team
"""

from pathlib import Path
from typing import Optional, Union

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from snapcrop.utils.logger import get_logger
from snapcrop.utils.helpers import ensure_directory
from snapcrop.utils.exceptions import ExcelExportError
from snapcrop.ocr_engine.recognition import RecognitionResult

logger = get_logger(__name__)


class InvoiceDraftExporter:
    """
    Exports a recognition result as an invoice draft workbook.

    Attributes:
        sheet_name: Title of the line-items sheet

    Example:
        >>> exporter = InvoiceDraftExporter()
        >>> path = exporter.export(result, "outputs/invoice_draft.xlsx", source_name="receipt.jpg")
    """

    COLUMNS = [
        ('#', 6),
        ('Recognized Number', 20),
        ('Description', 40),
        ('Quantity', 12),
        ('Unit Price', 14),
        ('Amount', 14),
    ]

    def __init__(self, sheet_name: Optional[str] = None) -> None:
        self.sheet_name = sheet_name or get_config("output.excel.sheet_name", "Line Items")

    def export(
        self,
        result: RecognitionResult,
        filepath: Union[str, Path],
        source_name: Optional[str] = None
    ) -> str:
        """
        Write the workbook.

        Args:
            result: Recognition result to export.
            filepath: Destination .xlsx path.
            source_name: Image the text was recognized from.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If the workbook cannot be written.
        """
        filepath = Path(filepath)
        ensure_directory(filepath.parent)

        try:
            workbook = openpyxl.Workbook()
            self._create_line_items_sheet(workbook, result, source_name)
            self._create_text_sheet(workbook, result)
            workbook.save(filepath)
        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

        logger.info(f"Invoice draft saved: {filepath} ({len(result.numbers)} line item(s))")
        return str(filepath)

    def _create_line_items_sheet(
        self,
        workbook,
        result: RecognitionResult,
        source_name: Optional[str]
    ) -> None:
        sheet = workbook.active
        sheet.title = self.sheet_name

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        thin = Side(style='thin')
        border = Border(left=thin, right=thin, top=thin, bottom=thin)

        sheet.cell(row=1, column=1, value="Source").font = Font(bold=True)
        sheet.cell(row=1, column=2, value=source_name or "")

        header_row = 3
        for col, (header_name, width) in enumerate(self.COLUMNS, 1):
            cell = sheet.cell(row=header_row, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
            sheet.column_dimensions[get_column_letter(col)].width = width

        # Numbers stay text so leading zeros survive
        for index, number in enumerate(result.numbers, 1):
            row = header_row + index
            sheet.cell(row=row, column=1, value=index).border = border
            sheet.cell(row=row, column=2, value=number).border = border
            for col in range(3, len(self.COLUMNS) + 1):
                sheet.cell(row=row, column=col).border = border

        sheet.freeze_panes = sheet.cell(row=header_row + 1, column=1)

    def _create_text_sheet(self, workbook, result: RecognitionResult) -> None:
        sheet = workbook.create_sheet(title="Recognized Text")
        sheet.cell(row=1, column=1, value="Text").font = Font(bold=True)
        for row, line in enumerate(result.text.splitlines(), 2):
            sheet.cell(row=row, column=1, value=line)
        sheet.column_dimensions['A'].width = 80
