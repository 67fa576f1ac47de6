"""
Data module — модели, декодеры файлов, очистка значений, выбор листа и колонок.
"""

from data.models import (
    DataType,
    ReportType,
    FileType,
    LayoutType,
    InsightType,
    Severity,
    ParsedFinancialRecord,
    Insight,
    TopAccount,
    AccountLine,
    Summary,
    ParsedData,
    AIEnrichment,
    ParsingResult,
)
from data.errors import (
    IngestionError,
    FileDecodeFailure,
    UnsupportedFileType,
    EmptyDocumentFailure,
    SheetSelectionFailure,
    ColumnMappingFailure,
    MissingAccountColumn,
    MissingAmountColumn,
    MissingDebitColumn,
    MissingCreditColumn,
)
from data.parser import read_workbook, read_csv, extract_pdf_text
from data.cleaner import parse_amount, is_numeric_cell, normalize_header
from data.sheets import score_sheet, select_sheet
from data.layout import ColumnMap, detect_layout, map_columns

__all__ = [
    # Models
    "DataType",
    "ReportType",
    "FileType",
    "LayoutType",
    "InsightType",
    "Severity",
    "ParsedFinancialRecord",
    "Insight",
    "TopAccount",
    "AccountLine",
    "Summary",
    "ParsedData",
    "AIEnrichment",
    "ParsingResult",
    # Errors
    "IngestionError",
    "FileDecodeFailure",
    "UnsupportedFileType",
    "EmptyDocumentFailure",
    "SheetSelectionFailure",
    "ColumnMappingFailure",
    "MissingAccountColumn",
    "MissingAmountColumn",
    "MissingDebitColumn",
    "MissingCreditColumn",
    # Decoders
    "read_workbook",
    "read_csv",
    "extract_pdf_text",
    # Cleaner
    "parse_amount",
    "is_numeric_cell",
    "normalize_header",
    # Sheet / layout
    "score_sheet",
    "select_sheet",
    "ColumnMap",
    "detect_layout",
    "map_columns",
]
