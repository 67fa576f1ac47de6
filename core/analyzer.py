"""
Оркестрация разбора — связывает все компоненты в единый пайплайн.

Пайплайн:
1. Выбор формата (CSV / PDF / Excel)
2. Excel: выбор листа -> поиск заголовка -> сопоставление колонок
3. Разбор строк и классификация
4. Расчёт агрегатов и списка счетов (локально)
5. AI-обогащение (необязательно)
6. Формирование ParsingResult

Исключения наружу не выходят: любая ошибка становится success=False.
"""

from pathlib import Path
from typing import Callable, Optional, Union
import logging

from config import settings
from core.metrics import build_accounts, calculate_summary
from core.rows import parse_csv_rows, parse_grid_rows, parse_pdf_text
from data.cleaner import Grid
from data.errors import EmptyDocumentFailure, IngestionError, UnsupportedFileType
from data.layout import detect_layout, map_columns
from data.models import (
    FileType,
    ParsedData,
    ParsedFinancialRecord,
    ParsingResult,
    ReportType,
    Summary,
)
from data.parser import extract_pdf_text, read_csv, read_workbook
from data.sheets import select_sheet
from llm.client import LLMClient
from llm.enrichment import enrich

logger = logging.getLogger(__name__)


WorkbookReader = Callable[[bytes, FileType], dict[str, Grid]]
PdfTextExtractor = Callable[[bytes], str]

CSV_SHEET_NAME = "CSV"
PDF_SHEET_NAME = "PDF"


def parse_financial_report(
    content: Union[str, bytes],
    file_type: str,
    report_type: Union[ReportType, str],
    llm_client: Optional[LLMClient] = None,
    *,
    workbook_reader: Optional[WorkbookReader] = None,
    pdf_text_extractor: Optional[PdfTextExtractor] = None,
) -> ParsingResult:
    """
    Полный цикл разбора одного документа.

    Args:
        content: байты файла (для CSV допускается текст)
        file_type: csv / pdf / xlsx / xls (регистр и точка не важны)
        report_type: заявленный тип отчёта
        llm_client: клиент для AI-обогащения; None — без обогащения
        workbook_reader: декодер Excel (по умолчанию pandas)
        pdf_text_extractor: извлечение текста PDF (по умолчанию pdfplumber)

    Returns:
        ParsingResult — всегда, без исключений
    """
    if not isinstance(report_type, ReportType):
        try:
            report_type = ReportType(str(report_type).strip().upper())
        except ValueError:
            return ParsingResult(success=False, error=f"Unsupported report type: {report_type}")

    parsed_type = FileType.from_name(file_type)
    logger.info(f"Начало разбора: формат {file_type}, отчёт {report_type.value}")

    try:
        if parsed_type is None:
            raise UnsupportedFileType(file_type)

        if parsed_type == FileType.CSV:
            records, preview, sheet_name = _parse_csv(content, report_type)
        elif parsed_type == FileType.PDF:
            records, preview, sheet_name = _parse_pdf(
                content, report_type, pdf_text_extractor or extract_pdf_text
            )
        else:
            records, preview, sheet_name = _parse_excel(
                content, parsed_type, report_type, workbook_reader or read_workbook
            )

        summary = calculate_summary(records, sheet_name)

        if llm_client is not None and settings.ai_enrichment_enabled:
            _attach_enrichment(summary, llm_client, preview, records, report_type)

    except IngestionError as e:
        logger.warning(f"Разбор не удался: {e}")
        return ParsingResult(success=False, error=str(e), report_type=report_type)
    except Exception as e:
        logger.exception(f"Непредвиденная ошибка разбора: {e}")
        return ParsingResult(
            success=False,
            error=f"Failed to parse file: {e}",
            report_type=report_type,
        )

    logger.info(f"Разбор завершён: {len(records)} записей (лист {sheet_name!r})")

    return ParsingResult(
        success=True,
        data=ParsedData(records=records, summary=summary, accounts=build_accounts(records)),
        report_type=report_type,
    )


def analyze_file(
    file_path: Union[str, Path],
    report_type: Union[ReportType, str],
    llm_client: Optional[LLMClient] = None,
) -> ParsingResult:
    """
    Разбор файла с диска. Формат берётся из расширения.
    """
    path = Path(file_path)

    try:
        content = path.read_bytes()
    except OSError as e:
        logger.error(f"Не удалось прочитать файл {path}: {e}")
        return ParsingResult(success=False, error=f"Failed to read file: {e}")

    return parse_financial_report(content, path.suffix, report_type, llm_client)


def _parse_excel(
    content: bytes,
    file_type: FileType,
    report_type: ReportType,
    reader: WorkbookReader,
) -> tuple[list[ParsedFinancialRecord], Grid, str]:
    sheets = reader(_as_bytes(content), file_type)
    sheet_name, grid = select_sheet(sheets)

    if len(grid) < 2:
        raise EmptyDocumentFailure("Excel")

    header_row, layout = detect_layout(grid)
    columns = map_columns(grid, header_row, layout)
    records = parse_grid_rows(grid, columns, report_type)

    return records, grid[header_row:], sheet_name


def _parse_csv(
    content: Union[str, bytes],
    report_type: ReportType,
) -> tuple[list[ParsedFinancialRecord], Grid, str]:
    grid = read_csv(content)
    if len(grid) < 2:
        raise EmptyDocumentFailure("CSV")

    return parse_csv_rows(grid, report_type), grid, CSV_SHEET_NAME


def _parse_pdf(
    content: bytes,
    report_type: ReportType,
    extractor: PdfTextExtractor,
) -> tuple[list[ParsedFinancialRecord], Grid, str]:
    text = extractor(_as_bytes(content))
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    preview = [[line] for line in lines]

    return parse_pdf_text(text, report_type), preview, PDF_SHEET_NAME


def _attach_enrichment(
    summary: Summary,
    client: LLMClient,
    preview: Grid,
    records: list[ParsedFinancialRecord],
    report_type: ReportType,
) -> None:
    """AI-поля появляются только при успешном обогащении"""
    enrichment = enrich(client, preview, records, report_type)
    if enrichment is None:
        return

    summary.ai_sheet_type = enrichment.sheet_type
    summary.ai_insights = enrichment.insights
    summary.ai_summary = enrichment.summary


def _as_bytes(content: Union[str, bytes]) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content
