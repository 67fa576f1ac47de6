"""
Парсеры строк: одна сырая строка -> ноль или одна нормализованная запись.

Варианты:
- debit/credit: структурированный лист с парой колонок Debit/Credit
- amount/category: структурированный лист с колонкой Amount
- CSV: строка как dict {заголовок: значение}
- PDF: строка свободного текста

Решение о категории всегда принимает core.taxonomy. None — строка
молча исключается (не ошибка). PDF-строка даёт список: ноль, одну или
несколько записей.
"""

import re
from typing import Optional
import logging

from config import settings
from core.taxonomy import classify, classify_category, keeps_zero_amounts, ledger_buckets, pdf_patterns
from data.cleaner import Grid, cell_at, cell_text, parse_amount
from data.layout import ColumnMap
from data.models import LayoutType, ParsedFinancialRecord, ReportType

logger = logging.getLogger(__name__)


# Служебные строки итогов
SKIPPED_LABELS = {'', 'total', 'trial balance'}

# Синонимы заголовков CSV (в порядке приоритета)
CSV_ACCOUNT_HEADERS = ('account_name', 'account', 'description', 'item', 'category', 'name')
CSV_AMOUNT_HEADERS = ('amount', 'value', 'balance', 'total', 'sum')

PDF_AMOUNT_RE = re.compile(r'\$?([\d,]+\.?\d*)')


def parse_debit_credit_row(
    row: list,
    columns: ColumnMap,
    report_type: ReportType,
) -> Optional[ParsedFinancialRecord]:
    """
    Строка выгрузки debit/credit.

    amount = debit − credit. Пропускаем итоги, пустые подписи и строки,
    где обе колонки нулевые или нечисловые.
    """
    label = cell_text(cell_at(row, columns.account))
    if label.lower() in SKIPPED_LABELS:
        return None

    debit = parse_amount(cell_at(row, columns.debit)) or 0.0
    credit = parse_amount(cell_at(row, columns.credit)) or 0.0
    if debit == 0 and credit == 0:
        return None

    amount = debit - credit
    if amount == 0 and not keeps_zero_amounts(report_type):
        return None

    return ParsedFinancialRecord(
        account_name=label,
        amount=amount,
        data_type=classify(label, amount, report_type, ledger_buckets(report_type)),
        period=_optional_text(row, columns.period),
        notes=_optional_text(row, columns.notes),
    )


def parse_amount_category_row(
    row: list,
    columns: ColumnMap,
    report_type: ReportType,
) -> Optional[ParsedFinancialRecord]:
    """
    Строка с колонкой Amount.

    Значение колонки Category, если оно сопоставляется с типом, важнее
    классификации по подписи.
    """
    label = cell_text(cell_at(row, columns.account))
    if label.lower() in SKIPPED_LABELS:
        return None

    amount = parse_amount(cell_at(row, columns.amount))
    if amount is None:
        return None
    if amount == 0 and not keeps_zero_amounts(report_type):
        return None

    category = _optional_text(row, columns.category)
    data_type = classify_category(category)
    if data_type is None:
        data_type = classify(label, amount, report_type, ledger_buckets(report_type))

    return ParsedFinancialRecord(
        account_name=label,
        account_category=category,
        amount=amount,
        data_type=data_type,
        period=_optional_text(row, columns.period),
        notes=_optional_text(row, columns.notes),
    )


def parse_grid_rows(grid: Grid, columns: ColumnMap, report_type: ReportType) -> list[ParsedFinancialRecord]:
    """Все строки данных под заголовком выбранным парсером"""
    if columns.layout == LayoutType.DEBIT_CREDIT:
        parse_row = parse_debit_credit_row
    else:
        parse_row = parse_amount_category_row

    records = []
    skipped = 0

    for row in grid[columns.header_row + 1:]:
        if not row or all(cell is None for cell in row):
            continue
        record = parse_row(row, columns, report_type)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    logger.info(f"Строк разобрано: {len(records)}, пропущено: {skipped} ({columns.layout.value})")
    return records


def parse_csv_row(row: dict, report_type: ReportType) -> Optional[ParsedFinancialRecord]:
    """
    Строка CSV как {заголовок в нижнем регистре: значение}.

    Нулевые суммы отбрасываются ВСЕГДА, в том числе для TRIAL_BALANCE
    (в отличие от Excel-пути).
    """
    account_name = ''
    for header in CSV_ACCOUNT_HEADERS:
        value = cell_text(row.get(header))
        if value:
            account_name = value
            break

    amount = None
    for header in CSV_AMOUNT_HEADERS:
        amount = parse_amount(row.get(header))
        if amount is not None:
            break

    if not account_name or amount is None or amount == 0:
        return None

    return ParsedFinancialRecord(
        account_name=account_name,
        account_category=_first_text(row, ('category', 'account_category')),
        amount=amount,
        data_type=classify(account_name, amount, report_type),
        period=_first_text(row, ('period', 'date')),
        notes=_first_text(row, ('notes', 'comments')),
    )


def parse_csv_rows(grid: Grid, report_type: ReportType) -> list[ParsedFinancialRecord]:
    """Первая строка — заголовки, остальные — данные"""
    headers = [cell_text(cell).lower() for cell in grid[0]]
    records = []

    for values in grid[1:]:
        row = {header: value for header, value in zip(headers, values) if header}
        record = parse_csv_row(row, report_type)
        if record is not None:
            records.append(record)

    logger.info(f"CSV: разобрано {len(records)} из {len(grid) - 1} строк")
    return records


def parse_pdf_line(line: str, report_type: ReportType) -> list[ParsedFinancialRecord]:
    """
    Строка текста PDF -> по записи на каждую подходящую регулярку.

    Сумма — первый денежный токен строки. Строка, подходящая под две
    корзины ("Cost of Sales 500" в P&L), даёт две записи с одной суммой.
    Точность заведомо ниже табличных форматов.
    """
    line = line.strip()
    if not line:
        return []

    data_types = [data_type for pattern, data_type in pdf_patterns(report_type) if pattern.search(line)]
    if not data_types:
        return []

    amount = _first_amount(line)
    if amount is None:
        return []

    account_name = line[:settings.pdf_account_name_length]
    return [
        ParsedFinancialRecord(account_name=account_name, amount=amount, data_type=data_type)
        for data_type in data_types
    ]


def parse_pdf_text(text: str, report_type: ReportType) -> list[ParsedFinancialRecord]:
    records = []
    for line in text.splitlines():
        records.extend(parse_pdf_line(line, report_type))

    logger.info(f"PDF: найдено {len(records)} записей")
    return records


def _first_amount(line: str) -> Optional[float]:
    # Одиночная запятая тоже совпадает с шаблоном — берём первый разбираемый токен
    for match in PDF_AMOUNT_RE.finditer(line):
        amount = parse_amount(match.group(1))
        if amount is not None:
            return amount
    return None


def _optional_text(row: list, index: Optional[int]) -> Optional[str]:
    return cell_text(cell_at(row, index)) or None


def _first_text(row: dict, headers: tuple) -> Optional[str]:
    for header in headers:
        value = cell_text(row.get(header))
        if value:
            return value
    return None
