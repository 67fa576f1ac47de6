"""
Определение раскладки листа и сопоставление колонок.

Раскладки:
- debit_credit: выгрузка в стиле QuickBooks, у счёта две колонки Debit/Credit
- amount_category: Account + Amount (+ Category)
- unknown: сигнатура не найдена, заголовок считается нулевой строкой
"""

from dataclasses import dataclass
from typing import Optional
import logging

from config import settings
from data.cleaner import Grid, cell_text, normalize_header, row_text
from data.errors import ColumnMappingFailure
from data.models import LayoutType

logger = logging.getLogger(__name__)


# === Синонимы колонок ===
# Подстрока в заголовке, побеждает самая левая колонка
ACCOUNT_HEADER_TOKENS = ('account', 'name', 'description')
AMOUNT_HEADER_TOKENS = ('amount',)
CATEGORY_HEADER_TOKENS = ('category',)
PERIOD_HEADER_TOKENS = ('period', 'date')
NOTES_HEADER_TOKENS = ('notes', 'comments')

# Фрагменты подписей счетов для восстановления колонки счёта по содержимому
# ("RBC · Chequing", "Sales · Income")
MIDDLE_DOT = '·'
ACCOUNT_LABEL_HINTS = (
    'rbc', 'td ', 'bmo', 'cibc', 'scotia', 'desjardins', 'amex', 'visa',
    'bank', 'chequing', 'checking', 'savings',
    'account', 'income', 'expense', 'revenue', 'payable', 'receivable',
)
RECOVERY_SCAN_ROWS = 4


@dataclass
class ColumnMap:
    """Индексы колонок для парсера строк. None — колонки нет."""
    layout: LayoutType
    header_row: int
    account: Optional[int] = None
    amount: Optional[int] = None
    category: Optional[int] = None
    debit: Optional[int] = None
    credit: Optional[int] = None
    period: Optional[int] = None
    notes: Optional[int] = None


def detect_layout(grid: Grid) -> tuple[int, LayoutType]:
    """
    Ищет строку заголовков в первых settings.header_scan_rows строках.

    Сначала по всем строкам ищется пара debit + credit, затем
    account + (amount | category).

    Returns:
        (индекс строки заголовка, раскладка)
    """
    rows = [row_text(row) for row in grid[:settings.header_scan_rows]]

    for index, text in enumerate(rows):
        if 'debit' in text and 'credit' in text:
            logger.debug(f"Раскладка debit/credit, заголовок в строке {index}")
            return index, LayoutType.DEBIT_CREDIT

    for index, text in enumerate(rows):
        if 'account' in text and ('amount' in text or 'category' in text):
            logger.debug(f"Раскладка amount/category, заголовок в строке {index}")
            return index, LayoutType.AMOUNT_CATEGORY

    logger.debug("Сигнатура заголовка не найдена, берём строку 0")
    return 0, LayoutType.UNKNOWN


def map_columns(grid: Grid, header_row: int, layout: LayoutType) -> ColumnMap:
    """
    Сопоставляет заголовки с колонками.

    Args:
        grid: сетка выбранного листа
        header_row: индекс строки заголовков
        layout: раскладка из detect_layout()

    Returns:
        ColumnMap с разрешённой раскладкой (unknown превращается в конкретную)

    Raises:
        ColumnMappingFailure: подтип по имени недостающей колонки
    """
    headers = [normalize_header(cell) for cell in grid[header_row]] if header_row < len(grid) else []

    columns = ColumnMap(
        layout=layout,
        header_row=header_row,
        account=_find_column(headers, ACCOUNT_HEADER_TOKENS),
        amount=_find_column(headers, AMOUNT_HEADER_TOKENS),
        category=_find_column(headers, CATEGORY_HEADER_TOKENS),
        debit=_find_exact(headers, 'debit'),
        credit=_find_exact(headers, 'credit'),
        period=_find_column(headers, PERIOD_HEADER_TOKENS),
        notes=_find_column(headers, NOTES_HEADER_TOKENS),
    )

    if layout == LayoutType.UNKNOWN:
        if columns.debit is not None and columns.credit is not None:
            columns.layout = LayoutType.DEBIT_CREDIT
        else:
            columns.layout = LayoutType.AMOUNT_CATEGORY

    if columns.layout == LayoutType.DEBIT_CREDIT and columns.account is None:
        columns.account = _recover_account_column(grid, header_row)

    _validate(columns)

    logger.debug(f"Колонки: {columns}")
    return columns


def _find_column(headers: list[str], tokens: tuple) -> Optional[int]:
    for index, header in enumerate(headers):
        if header and any(token in header for token in tokens):
            return index
    return None


def _find_exact(headers: list[str], token: str) -> Optional[int]:
    for index, header in enumerate(headers):
        if header == token:
            return index
    return None


def _recover_account_column(grid: Grid, header_row: int) -> Optional[int]:
    """
    В выгрузках QuickBooks у колонки счетов часто пустой заголовок.
    Ищем в следующих строках ячейку вида "RBC · Chequing".
    """
    for row in grid[header_row + 1:header_row + 1 + RECOVERY_SCAN_ROWS]:
        for index, cell in enumerate(row):
            if not isinstance(cell, str) or MIDDLE_DOT not in cell:
                continue
            lowered = cell.lower()
            if any(hint in lowered for hint in ACCOUNT_LABEL_HINTS):
                logger.info(f"Колонка счетов восстановлена по содержимому: {index} ({cell_text(cell)!r})")
                return index
    return None


def _validate(columns: ColumnMap) -> None:
    if columns.account is None:
        raise ColumnMappingFailure.for_column('account')

    if columns.layout == LayoutType.DEBIT_CREDIT:
        if columns.debit is None:
            raise ColumnMappingFailure.for_column('debit')
        if columns.credit is None:
            raise ColumnMappingFailure.for_column('credit')
    elif columns.amount is None:
        raise ColumnMappingFailure.for_column('amount')
