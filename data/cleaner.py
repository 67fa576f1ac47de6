"""
Очистка значений из грязных пользовательских файлов.

Реальные выгрузки содержат:
- "$1,200.50" и "1,200" вместо 1200.5 / 1200
- "(450.00)" — бухгалтерская запись отрицательного числа
- "—", "n/a", "-" вместо пустых значений
- None / NaN в пустых ячейках Excel
"""

import math
import re
from typing import Optional
import logging

logger = logging.getLogger(__name__)


# Grid — лист как двумерный список примитивов (str | int | float | None)
Grid = list[list]

# Паттерны для "пустых" значений
EMPTY_PATTERNS = ['-', '—', '–', 'n/a', 'na', 'none', 'nan', '']

_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)$')


def parse_amount(value) -> Optional[float]:
    """
    Знаковое число из ячейки.

    Примеры:
    - "$1,200.50" -> 1200.5
    - "-1200" -> -1200.0
    - "(450)" -> -450.0
    - 1500 -> 1500.0
    - "—" -> None
    - "abc" -> None
    - float("nan") -> None
    """
    if value is None or isinstance(value, bool):
        return None

    # Если уже число
    if isinstance(value, (int, float)):
        value = float(value)
        return value if math.isfinite(value) else None

    s = str(value).strip().lower()

    if s in EMPTY_PATTERNS:
        return None

    # Убираем валюту, разделители тысяч и пробелы
    s = re.sub(r'[$,\s]', '', s)

    negative = False
    if s.startswith('(') and s.endswith(')'):
        negative = True
        s = s[1:-1]

    if not _NUMBER_RE.match(s):
        logger.debug(f"Не удалось преобразовать в число: {value!r}")
        return None

    result = float(s)
    if not math.isfinite(result):
        return None
    return -result if negative else result


def is_numeric_cell(value) -> bool:
    """
    Похожа ли ячейка на число.

    Нативное число — всегда да (включая 0); строка — только если это
    ненулевое число после удаления $ и запятых.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        amount = parse_amount(value)
        return amount is not None and amount != 0
    return False


def is_nonzero_number(value) -> bool:
    """Ненулевое число — нативное или строкой"""
    amount = parse_amount(value)
    return amount is not None and amount != 0


def cell_text(value) -> str:
    """Ячейка как обрезанная строка ('' для пустых)"""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def row_text(row: list) -> str:
    """Склеенный текст строки в нижнем регистре — для поиска ключевых слов"""
    return " ".join(cell_text(cell) for cell in row).lower()


def normalize_header(value) -> str:
    """'  Account Name ' -> 'account name'"""
    return cell_text(value).lower()


def cell_at(row: list, index: Optional[int]):
    """Безопасный доступ к ячейке: короткие строки и None-индекс дают None"""
    if index is None or index >= len(row):
        return None
    return row[index]
