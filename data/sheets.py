"""
Выбор листа с финансовыми данными в Excel-книге.

Каждому листу начисляется балл по первым строкам; побеждает лист с
максимальным баллом, при равенстве — первый по порядку книги.
"""

import logging

from config import settings
from data.cleaner import Grid, cell_text, is_numeric_cell, is_nonzero_number, row_text
from data.errors import SheetSelectionFailure

logger = logging.getLogger(__name__)


FINANCIAL_HEADER_TOKENS = ('account', 'debit', 'credit', 'amount', 'balance', 'category')
NON_FINANCIAL_SHEET_TOKENS = ('tip', 'instruction', 'help')

HEADER_TOKEN_POINTS = 10
NUMERIC_ROW_POINTS = 5
ACCOUNT_LINE_POINTS = 2
ACCOUNT_LINE_CAP = 20
NON_FINANCIAL_PENALTY = -15


def score_sheet(name: str, grid: Grid) -> int:
    """
    Балл листа.

    По первым settings.sheet_scan_rows строкам:
    - +10 за строку с финансовым токеном заголовка
    - +5 за строку хотя бы с одной числовой ячейкой
    - +2 за строку вида "счёт + сумма" (не больше +20 суммарно)
    - −15 если имя листа похоже на справку/инструкцию
    """
    score = 0
    account_lines = 0

    for row in grid[:settings.sheet_scan_rows]:
        text = row_text(row)

        if any(token in text for token in FINANCIAL_HEADER_TOKENS):
            score += HEADER_TOKEN_POINTS

        if any(is_numeric_cell(cell) for cell in row):
            score += NUMERIC_ROW_POINTS

        if _is_account_line(row):
            account_lines += 1

    score += min(account_lines * ACCOUNT_LINE_POINTS, ACCOUNT_LINE_CAP)

    name_lower = str(name).lower()
    if any(token in name_lower for token in NON_FINANCIAL_SHEET_TOKENS):
        score += NON_FINANCIAL_PENALTY

    return score


def _is_account_line(row: list) -> bool:
    """Непустая строка в колонке 0 и ненулевое число где-то дальше"""
    if not row or not isinstance(row[0], str) or not cell_text(row[0]):
        return False
    return any(is_nonzero_number(cell) for cell in row[1:])


def select_sheet(sheets: dict[str, Grid]) -> tuple[str, Grid]:
    """
    Выбирает лист с максимальным баллом.

    Args:
        sheets: {имя листа: сетка} в порядке книги

    Returns:
        (имя листа, сетка)

    Raises:
        SheetSelectionFailure: если лучший балл ниже settings.min_sheet_score
    """
    best_name = None
    best_score = None

    for name, grid in sheets.items():
        score = score_sheet(name, grid)
        logger.debug(f"Лист '{name}': балл {score}")

        # Строгое сравнение: при равенстве остаётся первый лист
        if best_score is None or score > best_score:
            best_name, best_score = name, score

    if best_name is None or best_score < settings.min_sheet_score:
        logger.warning(f"Не найден лист с финансовыми данными (лучший балл: {best_score})")
        raise SheetSelectionFailure()

    logger.info(f"Выбран лист '{best_name}' (балл {best_score})")
    return best_name, sheets[best_name]
