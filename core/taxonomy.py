"""
Классификатор счетов по фиксированной финансовой таксономии.

Одна упорядоченная таблица (DataType, ключевые слова) для всех форматов.
Тип отчёта определяет, какие корзины участвуют и что делать, если ни одна
не подошла. Первое совпадение по подстроке в подписи счёта побеждает.
"""

import re
from functools import lru_cache
from typing import Optional
import logging

from data.models import DataType, ReportType

logger = logging.getLogger(__name__)


# === Корзины ключевых слов, в порядке приоритета ===
KEYWORD_TABLE: tuple[tuple[DataType, tuple[str, ...]], ...] = (
    (DataType.REVENUE, (
        'revenue', 'sales', 'income', 'earnings', 'profit', 'commission',
        'fees earned', 'royalt', 'gain on',
    )),
    (DataType.ASSET, (
        'asset', 'cash', 'bank', 'chequing', 'checking', 'savings', 'petty',
        'inventory', 'equipment', 'property', 'investment', 'receivable',
        'prepaid', 'deposit', 'furniture', 'vehicle', 'building', 'undeposited',
    )),
    (DataType.LIABILITY, (
        'liability', 'liabilities', 'debt', 'payable', 'loan', 'mortgage', 'tax',
        'accrued', 'unearned', 'deferred', 'credit card', 'line of credit',
    )),
    (DataType.EQUITY, (
        'equity', 'capital', 'retained', 'stock', 'partnership', 'draw',
        'distribution', 'owner', 'shareholder', 'dividend',
    )),
    (DataType.EXPENSE, (
        'expense', 'cost', 'fee', 'charge', 'interest', 'salary', 'salaries',
        'wage', 'payroll', 'rent', 'utilit', 'marketing', 'advertising', 'travel',
        'insurance', 'legal', 'professional', 'office', 'supplies', 'repair',
        'maintenance', 'depreciation', 'amortization', 'telephone', 'software',
        'subscription', 'meals', 'expenditure', 'outlay',
    )),
    (DataType.CASH_FLOW_IN, (
        'inflow', 'receipt', 'income', 'collection', 'proceeds',
    )),
    (DataType.CASH_FLOW_OUT, (
        'outflow', 'payment', 'expense', 'disbursement', 'outlay', 'purchase',
    )),
)

KEYWORDS: dict[DataType, tuple[str, ...]] = dict(KEYWORD_TABLE)

LEDGER_BUCKETS = (
    DataType.REVENUE, DataType.ASSET, DataType.LIABILITY, DataType.EQUITY, DataType.EXPENSE,
)
CASH_FLOW_BUCKETS = (DataType.CASH_FLOW_IN, DataType.CASH_FLOW_OUT)

# Узкие наборы корзин по типу отчёта (CSV)
REPORT_BUCKETS: dict[ReportType, tuple[DataType, ...]] = {
    ReportType.PROFIT_LOSS: (DataType.REVENUE, DataType.EXPENSE),
    ReportType.BALANCE_SHEET: (DataType.ASSET, DataType.LIABILITY, DataType.EQUITY),
    ReportType.CASH_FLOW: CASH_FLOW_BUCKETS,
    ReportType.TRIAL_BALANCE: LEDGER_BUCKETS,
    ReportType.AR_AGING: LEDGER_BUCKETS,
    ReportType.AP_AGING: LEDGER_BUCKETS,
}

# Таблицы для PDF; типа нет в словаре — берутся корзины P&L
PDF_BUCKETS: dict[ReportType, tuple[DataType, ...]] = {
    ReportType.PROFIT_LOSS: REPORT_BUCKETS[ReportType.PROFIT_LOSS],
    ReportType.BALANCE_SHEET: REPORT_BUCKETS[ReportType.BALANCE_SHEET],
    ReportType.CASH_FLOW: REPORT_BUCKETS[ReportType.CASH_FLOW],
    ReportType.TRIAL_BALANCE: REPORT_BUCKETS[ReportType.TRIAL_BALANCE],
}

# Прямое сопоставление значения колонки Category
CATEGORY_LOOKUP: tuple[tuple[str, DataType], ...] = (
    ('asset', DataType.ASSET),
    ('liabilit', DataType.LIABILITY),
    ('revenue', DataType.REVENUE),
    ('expense', DataType.EXPENSE),
    ('equity', DataType.EQUITY),
)


def ledger_buckets(report_type: ReportType) -> tuple[DataType, ...]:
    """Полный набор корзин для структурированных листов (Excel)"""
    if report_type == ReportType.CASH_FLOW:
        return CASH_FLOW_BUCKETS
    return LEDGER_BUCKETS


def report_buckets(report_type: ReportType) -> tuple[DataType, ...]:
    """Набор корзин, суженный типом отчёта (CSV)"""
    return REPORT_BUCKETS.get(report_type, LEDGER_BUCKETS)


def match_bucket(label: str, buckets: tuple[DataType, ...]) -> Optional[DataType]:
    """Первая корзина, ключевое слово которой есть в подписи"""
    lowered = label.lower()
    for data_type in buckets:
        if any(keyword in lowered for keyword in KEYWORDS[data_type]):
            return data_type
    return None


def fallback_type(amount: float, report_type: ReportType) -> DataType:
    """
    Тип, если ни одна корзина не подошла.

    - TRIAL_BALANCE: по знаку (положительный — актив, иначе — обязательство)
    - CASH_FLOW: отток
    - остальные: расход (чтобы не завышать выручку)
    """
    if report_type == ReportType.TRIAL_BALANCE:
        return DataType.ASSET if amount > 0 else DataType.LIABILITY
    if report_type == ReportType.CASH_FLOW:
        return DataType.CASH_FLOW_OUT
    return DataType.EXPENSE


def classify(
    label: str,
    amount: float,
    report_type: ReportType,
    buckets: Optional[tuple[DataType, ...]] = None,
) -> DataType:
    """
    Классифицирует счёт.

    Args:
        label: подпись счёта
        amount: чистая сумма (нужна только для запасного правила)
        report_type: тип отчёта
        buckets: набор корзин; по умолчанию report_buckets(report_type)

    Returns:
        DataType
    """
    if buckets is None:
        buckets = report_buckets(report_type)

    data_type = match_bucket(label, buckets)
    if data_type is None:
        data_type = fallback_type(amount, report_type)
        logger.debug(f"'{label}': нет совпадений, запасной тип {data_type.value}")

    return data_type


def classify_category(value) -> Optional[DataType]:
    """'Current Assets' -> ASSET, 'Operating Expenses' -> EXPENSE, 'Misc' -> None"""
    if value is None:
        return None
    lowered = str(value).strip().lower()
    if not lowered:
        return None
    for token, data_type in CATEGORY_LOOKUP:
        if token in lowered:
            return data_type
    return None


def keeps_zero_amounts(report_type: ReportType) -> bool:
    """В оборотно-сальдовой ведомости нулевой остаток — законные данные"""
    return report_type == ReportType.TRIAL_BALANCE


def pdf_buckets(report_type: ReportType) -> tuple[DataType, ...]:
    """
    Корзины для свободного текста PDF.

    Отдельные таблицы есть только у P&L, баланса, движения денег и ОСВ;
    остальные типы (AR/AP aging) разбираются корзинами P&L.
    """
    return PDF_BUCKETS.get(report_type, PDF_BUCKETS[ReportType.PROFIT_LOSS])


@lru_cache(maxsize=None)
def pdf_patterns(report_type: ReportType) -> tuple[tuple[re.Pattern, DataType], ...]:
    """Регулярки по корзинам PDF для типа отчёта"""
    patterns = []
    for data_type in pdf_buckets(report_type):
        alternation = '|'.join(re.escape(keyword) for keyword in KEYWORDS[data_type])
        patterns.append((re.compile(f'({alternation})', re.IGNORECASE), data_type))
    return tuple(patterns)
