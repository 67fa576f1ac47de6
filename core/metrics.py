"""
Локальный расчёт агрегатов по разобранным записям.

ВСЕ цифры считаются здесь, локально.
LLM получает уже готовые записи и только интерпретирует их.
"""

from typing import Optional
import logging

from data.models import AccountLine, DataType, ParsedFinancialRecord, Summary, TopAccount

logger = logging.getLogger(__name__)


TOP_ACCOUNTS_LIMIT = 5


def calculate_summary(
    records: list[ParsedFinancialRecord],
    processed_sheet: Optional[str] = None,
) -> Summary:
    """
    Главная функция расчёта агрегатов.

    Один проход по записям. Расходы, обязательства и оттоки копятся
    по модулю, независимо от знаковой конвенции источника.

    Args:
        records: принятые записи
        processed_sheet: имя обработанного листа (или формата для CSV/PDF)

    Returns:
        Summary без AI-полей
    """
    logger.info(f"Расчёт агрегатов для {len(records)} записей")

    revenue = expenses = assets = liabilities = equity = 0.0
    cash_in = cash_out = 0.0

    for record in records:
        amount = record.amount
        data_type = record.data_type

        if data_type == DataType.REVENUE:
            revenue += amount
        elif data_type == DataType.EXPENSE:
            expenses += abs(amount)
        elif data_type == DataType.ASSET:
            assets += amount
        elif data_type == DataType.LIABILITY:
            liabilities += abs(amount)
        elif data_type == DataType.EQUITY:
            equity += amount
        elif data_type == DataType.CASH_FLOW_IN:
            cash_in += abs(amount)
        elif data_type == DataType.CASH_FLOW_OUT:
            cash_out += abs(amount)

    # Производные — от округлённых итогов, чтобы net_profit == revenue − expenses в JSON
    revenue, expenses = _money(revenue), _money(expenses)
    cash_in, cash_out = _money(cash_in), _money(cash_out)
    net_profit = revenue - expenses

    summary = Summary(
        total_revenue=revenue,
        total_expenses=expenses,
        net_profit=_money(net_profit),
        net_margin_percent=round(net_profit / revenue * 100, 2) if revenue > 0 else 0.0,
        total_assets=_money(assets),
        total_liabilities=_money(liabilities),
        total_equity=_money(equity),
        total_cash_inflow=cash_in,
        total_cash_outflow=cash_out,
        net_cash_flow=_money(cash_in - cash_out),
        current_ratio=_ratio(assets, liabilities),
        debt_to_equity_ratio=_ratio(liabilities, equity),
        top_accounts=_top_accounts(records),
        processed_sheet=processed_sheet,
        record_count=len(records),
    )

    logger.debug(
        f"Агрегаты: revenue={summary.total_revenue}, expenses={summary.total_expenses}, "
        f"margin={summary.net_margin_percent}%"
    )

    return summary


def _money(value: float) -> float:
    """
    Округление до центов.

    + 0.0 убирает отрицательный ноль (-0.0), чтобы JSON был стабильным.
    """
    return round(value, 2) + 0.0


def _ratio(numerator: float, denominator: float) -> float:
    """Коэффициент; 0, если знаменатель не положителен"""
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator, 2)


def _top_accounts(records: list[ParsedFinancialRecord]) -> list[TopAccount]:
    """Крупнейшие счета по модулю. sorted стабилен — порядок детерминирован."""
    largest = sorted(records, key=lambda r: abs(r.amount), reverse=True)[:TOP_ACCOUNTS_LIMIT]
    return [
        TopAccount(name=r.account_name, amount=_money(abs(r.amount)), category=r.data_type)
        for r in largest
    ]


def build_accounts(records: list[ParsedFinancialRecord]) -> list[AccountLine]:
    """
    Записи в виде дебет / кредит / сальдо, в порядке документа.

    Положительная сумма — дебет, ноль и отрицательная — кредит.
    """
    accounts = []
    for record in records:
        balance = _money(record.amount)
        is_debit = balance > 0
        accounts.append(AccountLine(
            name=record.account_name,
            category=record.data_type,
            debit=balance if is_debit else None,
            credit=None if is_debit else abs(balance),
            amount=abs(balance),
            balance=balance,
        ))
    return accounts
