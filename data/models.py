"""
Pydantic модели данных движка разбора.

Модели:
- ParsedFinancialRecord: одна нормализованная строка отчёта
- Summary: агрегаты и производные показатели
- AccountLine: счёт в виде дебет / кредит / сальдо
- Insight: один инсайт от LLM
- ParsingResult: единственный публичный результат разбора

Поля в Python — snake_case, в JSON — camelCase (accountName, totalRevenue, ...).
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DataType(str, Enum):
    """Категория финансовой строки (закрытый список)"""
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    CASH_FLOW_IN = "CASH_FLOW_IN"
    CASH_FLOW_OUT = "CASH_FLOW_OUT"


class ReportType(str, Enum):
    """Тип отчёта — задаётся вызывающим кодом, не угадывается"""
    PROFIT_LOSS = "PROFIT_LOSS"
    BALANCE_SHEET = "BALANCE_SHEET"
    CASH_FLOW = "CASH_FLOW"
    TRIAL_BALANCE = "TRIAL_BALANCE"
    AR_AGING = "AR_AGING"
    AP_AGING = "AP_AGING"


class FileType(str, Enum):
    """Поддерживаемые форматы загрузки"""
    CSV = "csv"
    PDF = "pdf"
    XLSX = "xlsx"
    XLS = "xls"

    @classmethod
    def from_name(cls, name: str) -> Optional["FileType"]:
        """'XLSX', '.csv', 'pdf' -> FileType; неизвестное -> None"""
        normalized = str(name or "").strip().lower().lstrip(".")
        try:
            return cls(normalized)
        except ValueError:
            return None

    @property
    def is_excel(self) -> bool:
        return self in (FileType.XLSX, FileType.XLS)


class LayoutType(str, Enum):
    """Раскладка табличного листа"""
    DEBIT_CREDIT = "debit_credit"        # Выгрузка в стиле QuickBooks: отдельные Debit/Credit
    AMOUNT_CATEGORY = "amount_category"  # Account + Amount (+ Category)
    UNKNOWN = "unknown"                  # Сигнатура не найдена, разбираем как получится


class InsightType(str, Enum):
    """Тип инсайта"""
    TREND = "trend"
    ANOMALY = "anomaly"
    RECOMMENDATION = "recommendation"
    SUMMARY = "summary"


class Severity(str, Enum):
    """Важность инсайта"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParsedFinancialRecord(_CamelModel):
    """
    Одна нормализованная строка документа.

    Инварианты: account_name непустой и обрезан, amount конечен.
    """
    account_name: str
    account_category: Optional[str] = None
    amount: float
    data_type: DataType
    period: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("account_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("account_name must not be empty")
        return value

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("amount must be finite")
        return value


class Insight(_CamelModel):
    """
    Один инсайт от LLM.

    Структура:
    - type: trend / anomaly / recommendation / summary
    - title: краткий заголовок
    - description: что это значит
    - severity: low / medium / high
    """
    type: InsightType = InsightType.SUMMARY
    title: str
    description: str
    severity: Severity = Severity.MEDIUM


class TopAccount(_CamelModel):
    """Крупнейший счёт по модулю суммы"""
    name: str
    amount: float
    category: DataType


class AccountLine(_CamelModel):
    """
    Счёт в бухгалтерском виде.

    Положительная сумма — дебет, иначе — кредит (модуль); balance хранит знак.
    """
    name: str
    category: DataType
    debit: Optional[float] = None
    credit: Optional[float] = None
    amount: float
    balance: float


class Summary(_CamelModel):
    """
    Агрегаты, посчитанные ЛОКАЛЬНО (не LLM).

    total_expenses, total_liabilities и total_cash_outflow — всегда модули.
    """
    total_revenue: float = 0.0
    total_expenses: float = Field(0.0, ge=0)
    net_profit: float = 0.0
    net_margin_percent: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = Field(0.0, ge=0)
    total_equity: float = 0.0

    # === Денежные потоки ===
    total_cash_inflow: float = Field(0.0, ge=0)
    total_cash_outflow: float = Field(0.0, ge=0)
    net_cash_flow: float = 0.0

    # === Коэффициенты (0, если знаменатель не положителен) ===
    current_ratio: float = 0.0
    debt_to_equity_ratio: float = 0.0

    top_accounts: list[TopAccount] = Field(default_factory=list)
    processed_sheet: Optional[str] = None
    record_count: int = 0

    # === От LLM (только при успешном обогащении) ===
    ai_sheet_type: Optional[str] = None
    ai_insights: Optional[list[Insight]] = None
    ai_summary: Optional[dict[str, Any]] = None


class ParsedData(_CamelModel):
    records: list[ParsedFinancialRecord] = Field(default_factory=list)
    summary: Summary
    accounts: list[AccountLine] = Field(default_factory=list)


class AIEnrichment(_CamelModel):
    """Результат AI-обогащения до слияния с Summary"""
    sheet_type: Optional[str] = None
    insights: list[Insight] = Field(default_factory=list)
    summary: Optional[dict[str, Any]] = None


class ParsingResult(_CamelModel):
    """
    Единственная форма ответа движка. Никогда не выбрасывается как исключение.
    """
    success: bool
    data: Optional[ParsedData] = None
    error: Optional[str] = None
    report_type: Optional[ReportType] = None

    def to_dict(self) -> dict:
        """JSON-совместимый dict в camelCase, без пустых полей"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
