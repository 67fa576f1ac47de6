"""
Парсинг ответов LLM.

LLM часто ломают JSON:
- Добавляют текст до/после
- Оборачивают в ```json
- Ломают кавычки
- Пишут числа с запятыми (103,559.49)
- Путают типы (None вместо null)

Разбор многоуровневый:
1. Строгое извлечение JSON (с починкой)
2. Свободные строки "Title: / Description: / Severity:"
3. Один общий инсайт по умолчанию
"""

import json
import re
from typing import Any, Optional
import logging

from pydantic import ValidationError
from data.models import Insight, InsightType, Severity

logger = logging.getLogger(__name__)


class JSONParseError(Exception):
    """Не удалось распарсить JSON даже после repair"""
    pass


DEFAULT_INSIGHT_TITLE = "Financial Data Successfully Processed"
DEFAULT_INSIGHT_DESCRIPTION = "Financial report has been analyzed and processed successfully"
UNKNOWN_SHEET_TYPE = "Unknown"

# Поля summary, которые вытаскиваем регулярками из неразборчивого ответа
SUMMARY_NUMBER_FIELDS = (
    'totalAssets', 'totalLiabilities', 'totalEquity',
    'totalRevenue', 'totalExpenses', 'netIncome', 'netProfit',
)


def extract_json(text: str) -> dict:
    """
    Извлекает JSON-объект из ответа LLM.

    Пробует по порядку:
    1. Прямой парсинг
    2. Извлечение из ```json блока
    3. Поиск { ... } в тексте
    4. Починка частых ошибок

    Raises:
        JSONParseError: если не удалось извлечь JSON-объект
    """
    if not text or not text.strip():
        raise JSONParseError("Пустой ответ от LLM")

    candidates = [text]

    code_block_match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', text)
    if code_block_match:
        candidates.append(code_block_match.group(1))

    json_match = re.search(r'\{[\s\S]*\}', text)
    if json_match:
        candidates.append(json_match.group(0))
        candidates.append(_repair_json(json_match.group(0)))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise JSONParseError("Не удалось извлечь JSON из ответа LLM")


def _repair_json(json_str: str) -> str:
    """
    Починка частых ошибок в JSON.

    Исправляет:
    - Trailing commas: {a: 1,} -> {a: 1}
    - Single quotes: {'a': 1} -> {"a": 1}
    - Unquoted keys: {a: 1} -> {"a": 1}
    - Числа с разделителями: 103,559.49 -> 103559.49
    - Python None/True/False -> null/true/false
    """
    # Trailing commas
    json_str = re.sub(r',\s*}', '}', json_str)
    json_str = re.sub(r',\s*]', ']', json_str)

    # Single quotes -> double quotes
    json_str = re.sub(r"(?<![\"\\])'([^']*)'(?![\"\\])", r'"\1"', json_str)

    # Ключи без кавычек
    json_str = re.sub(r'([{,]\s*)([A-Za-z_]\w*)(\s*:)', r'\1"\2"\3', json_str)

    # Разделители тысяч в числовых значениях
    json_str = re.sub(
        r'(:\s*)(-?\d{1,3}(?:,\d{3})+(?:\.\d+)?)(?=\s*[,}\]])',
        lambda m: m.group(1) + m.group(2).replace(',', ''),
        json_str,
    )

    # Python None -> null
    json_str = re.sub(r'\bNone\b', 'null', json_str)

    # Python True/False -> true/false
    json_str = re.sub(r'\bTrue\b', 'true', json_str)
    json_str = re.sub(r'\bFalse\b', 'false', json_str)

    return json_str


def normalize_insight(item: dict) -> Insight:
    """
    Insight из словаря LLM с нормализацией type/severity.

    Raises:
        ValidationError: если структура совсем битая
    """
    item_type = str(item.get('type') or '').lower()
    if item_type not in [t.value for t in InsightType]:
        logger.debug(f"Неизвестный тип инсайта '{item_type}', используем summary")
        item_type = InsightType.SUMMARY.value

    severity = str(item.get('severity') or '').lower()
    if severity not in [s.value for s in Severity]:
        severity = Severity.MEDIUM.value

    return Insight(
        type=InsightType(item_type),
        title=str(item.get('title') or 'Financial Insight'),
        description=str(item.get('description') or 'Analysis of financial data'),
        severity=Severity(severity),
    )


def parse_json_insights(data: dict) -> list[Insight]:
    """Инсайты из уже извлечённого JSON; битые элементы пропускаются"""
    raw_insights = data.get('insights')
    if not isinstance(raw_insights, list):
        return []

    insights = []
    for i, item in enumerate(raw_insights):
        if not isinstance(item, dict):
            logger.warning(f"Инсайт {i} не является объектом, пропускаем")
            continue
        try:
            insights.append(normalize_insight(item))
        except ValidationError as e:
            # Пропускаем битый инсайт, но логируем
            logger.warning(f"Ошибка парсинга инсайта {i}: {e}")

    return insights


def parse_loose_insights(text: str) -> list[Insight]:
    """
    Разбор ответа вида:

        Title: Strong liquidity
        Description: Current ratio is above 2
        Severity: low

    Заголовок начинает новый инсайт. Синонимы: Insight:, Details:, Priority:.
    """
    insights = []
    current: dict[str, Any] = {}

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        if 'Title:' in line or 'Insight:' in line:
            if current.get('title'):
                insights.append(normalize_insight(current))
            current = {'title': _after_colon(line) or 'Financial Insight'}
        elif 'Description:' in line or 'Details:' in line:
            current['description'] = _after_colon(line)
        elif 'Severity:' in line or 'Priority:' in line:
            lowered = line.lower()
            if 'high' in lowered:
                current['severity'] = 'high'
            elif 'medium' in lowered:
                current['severity'] = 'medium'
            else:
                current['severity'] = 'low'

    if current.get('title'):
        insights.append(normalize_insight(current))

    return insights


def _after_colon(line: str) -> str:
    return line.split(':', 1)[1].strip() if ':' in line else ''


def default_insight(record_count: Optional[int] = None) -> Insight:
    """Общий инсайт, когда из ответа ничего не удалось достать"""
    description = DEFAULT_INSIGHT_DESCRIPTION
    if record_count is not None:
        description = f"Successfully analyzed {record_count} financial records"
    return Insight(
        type=InsightType.SUMMARY,
        title=DEFAULT_INSIGHT_TITLE,
        description=description,
        severity=Severity.LOW,
    )


def extract_sheet_type(text: str) -> Optional[str]:
    """sheetType из неразборчивого ответа регуляркой"""
    match = re.search(r'sheetType["\s]*:["\s]*([^",\n}]+)', text, re.IGNORECASE)
    if not match:
        return None
    return match.group(1).strip() or None


def extract_summary_numbers(text: str) -> dict[str, float]:
    """Числовые поля summary из неразборчивого ответа регулярками"""
    summary = {}
    for key in SUMMARY_NUMBER_FIELDS:
        match = re.search(rf'{key}["\s]*:["\s]*(-?[\d,]*\.?\d+)', text, re.IGNORECASE)
        if not match:
            continue
        try:
            summary[key] = float(match.group(1).replace(',', ''))
        except ValueError:
            continue
    return summary
