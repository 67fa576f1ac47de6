"""
AI-обогащение: тип листа, инсайты и свободное summary от LLM.

Обогащение всегда необязательно. Любая ошибка (сеть, пустой ответ,
битый JSON) не влияет на детерминированный результат: enrich()
возвращает None, и AI-поля просто отсутствуют.
"""

from typing import Optional
import logging

import pandas as pd

from config import settings
from data.cleaner import Grid, cell_text
from data.models import AIEnrichment, ParsedFinancialRecord, ReportType
from llm.client import LLMClient
from llm.prompts import ANALYSIS_PROMPT, SYSTEM_PROMPT
from llm.response_parser import (
    JSONParseError,
    UNKNOWN_SHEET_TYPE,
    default_insight,
    extract_json,
    extract_sheet_type,
    extract_summary_numbers,
    parse_json_insights,
    parse_loose_insights,
)

logger = logging.getLogger(__name__)


class AIEnrichmentFailure(Exception):
    """Обогащение не удалось. Наружу не выходит никогда."""
    pass


def build_analysis_prompt(
    preview: Grid,
    records: list[ParsedFinancialRecord],
    report_type: ReportType,
) -> str:
    """
    Промпт: заголовок + первые строки сырых данных и все разобранные записи.

    Args:
        preview: строки начиная с заголовка
        records: все принятые записи
        report_type: заявленный тип отчёта
    """
    preview_rows = settings.ai_preview_rows
    records_text = "\n".join(
        f"{r.account_name}: ${r.amount} ({r.data_type.value})" for r in records
    )

    return ANALYSIS_PROMPT.format(
        report_type=report_type.value,
        preview_rows=preview_rows,
        table_markdown=_preview_to_markdown(preview[:preview_rows + 1]),
        record_count=len(records),
        records_text=records_text or "(no records)",
    )


def _preview_to_markdown(preview: Grid) -> str:
    """Конвертация превью в markdown таблицу для LLM."""
    if not preview:
        return "(empty)"

    width = max(len(row) for row in preview)
    rows = [[cell_text(cell) for cell in row] + [""] * (width - len(row)) for row in preview]

    header = [value or f"col{i + 1}" for i, value in enumerate(rows[0])]
    df = pd.DataFrame(rows[1:], columns=header)
    return df.to_markdown(index=False)


def enrich(
    client: LLMClient,
    preview: Grid,
    records: list[ParsedFinancialRecord],
    report_type: ReportType,
) -> Optional[AIEnrichment]:
    """
    Запрашивает у LLM тип листа, инсайты и summary.

    Returns:
        AIEnrichment или None, если обогащение не удалось
    """
    try:
        return _request_enrichment(client, preview, records, report_type)
    except AIEnrichmentFailure as e:
        logger.warning(f"AI-обогащение пропущено: {e}")
        return None
    except Exception as e:
        logger.warning(f"AI-обогащение пропущено из-за ошибки клиента: {e}")
        return None


def _request_enrichment(
    client: LLMClient,
    preview: Grid,
    records: list[ParsedFinancialRecord],
    report_type: ReportType,
) -> AIEnrichment:
    prompt = build_analysis_prompt(preview, records, report_type)

    logger.debug("Запрос к LLM для AI-обогащения")
    raw_response = client.complete_with_repair(
        [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )

    if not raw_response or not raw_response.strip():
        raise AIEnrichmentFailure("LLM вернул пустой ответ")

    enrichment = parse_enrichment(raw_response, len(records))
    logger.info(
        f"AI-обогащение: тип листа {enrichment.sheet_type!r}, инсайтов {len(enrichment.insights)}"
    )
    return enrichment


def parse_enrichment(raw_response: str, record_count: Optional[int] = None) -> AIEnrichment:
    """
    Многоуровневый разбор ответа.

    1. Строгий JSON
    2. Строки Title:/Description:/Severity: + регулярки для sheetType и summary
    3. Общий инсайт по умолчанию
    """
    try:
        data = extract_json(raw_response)
    except JSONParseError as e:
        preview = raw_response[:300] + "..." if len(raw_response) > 300 else raw_response
        logger.info(f"{e}, переходим к свободному разбору. Ответ: {preview}")
        data = None

    if data is not None:
        insights = parse_json_insights(data) or [default_insight(record_count)]
        summary = data.get('summary') if isinstance(data.get('summary'), dict) else None
        key_metrics = data.get('keyMetrics')
        if isinstance(key_metrics, dict):
            summary = {**(summary or {}), 'keyMetrics': key_metrics}
        sheet_type = data.get('sheetType')
        return AIEnrichment(
            sheet_type=str(sheet_type) if sheet_type else UNKNOWN_SHEET_TYPE,
            insights=insights,
            summary=summary,
        )

    insights = parse_loose_insights(raw_response) or [default_insight(record_count)]
    return AIEnrichment(
        sheet_type=extract_sheet_type(raw_response) or UNKNOWN_SHEET_TYPE,
        insights=insights,
        summary=extract_summary_numbers(raw_response) or None,
    )
