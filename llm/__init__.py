"""
LLM module — необязательное AI-обогащение результата разбора.

AI-агностичная архитектура:
- LLMClient: абстрактный интерфейс
- get_llm_client(): фабрика для получения клиента
- OpenAIClient: реализация для OpenAI-совместимых API

Использование:
    from llm import get_llm_client, enrich
    client = get_llm_client()
    enrichment = enrich(client, preview, records, report_type)
"""

from llm.client import LLMClient, OpenAIClient, get_llm_client
from llm.prompts import SYSTEM_PROMPT, ANALYSIS_PROMPT, REPAIR_PROMPT
from llm.response_parser import (
    extract_json,
    parse_json_insights,
    parse_loose_insights,
    default_insight,
    JSONParseError,
)
from llm.enrichment import enrich, parse_enrichment, build_analysis_prompt, AIEnrichmentFailure

__all__ = [
    # Client
    "LLMClient",
    "OpenAIClient",
    "get_llm_client",
    # Prompts
    "SYSTEM_PROMPT",
    "ANALYSIS_PROMPT",
    "REPAIR_PROMPT",
    # Parser
    "extract_json",
    "parse_json_insights",
    "parse_loose_insights",
    "default_insight",
    "JSONParseError",
    # Enrichment
    "enrich",
    "parse_enrichment",
    "build_analysis_prompt",
    "AIEnrichmentFailure",
]
