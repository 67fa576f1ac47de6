"""
LLM клиенты для AI-обогащения.

- LLMClient — Protocol, который ждёт движок (OpenAI, локальная модель, фейк в тестах)
- OpenAIClient — реализация поверх openai SDK
- get_llm_client() — фабрика; без API-ключа возвращает None

Клиент не синглтон: вызывающий код создаёт его и передаёт в движок
явно. Без клиента движок работает полностью детерминированно.

Использование:
    client = get_llm_client()
    result = parse_financial_report(content, "xlsx", ReportType.TRIAL_BALANCE, llm_client=client)
"""

from typing import Optional, Protocol, runtime_checkable
import time
import logging

import openai
from openai import OpenAI

from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


# Временные сбои: сеть, таймаут, лимиты, 5xx. Остальное (ключ, запрос) не повторяем
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

Messages = list[dict]


@runtime_checkable
class LLMClient(Protocol):
    """
    Интерфейс LLM клиента.

    temperature / max_tokens = None — значения из настроек клиента.
    """

    def complete(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Текст ответа модели ('' если сообщение пустое)"""
        ...

    def complete_with_repair(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """То же, но с одним раундом починки невалидного JSON"""
        ...


class OpenAIClient:
    """
    Клиент для OpenAI-совместимых API (custom base_url: Azure, прокси и др.).

    Повторы со ступенчатой задержкой 1, 2, 4... секунды только для
    временных сбоев. Встроенные повторы SDK отключены, таймаут
    транспорта берётся из настроек.
    """

    def __init__(self, config: Settings = default_settings):
        self.config = config
        self.model = config.openai_model
        self.max_retries = config.llm_max_retries
        self.client = OpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout=config.llm_timeout_seconds,
            max_retries=0,
        )

        logger.info(f"LLM клиент: model={self.model}, base_url={config.openai_base_url}")

    def complete(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        if temperature is None:
            temperature = self.config.llm_temperature
        if max_tokens is None:
            max_tokens = self.config.llm_max_tokens

        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                return self._request(messages, temperature, max_tokens)
            except RETRYABLE_ERRORS as e:
                if attempt == attempts:
                    logger.error(f"OpenAI: {attempts} попыток без успеха, последняя ошибка: {e}")
                    raise

                delay = 2 ** (attempt - 1)
                logger.warning(f"OpenAI: временная ошибка ({e}), повтор {attempt}/{self.max_retries} через {delay}с")
                time.sleep(delay)

        # Недостижимо: последний сбой пробрасывается в цикле
        raise RuntimeError("OpenAI: retry loop exited without a response")

    def _request(self, messages: Messages, temperature: float, max_tokens: int) -> str:
        started = time.monotonic()

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = response.choices[0].message.content or ""
        logger.info(f"OpenAI ответ за {time.monotonic() - started:.1f}с, {len(content)} символов")
        return content

    def complete_with_repair(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Если в ответе нет разбираемого JSON, модель получает свой ответ
        обратно с просьбой выдать только JSON. Второй ответ возвращается
        как есть: дальше его разбирает многоуровневый парсер.
        """
        from llm.prompts import REPAIR_PROMPT
        from llm.response_parser import JSONParseError, extract_json

        response = self.complete(messages, temperature, max_tokens)
        if not response.strip():
            return response

        try:
            extract_json(response)
            return response
        except JSONParseError:
            logger.warning("В ответе LLM нет валидного JSON, запрашиваем исправление")

        repair_messages = messages + [
            {"role": "assistant", "content": response},
            {"role": "user", "content": REPAIR_PROMPT},
        ]
        return self.complete(repair_messages, temperature=0.0, max_tokens=max_tokens)


def get_llm_client(config: Settings = default_settings) -> Optional[LLMClient]:
    """
    Новый клиент на каждый вызов.

    Returns:
        OpenAIClient или None, если API-ключ не задан (AI-обогащение выключено)
    """
    if not config.openai_api_key:
        logger.info("OPENAI_API_KEY не задан, AI-обогащение отключено")
        return None

    return OpenAIClient(config)
