"""
Конфигурация движка разбора финансовых документов.
Загружает настройки из переменных окружения / .env файла.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Настройки приложения"""

    # === Приложение ===
    app_name: str = "LedgerLens"
    debug: bool = False

    # === LLM (OpenAI-совместимые API) ===
    # Без ключа AI-обогащение просто не выполняется
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    # === LLM retry ===
    llm_max_retries: int = 2
    llm_timeout_seconds: int = 60
    llm_temperature: float = 0.1
    llm_max_tokens: int = 3000
    ai_enrichment_enabled: bool = True
    ai_preview_rows: int = 5     # Строк сырых данных в промпте

    # === Эвристики разбора ===
    sheet_scan_rows: int = 10    # Сколько строк листа смотреть при выборе листа
    min_sheet_score: int = 5     # Ниже — лист не считается финансовым
    header_scan_rows: int = 5    # Где искать строку заголовков
    pdf_account_name_length: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Глобальный экземпляр настроек
# Загружается при импорте модуля
settings = Settings()
