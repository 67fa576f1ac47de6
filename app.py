"""
LedgerLens — разбор финансовых документов в типизированные записи.

Точка входа командной строки.

Использование:
    python app.py trial_balance.xlsx --report-type TRIAL_BALANCE
    python app.py pnl.csv --report-type PROFIT_LOSS --no-ai

Печатает ParsingResult в JSON. Код возврата 1, если разбор не удался.
"""

import argparse
import logging
import sys

# Настройка логирования
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    datefmt='%H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)

# Уменьшаем шум от библиотек
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("pdfminer").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    from data.models import ReportType

    parser = argparse.ArgumentParser(
        prog="ledgerlens",
        description="Parse a financial document (CSV, XLSX, XLS, PDF) into typed records.",
    )
    parser.add_argument("file", help="path to the document")
    parser.add_argument(
        "--report-type",
        required=True,
        choices=[t.value for t in ReportType],
        help="declared financial statement type",
    )
    parser.add_argument("--no-ai", action="store_true", help="skip AI enrichment")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent")
    return parser


def main(argv=None) -> int:
    """Запуск разбора."""
    from config import settings
    from core.analyzer import analyze_file
    from llm import get_llm_client

    args = build_arg_parser().parse_args(argv)

    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    logger.info(f"Запуск {settings.app_name}: {args.file}")

    client = None if args.no_ai else get_llm_client()
    result = analyze_file(args.file, args.report_type, llm_client=client)

    print(result.to_json(indent=args.indent))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
