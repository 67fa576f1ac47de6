"""
Core module — классификация, разбор строк, агрегаты и оркестрация.
"""

from core.taxonomy import classify, classify_category
from core.metrics import build_accounts, calculate_summary
from core.analyzer import parse_financial_report, analyze_file

__all__ = [
    "classify",
    "classify_category",
    "calculate_summary",
    "build_accounts",
    "parse_financial_report",
    "analyze_file",
]
