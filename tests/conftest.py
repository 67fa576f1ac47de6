import io
import os
import sys
from pathlib import Path

import pytest
from openpyxl import Workbook


def pytest_sessionstart(session):
    # Ensure project root is on sys.path so `core`, `data` and `llm` resolve
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeLLMClient:
    """In-memory LLM client: returns a canned response or raises."""

    def __init__(self, response: str = "", error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    def complete(self, messages, temperature=None, max_tokens=None):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.response

    def complete_with_repair(self, messages, temperature=None, max_tokens=None):
        return self.complete(messages, temperature, max_tokens)


def grid_reader(sheets):
    """Workbook reader stub returning prepared grids."""
    def read(content, file_type):
        return sheets
    return read


def make_xlsx(sheets: dict) -> bytes:
    """Build an .xlsx in memory: {sheet name: list of rows}."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(title=name)
        for row in rows:
            worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def pnl_statement_text():
    return (FIXTURES_DIR / "pnl_statement.txt").read_text(encoding="utf-8")


@pytest.fixture
def balance_sheet_text():
    return (FIXTURES_DIR / "balance_sheet.txt").read_text(encoding="utf-8")


@pytest.fixture
def quickbooks_trial_balance():
    return [
        ["Northwind Consulting Ltd.", None, None],
        ["Trial Balance", None, None],
        [None, "Debit", "Credit"],
        ["RBC · Chequing", 15230.45, None],
        ["Accounts Receivable (A/R)", 4200, None],
        ["Accounts Payable (A/P)", None, 3150.2],
        ["Owner's Equity", None, 10000],
        ["Sales · Consulting Income", None, 28400],
        ["Office Expenses", 1820.75, None],
        ["Rent Expense", 9600, None],
        ["Uncategorized Clearing", 0, 0],
        ["TOTAL", 30851.2, 41550.2],
    ]
