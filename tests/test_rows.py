import pytest

from core.rows import (
    parse_amount_category_row,
    parse_csv_row,
    parse_csv_rows,
    parse_debit_credit_row,
    parse_grid_rows,
    parse_pdf_line,
    parse_pdf_text,
)
from data.layout import ColumnMap, map_columns
from data.models import DataType, LayoutType, ReportType


DC_COLUMNS = ColumnMap(layout=LayoutType.DEBIT_CREDIT, header_row=0, account=0, debit=1, credit=2)
AC_COLUMNS = ColumnMap(
    layout=LayoutType.AMOUNT_CATEGORY, header_row=0, account=0, amount=1, category=2
)


class TestDebitCreditRow:
    def test_rbc_chequing_debit_is_asset(self):
        record = parse_debit_credit_row(["RBC Chequing", 1500, 0], DC_COLUMNS, ReportType.PROFIT_LOSS)
        assert record.account_name == "RBC Chequing"
        assert record.amount == 1500
        assert record.data_type == DataType.ASSET

    def test_amount_is_debit_minus_credit(self):
        record = parse_debit_credit_row(
            ["Accounts Payable", "$200.00", "1,450.25"], DC_COLUMNS, ReportType.TRIAL_BALANCE
        )
        assert record.amount == pytest.approx(200 - 1450.25)
        assert record.data_type == DataType.LIABILITY

    @pytest.mark.parametrize("report_type", list(ReportType))
    def test_both_sides_zero_or_blank_is_skipped(self, report_type):
        assert parse_debit_credit_row(["Clearing", 0, 0], DC_COLUMNS, report_type) is None
        assert parse_debit_credit_row(["Clearing", None, "-"], DC_COLUMNS, report_type) is None

    @pytest.mark.parametrize("label", ["Total", "TOTAL", "Trial Balance", "", None])
    def test_total_and_empty_labels_are_skipped(self, label):
        assert parse_debit_credit_row([label, 10, 0], DC_COLUMNS, ReportType.TRIAL_BALANCE) is None

    def test_zero_net_kept_only_for_trial_balance(self):
        row = ["Suspense", 500, 500]
        kept = parse_debit_credit_row(row, DC_COLUMNS, ReportType.TRIAL_BALANCE)
        assert kept.amount == 0
        assert kept.data_type == DataType.LIABILITY
        assert parse_debit_credit_row(row, DC_COLUMNS, ReportType.PROFIT_LOSS) is None

    def test_short_rows_are_tolerated(self):
        record = parse_debit_credit_row(["Office Supplies", 75], DC_COLUMNS, ReportType.PROFIT_LOSS)
        assert record.amount == 75
        assert record.data_type == DataType.EXPENSE


class TestAmountCategoryRow:
    def test_category_column_wins_over_label(self):
        record = parse_amount_category_row(
            ["Misc", "2,500", "Current Assets"], AC_COLUMNS, ReportType.BALANCE_SHEET
        )
        assert record.data_type == DataType.ASSET
        assert record.account_category == "Current Assets"
        assert record.amount == 2500

    def test_unmapped_category_falls_back_to_label(self):
        record = parse_amount_category_row(
            ["Consulting Revenue", 900, "Other"], AC_COLUMNS, ReportType.PROFIT_LOSS
        )
        assert record.data_type == DataType.REVENUE
        assert record.account_category == "Other"

    def test_missing_category_falls_back_to_label(self):
        record = parse_amount_category_row(["Office Rent", -1200, None], AC_COLUMNS, ReportType.PROFIT_LOSS)
        assert record.data_type == DataType.EXPENSE
        assert record.account_category is None

    def test_unparseable_amount_and_totals_skipped(self):
        assert parse_amount_category_row(["Rent", "n/a", None], AC_COLUMNS, ReportType.PROFIT_LOSS) is None
        assert parse_amount_category_row(["total", 100, None], AC_COLUMNS, ReportType.PROFIT_LOSS) is None
        assert parse_amount_category_row([None, 100, None], AC_COLUMNS, ReportType.PROFIT_LOSS) is None

    def test_zero_amount_kept_only_for_trial_balance(self):
        row = ["Petty Cash", 0, None]
        kept = parse_amount_category_row(row, AC_COLUMNS, ReportType.TRIAL_BALANCE)
        assert kept is not None and kept.amount == 0
        assert parse_amount_category_row(row, AC_COLUMNS, ReportType.BALANCE_SHEET) is None


def test_parse_grid_rows_quickbooks_export(quickbooks_trial_balance):
    columns = map_columns(quickbooks_trial_balance, 2, LayoutType.DEBIT_CREDIT)
    records = parse_grid_rows(quickbooks_trial_balance, columns, ReportType.TRIAL_BALANCE)

    assert [r.account_name for r in records] == [
        "RBC · Chequing",
        "Accounts Receivable (A/R)",
        "Accounts Payable (A/P)",
        "Owner's Equity",
        "Sales · Consulting Income",
        "Office Expenses",
        "Rent Expense",
    ]
    assert [r.data_type for r in records] == [
        DataType.ASSET,
        DataType.ASSET,
        DataType.LIABILITY,
        DataType.EQUITY,
        DataType.REVENUE,
        DataType.EXPENSE,
        DataType.EXPENSE,
    ]
    for record, row in zip(records, quickbooks_trial_balance[3:]):
        debit = row[1] or 0
        credit = row[2] or 0
        assert record.amount == pytest.approx(debit - credit)


class TestCsvRow:
    def test_account_and_amount_synonyms(self):
        record = parse_csv_row(
            {"description": "Office Supplies", "value": "$1,250.50"}, ReportType.PROFIT_LOSS
        )
        assert record.account_name == "Office Supplies"
        assert record.amount == 1250.5
        assert record.data_type == DataType.EXPENSE

    def test_account_name_header_preferred(self):
        record = parse_csv_row(
            {"account_name": "Product Sales", "name": "ignored", "amount": "10"}, ReportType.PROFIT_LOSS
        )
        assert record.account_name == "Product Sales"
        assert record.data_type == DataType.REVENUE

    def test_optional_fields(self):
        record = parse_csv_row(
            {
                "account": "Rent",
                "amount": "-800",
                "category": "Occupancy",
                "date": "2024-03",
                "comments": "March",
            },
            ReportType.PROFIT_LOSS,
        )
        assert record.account_category == "Occupancy"
        assert record.period == "2024-03"
        assert record.notes == "March"

    @pytest.mark.parametrize("report_type", list(ReportType))
    def test_zero_amount_always_dropped(self, report_type):
        assert parse_csv_row({"account": "Suspense", "amount": "0"}, report_type) is None

    def test_missing_account_or_amount_dropped(self):
        assert parse_csv_row({"account": "", "amount": "5"}, ReportType.PROFIT_LOSS) is None
        assert parse_csv_row({"account": "Rent", "amount": "x"}, ReportType.PROFIT_LOSS) is None

    def test_uses_report_type_buckets(self):
        # Balance-sheet keywords are ignored for profit & loss uploads
        record = parse_csv_row({"account": "Inventory", "amount": "40"}, ReportType.PROFIT_LOSS)
        assert record.data_type == DataType.EXPENSE
        record = parse_csv_row({"account": "Inventory", "amount": "40"}, ReportType.BALANCE_SHEET)
        assert record.data_type == DataType.ASSET


def test_parse_csv_rows_lowercases_headers():
    grid = [["Account", " Amount "], ["Consulting Income", "5000"], ["Office Rent", "-1200"]]
    records = parse_csv_rows(grid, ReportType.PROFIT_LOSS)
    assert [(r.account_name, r.amount, r.data_type) for r in records] == [
        ("Consulting Income", 5000, DataType.REVENUE),
        ("Office Rent", -1200, DataType.EXPENSE),
    ]


class TestPdfLine:
    def test_extracts_first_currency_token(self):
        [record] = parse_pdf_line("Total Revenue $12,500.00 $11,000.00", ReportType.PROFIT_LOSS)
        assert record.amount == 12500
        assert record.data_type == DataType.REVENUE

    def test_account_name_is_first_fifty_characters(self):
        line = "Professional fees and other administrative expenses for the period 4,000"
        [record] = parse_pdf_line(line, ReportType.PROFIT_LOSS)
        assert record.account_name == line[:50].strip()
        assert len(record.account_name) <= 50

    def test_lines_without_keywords_or_amounts_are_ignored(self):
        assert parse_pdf_line("Page 1 of 3", ReportType.PROFIT_LOSS) == []
        assert parse_pdf_line("Revenue", ReportType.PROFIT_LOSS) == []
        assert parse_pdf_line("   ", ReportType.PROFIT_LOSS) == []

    def test_lone_comma_is_not_an_amount(self):
        [record] = parse_pdf_line("Revenue, net 5,000", ReportType.PROFIT_LOSS)
        assert record.amount == 5000

    def test_every_matching_bucket_yields_a_record(self):
        records = parse_pdf_text("Cost of Sales 500", ReportType.PROFIT_LOSS)
        assert [(r.account_name, r.amount, r.data_type) for r in records] == [
            ("Cost of Sales 500", 500, DataType.REVENUE),
            ("Cost of Sales 500", 500, DataType.EXPENSE),
        ]

    @pytest.mark.parametrize("report_type", [ReportType.AR_AGING, ReportType.AP_AGING])
    def test_aging_reports_use_profit_and_loss_patterns(self, report_type):
        assert parse_pdf_text("Accounts Receivable 8,750.00", report_type) == []
        assert parse_pdf_text("Accounts Payable 2,100.00", report_type) == []

        [record] = parse_pdf_text("Consulting Revenue 1,000", report_type)
        assert record.data_type == DataType.REVENUE


def test_pdf_profit_and_loss_fixture(pnl_statement_text):
    records = parse_pdf_text(pnl_statement_text, ReportType.PROFIT_LOSS)

    by_type = {}
    for record in records:
        by_type.setdefault(record.data_type, []).append(record.amount)

    # "Cost of Sales" matches both buckets and is recorded twice
    assert sorted(by_type[DataType.REVENUE]) == [2000, 12300.5, 84500]
    assert sorted(by_type[DataType.EXPENSE]) == [2000, 4100, 14400, 38000]


def test_pdf_balance_sheet_fixture(balance_sheet_text):
    records = parse_pdf_text(balance_sheet_text, ReportType.BALANCE_SHEET)
    types = {r.account_name: r.data_type for r in records}

    assert types["Cash and Equivalents $25,400.00"] == DataType.ASSET
    assert types["Accounts Payable 6,300.00"] == DataType.LIABILITY
    assert types["Retained Earnings 24,850.00"] == DataType.EQUITY
    assert len(records) == 6
