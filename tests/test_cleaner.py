import math

import pytest

from data.cleaner import cell_text, is_numeric_cell, normalize_header, parse_amount, row_text


@pytest.mark.parametrize(
    "value, expected",
    [
        (1500, 1500.0),
        (-12.5, -12.5),
        ("5000", 5000.0),
        ("-1200", -1200.0),
        ("$1,200.50", 1200.5),
        (" 3,000 ", 3000.0),
        ("(450.00)", -450.0),
        ("0", 0.0),
        ("—", None),
        ("n/a", None),
        ("", None),
        ("abc", None),
        ("12abc", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


def test_parse_amount_results_are_finite():
    for value in ("1e400", "999999999999", "-0.0"):
        result = parse_amount(value)
        assert result is None or math.isfinite(result)


def test_is_numeric_cell():
    # Native numbers count even when zero; strings only when non-zero
    assert is_numeric_cell(0)
    assert is_numeric_cell(12.5)
    assert is_numeric_cell("$1,000")
    assert not is_numeric_cell("0")
    assert not is_numeric_cell("Revenue")
    assert not is_numeric_cell(None)
    assert not is_numeric_cell(False)


def test_text_helpers():
    assert cell_text(None) == ""
    assert cell_text(1500.0) == "1500"
    assert cell_text("  Rent  ") == "Rent"
    assert normalize_header("  Account Name ") == "account name"
    assert row_text(["Account", None, "DEBIT", 10]) == "account  debit 10"
