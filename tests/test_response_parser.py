import pytest

from data.models import InsightType, Severity
from llm.response_parser import (
    JSONParseError,
    default_insight,
    extract_json,
    extract_sheet_type,
    extract_summary_numbers,
    parse_json_insights,
    parse_loose_insights,
)


def test_extract_json_direct():
    assert extract_json('{"sheetType": "pnl"}') == {"sheetType": "pnl"}


def test_extract_json_from_code_block():
    text = 'Here you go:\n```json\n{"sheetType": "trial_balance", "insights": []}\n```\nThanks'
    assert extract_json(text)["sheetType"] == "trial_balance"


def test_extract_json_repairs_common_mistakes():
    text = """Result: {
      sheetType: 'balance_sheet',
      "summary": {"totalAssets": 103,559.49, "flag": None,},
    }"""
    data = extract_json(text)
    assert data["sheetType"] == "balance_sheet"
    assert data["summary"]["totalAssets"] == 103559.49
    assert data["summary"]["flag"] is None


@pytest.mark.parametrize("text", ["", "   ", "no json here", "[1, 2, 3]"])
def test_extract_json_failures(text):
    with pytest.raises(JSONParseError):
        extract_json(text)


def test_parse_json_insights_normalizes_type_and_severity():
    insights = parse_json_insights(
        {
            "insights": [
                {"type": "ANOMALY", "title": "High rent", "description": "Rent is 40%", "severity": "High"},
                {"type": "weird", "title": "Other", "severity": "critical"},
                "not an object",
            ]
        }
    )

    assert len(insights) == 2
    assert insights[0].type == InsightType.ANOMALY
    assert insights[0].severity == Severity.HIGH
    assert insights[1].type == InsightType.SUMMARY
    assert insights[1].severity == Severity.MEDIUM
    assert insights[1].description == "Analysis of financial data"


def test_parse_json_insights_without_list():
    assert parse_json_insights({"insights": "none"}) == []
    assert parse_json_insights({}) == []


def test_parse_loose_insights():
    text = """
    Here is my analysis.
    Title: Strong liquidity
    Description: Current ratio is above 2
    Severity: low
    Insight: Rent is high
    Details: Rent takes 40% of revenue
    Priority: HIGH
    """
    insights = parse_loose_insights(text)

    assert [i.title for i in insights] == ["Strong liquidity", "Rent is high"]
    assert insights[0].description == "Current ratio is above 2"
    assert insights[0].severity == Severity.LOW
    assert insights[1].severity == Severity.HIGH
    assert insights[1].description == "Rent takes 40% of revenue"


def test_parse_loose_insights_nothing_found():
    assert parse_loose_insights("Everything looks fine.") == []


def test_default_insight():
    insight = default_insight(12)
    assert insight.type == InsightType.SUMMARY
    assert insight.severity == Severity.LOW
    assert "12" in insight.description


def test_regex_recovery_of_sheet_type_and_numbers():
    text = 'sheetType: "trial_balance"\n totalAssets: 1,250.50, netIncome: -300 broken {'
    assert extract_sheet_type(text) == "trial_balance"
    assert extract_summary_numbers(text) == {"totalAssets": 1250.5, "netIncome": -300.0}
