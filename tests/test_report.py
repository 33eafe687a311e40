# ruff: noqa: E501
import json
import textwrap
from decimal import Decimal

from subscription_tracker import StatementSource, analyze_statements
from subscription_tracker.report import build_report, render_text

_CSV = """\
Date,Description,Amount
01/01/2024,SPOTIFY USA,10.99
01/31/2024,SPOTIFY USA,10.99
03/01/2024,SPOTIFY USA,10.99
01/03/2024,FARMERS MARKET,23.10
01/10/2024,GREEN LAWN CARE,45.00
02/10/2024,GREEN LAWN CARE,45.00
"""


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def _result():
    return analyze_statements([StatementSource(name="jan.csv", text=_CSV, kind="csv")])


def test_build_report_resolves_cancel_links_and_rounds():
    report = build_report(_result())

    assert report.transaction_count == 6
    assert report.subscription_count == 2
    assert report.total_annual_cost == Decimal("671.88")
    assert report.monthly_cost == Decimal("55.99")

    lawn, spotify = report.items
    assert lawn.merchant == "GREEN LAWN CARE"
    assert lawn.cancel_url is None
    assert lawn.search_query == "GREEN LAWN CARE cancel subscription"
    assert lawn.confidence_pct == 90

    assert spotify.cancel_url == "https://www.spotify.com/account/subscription/"
    assert spotify.confidence_pct == 95
    assert spotify.charges == 3
    assert spotify.period_label == "mo"


def test_render_text_snapshot():
    text = render_text(build_report(_result()))

    expected = _dedent(
        """
        Annual subscription cost: $671.88 ($55.99/month)
        2 subscriptions detected from 6 transactions

        GREEN LAWN CARE  $45.00/mo  $540.00/year
          monthly - 2 charges detected - confidence 90%
          Search "GREEN LAWN CARE cancel subscription" to find the cancellation page

        SPOTIFY USA  $10.99/mo  $131.88/year
          monthly - 3 charges detected - confidence 95%
          Cancel: https://www.spotify.com/account/subscription/
          Tip: Click "Change plan" then "Cancel Premium"
        """
    )
    assert text == expected


def test_report_json_keeps_exact_money():
    payload = json.loads(build_report(_result()).model_dump_json())

    assert payload["total_annual_cost"] == "671.88"
    assert [i["annual_cost"] for i in payload["items"]] == ["540.00", "131.88"]
    assert payload["items"][1]["frequency"] == "monthly"


def test_empty_report():
    result = analyze_statements([StatementSource(name="empty.csv", text="", kind="csv")])
    report = build_report(result)

    assert not result.has_transactions
    assert report.items == ()
    assert render_text(report).splitlines() == [
        "Annual subscription cost: $0.00 ($0.00/month)",
        "0 subscriptions detected from 0 transactions",
    ]
