# ruff: noqa: E501
import textwrap
from decimal import Decimal

import pytest

from subscription_tracker import DetectionSettings, Transaction, load_catalog, parse_statement_text
from subscription_tracker.text_parser import (
    generic_amount_transactions,
    has_admin_keyword,
    known_merchant_transactions,
    line_anchored_transactions,
)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


@pytest.fixture
def settings() -> DetectionSettings:
    return DetectionSettings()


@pytest.fixture
def catalog():
    return load_catalog()


def test_line_anchored_extracts_charge_and_ignores_balance(settings, catalog):
    text = _dedent(
        """
        ACME CREDIT UNION
        01/15 NETFLIX.COM 866-579-7172 CA 15.99 1,234.56
        02/03 POS Debit - Debit Card 1234 SPOTIFY USA 10.99
        01/31 Ending Balance 1,218.57
        """
    )

    rows = line_anchored_transactions(text, settings, catalog)

    assert rows == [
        Transaction(date="01/15", merchant="NETFLIX.COM", amount=Decimal("15.99")),
        Transaction(date="02/03", merchant="SPOTIFY USA", amount=Decimal("10.99")),
    ]


def test_line_anchored_accepts_dash_dates(settings, catalog):
    text = _dedent(
        """
        01-15 SPOTIFY USA 10.99
        02-15 SPOTIFY USA 10.99 1,189.01
        """
    )

    rows = line_anchored_transactions(text, settings, catalog)

    assert rows == [
        Transaction(date="01-15", merchant="SPOTIFY USA", amount=Decimal("10.99")),
        Transaction(date="02-15", merchant="SPOTIFY USA", amount=Decimal("10.99")),
    ]


def test_admin_keywords_are_case_insensitive():
    assert has_admin_keyword("Ending BALANCE")
    assert has_admin_keyword("Page 2 of 4")
    assert has_admin_keyword("Member since 2019")
    assert not has_admin_keyword("NETFLIX.COM")


def test_known_merchant_skips_implausible_amounts(settings, catalog):
    text = _dedent(
        """
        Netflix gift card bulk order 1000.00
        01/20 Netflix.com 15.99
        02/20 Netflix.com 15.99
        """
    )

    rows = known_merchant_transactions(text, settings, catalog)

    # One transaction per service, first plausible amount, date from its line.
    assert rows == [Transaction(date="01/20", merchant="Netflix", amount=Decimal("15.99"))]


def test_known_merchant_uses_regex_patterns(settings, catalog):
    text = "DISNEY PLUS 800-123-4567 13.99\nAPPLE.COM/BILL 2.99\n"

    rows = known_merchant_transactions(text, settings, catalog)

    by_name = {t.merchant: t.amount for t in rows}
    assert by_name["Apple"] == Decimal("2.99")
    assert "Disney+" not in by_name  # digits between the name and the amount


def test_known_merchant_range_is_configurable(catalog):
    text = "Spotify USA 250.00\n"
    assert known_merchant_transactions(text, DetectionSettings(), catalog)
    assert not known_merchant_transactions(
        text, DetectionSettings(known_amount_max=Decimal("200")), catalog
    )


def test_generic_requires_trailing_number(settings, catalog):
    text = _dedent(
        """
        01/15 SPOTIFY USA 10.99 1,200.00
        COFFEE SHOP 4.50
        Total Fees 12.00 0.00
        AB 3.00 4
        """
    )

    rows = generic_amount_transactions(text, settings, catalog)

    assert rows == [Transaction(date="", merchant="SPOTIFY USA", amount=Decimal("10.99"))]


def test_generic_amount_cap(catalog):
    text = "WIRE TRANSFER 6000.00 1\nGYM CLUB 45.00 1\n"
    rows = generic_amount_transactions(text, DetectionSettings(), catalog)
    assert [t.merchant for t in rows] == ["GYM CLUB"]


def test_parse_statement_text_concatenates_strategies_in_order():
    text = "01/15 SPOTIFY USA 10.99 1,200.00\n"

    rows = parse_statement_text(text)

    assert rows == [
        Transaction(date="01/15", merchant="SPOTIFY USA", amount=Decimal("10.99")),
        Transaction(date="01/15", merchant="Spotify", amount=Decimal("10.99")),
        Transaction(date="", merchant="SPOTIFY USA", amount=Decimal("10.99")),
    ]


def test_custom_strategy_list(settings, catalog):
    text = "01/15 SPOTIFY USA 10.99 1,200.00\n"
    rows = parse_statement_text(text, strategies=[known_merchant_transactions])
    assert [t.merchant for t in rows] == ["Spotify"]


def test_no_recognizable_rows():
    assert parse_statement_text("") == []
    assert parse_statement_text("Statement period January 2024\nPage 1 of 3\n") == []
