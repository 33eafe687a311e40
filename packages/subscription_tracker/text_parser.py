"""Best-effort transaction recovery from free-form statement text.

PDF text extraction loses column alignment, so no single pattern recovers
every row. Independent strategies run in order over the same text and their
results are concatenated:

- ``line_anchored_transactions``: ``<date> <description> <amount> [<balance>]``
  lines.
- ``known_merchant_transactions``: recognizable service names paired with a
  nearby amount.
- ``generic_amount_transactions``: any short description directly followed by
  a two-decimal amount.

Overlap is expected and duplicates are kept. Grouping and the amount checks in
the recurrence detector absorb them, while a row missed here cannot be
recovered later.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from decimal import Decimal

from .catalog import ServiceCatalog, load_catalog
from .logging_setup import get_logger
from .merchants import clean_merchant
from .models import Transaction
from .normalizers import parse_amount
from .settings import DetectionSettings

_logger = get_logger("subscription_tracker.text_parser")

type Strategy = Callable[[str, DetectionSettings, ServiceCatalog], list[Transaction]]

# Lines mentioning any of these are statement furniture, not purchases
ADMIN_KEYWORDS: tuple[str, ...] = (
    "balance",
    "statement",
    "page",
    "account",
    "routing",
    "credit union",
    "total",
    "member",
)

_AMOUNT = r"-?\$?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}"

_LINE_RE = re.compile(
    r"^\s*(?P<date>\d{1,2}-\d{1,2}(?:-\d{2,4})?|\d{1,2}/\d{1,2}(?:/\d{1,4})*)"
    r"\s+(?P<desc>.+?)"
    rf"\s+(?P<amount>{_AMOUNT})"
    rf"(?:\s+(?P<balance>{_AMOUNT}))?\s*$"
)
_LINE_DATE_RE = re.compile(r"^\s*(\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?)\b")
# Gap allowed between a service name and its amount: no digits, no newline
_SERVICE_GAP = r"[^\d\n]{0,60}?"
_GENERIC_RE = re.compile(
    r"(?P<desc>[A-Za-z][A-Za-z0-9&'*.#/-]*(?:[ \t]+[A-Za-z0-9&'*.#/-]+){0,5}?)"
    rf"[ \t]+(?P<amount>{_AMOUNT})"
    r"(?=[ \t]+\d)"
)


def has_admin_keyword(text: str) -> bool:
    low = text.lower()
    return any(k in low for k in ADMIN_KEYWORDS)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def line_anchored_transactions(
    text: str, settings: DetectionSettings, catalog: ServiceCatalog
) -> list[Transaction]:
    """Match ``<date> <description> <amount> [<balance>]`` lines.

    The first trailing amount is the charge; an optional second one is the
    running balance and is ignored.
    """

    out: list[Transaction] = []
    for line in text.splitlines():
        if has_admin_keyword(line):
            continue
        m = _LINE_RE.match(line)
        if not m:
            continue
        amount = parse_amount(m.group("amount"))
        merchant = clean_merchant(m.group("desc"))
        if amount > 0 and merchant:
            out.append(Transaction(date=m.group("date"), merchant=merchant, amount=amount))
    return out


def _line_bounds(text: str, pos: int) -> tuple[int, int]:
    start = text.rfind("\n", 0, pos) + 1
    end = text.find("\n", pos)
    return start, (len(text) if end == -1 else end)


def known_merchant_transactions(
    text: str, settings: DetectionSettings, catalog: ServiceCatalog
) -> list[Transaction]:
    """Pair each known service name with the first plausible nearby amount.

    At most one transaction per service is produced. Amounts outside
    ``[known_amount_min, known_amount_max]`` are skipped and the scan moves on
    to the next occurrence. The date token at the start of the matching line
    is carried when present.
    """

    out: list[Transaction] = []
    for service in catalog.services:
        rx = re.compile(
            rf"(?:{service.pattern_source()}){_SERVICE_GAP}(?P<amount>{_AMOUNT})",
            re.IGNORECASE,
        )
        for m in rx.finditer(text):
            amount = parse_amount(m.group("amount"))
            if not settings.known_amount_min <= amount <= settings.known_amount_max:
                continue
            start, end = _line_bounds(text, m.start())
            dm = _LINE_DATE_RE.match(text[start:end])
            out.append(
                Transaction(
                    date=dm.group(1) if dm else "",
                    merchant=service.display_name,
                    amount=amount,
                )
            )
            break
    return out


def generic_amount_transactions(
    text: str, settings: DetectionSettings, catalog: ServiceCatalog
) -> list[Transaction]:
    """Loose ``<short description> <amount>`` fallback.

    The amount must be followed by whitespace and another digit (the next
    date or a balance), which keeps the match from ending mid-number.
    """

    out: list[Transaction] = []
    for line in text.splitlines():
        for m in _GENERIC_RE.finditer(line):
            desc = m.group("desc")
            if has_admin_keyword(desc):
                continue
            amount = parse_amount(m.group("amount"))
            if not Decimal(0) < amount <= settings.generic_amount_max:
                continue
            merchant = clean_merchant(desc)
            if len(merchant) < 3 or not any(c.isalpha() for c in merchant):
                continue
            out.append(Transaction(date="", merchant=merchant, amount=amount))
    return out


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    line_anchored_transactions,
    known_merchant_transactions,
    generic_amount_transactions,
)


def parse_statement_text(
    text: str,
    *,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    settings: DetectionSettings | None = None,
    catalog: ServiceCatalog | None = None,
) -> list[Transaction]:
    """Run every strategy over ``text`` and concatenate their results."""

    s = settings or DetectionSettings()
    cat = catalog or load_catalog()
    transactions: list[Transaction] = []
    for strategy in strategies:
        found = strategy(text, s, cat)
        _logger.debug("text:strategy name=%s found=%d", strategy.__name__, len(found))
        transactions.extend(found)
    return transactions


__all__ = [
    "ADMIN_KEYWORDS",
    "DEFAULT_STRATEGIES",
    "Strategy",
    "generic_amount_transactions",
    "has_admin_keyword",
    "known_merchant_transactions",
    "line_anchored_transactions",
    "parse_statement_text",
]
