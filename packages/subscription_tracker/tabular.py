"""Universal parser for delimited bank/credit-card exports.

Bank CSV layouts differ in column names and order, so instead of one adapter
per provider this parser infers the date, merchant and amount columns:

1. by header name (case-insensitive substring match), then
2. for roles still unresolved, by sniffing the content of the first data rows.

Rows missing a usable amount or merchant are skipped individually. Nothing in
here raises for malformed data; an input with no recognizable structure simply
yields no transactions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .logging_setup import get_logger
from .models import Transaction
from .normalizers import is_date, is_money, parse_amount
from .settings import DetectionSettings

_logger = get_logger("subscription_tracker.tabular")

# Header keywords per role, checked as case-insensitive substrings
DATE_HEADER_KEYWORDS: tuple[str, ...] = ("date", "posted")
MERCHANT_HEADER_KEYWORDS: tuple[str, ...] = ("description", "merchant", "payee", "memo")
AMOUNT_HEADER_KEYWORDS: tuple[str, ...] = ("amount", "debit")

_DEFAULT_SETTINGS = DetectionSettings()


@dataclass(frozen=True, slots=True)
class ColumnRoles:
    """Column index per role; ``None`` when the role could not be resolved."""

    date: int | None = None
    merchant: int | None = None
    amount: int | None = None

    @property
    def complete(self) -> bool:
        return None not in (self.date, self.merchant, self.amount)


def split_fields(line: str) -> list[str]:
    """Split one line on commas, honoring double-quoted fields.

    A ``"`` toggles the in-quotes state and is dropped; commas inside quotes
    are literal. Escaped quotes inside quoted fields are not supported.
    Fields are whitespace-trimmed.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def _match_header(header: Sequence[str]) -> tuple[int | None, int | None, int | None]:
    date_col: int | None = None
    merchant_col: int | None = None
    amount_col: int | None = None
    for idx, raw in enumerate(header):
        h = raw.lower()
        if date_col is None and any(k in h for k in DATE_HEADER_KEYWORDS):
            date_col = idx
        # Merchant: the last matching header wins (Memo after Description).
        if any(k in h for k in MERCHANT_HEADER_KEYWORDS):
            merchant_col = idx
        if amount_col is None and any(k in h for k in AMOUNT_HEADER_KEYWORDS):
            amount_col = idx
    return date_col, merchant_col, amount_col


def resolve_columns(
    header: Sequence[str],
    data_rows: Sequence[Sequence[str]],
    *,
    settings: DetectionSettings | None = None,
) -> ColumnRoles:
    """Resolve the date/merchant/amount columns for a parsed table.

    Header names decide first. Content sniffing over the first
    ``settings.sniff_rows`` data rows fills only the roles left unresolved and
    never reassigns a column that already has a role.
    """

    s = settings or _DEFAULT_SETTINGS
    date_col, merchant_col, amount_col = _match_header(header)
    if None not in (date_col, merchant_col, amount_col):
        return ColumnRoles(date=date_col, merchant=merchant_col, amount=amount_col)

    sample = data_rows[: s.sniff_rows]
    for col in range(len(header)):
        if col in (date_col, merchant_col, amount_col):
            continue
        dates = money = text_len = 0
        for row in sample:
            val = row[col] if col < len(row) else ""
            if is_date(val):
                dates += 1
            if is_money(val):
                money += 1
            text_len += len(val)
        if date_col is None and dates >= s.sniff_min_hits:
            date_col = col
        elif amount_col is None and money >= s.sniff_min_hits:
            amount_col = col
        elif (
            merchant_col is None
            and dates < s.sniff_max_stray_hits
            and money < s.sniff_max_stray_hits
            and text_len > s.sniff_min_text_chars
        ):
            merchant_col = col

    return ColumnRoles(date=date_col, merchant=merchant_col, amount=amount_col)


def _cell(row: Sequence[str], col: int | None) -> str:
    if col is None or col >= len(row):
        return ""
    return row[col]


def _longest_text_cell(row: Sequence[str]) -> str:
    best = ""
    for val in row:
        if not is_date(val) and not is_money(val) and len(val) > len(best):
            best = val
    return best


def parse_csv_universal(
    csv_text: str, *, settings: DetectionSettings | None = None
) -> list[Transaction]:
    """Parse delimited statement text into transactions.

    Row 0 is the header. Each data row yields at most one
    :class:`~subscription_tracker.models.Transaction`; rows whose amount parses
    to zero or whose merchant is empty are dropped. When the merchant cell is
    blank the longest non-date, non-money cell of the row stands in for it.
    ``date`` is the raw cell value and is not validated here.
    """

    lines = [ln for ln in csv_text.strip().splitlines() if ln.strip()]
    if len(lines) < 2:
        return []

    rows = [split_fields(ln) for ln in lines]
    header, data_rows = rows[0], rows[1:]
    roles = resolve_columns(header, data_rows, settings=settings)
    _logger.debug(
        "tabular:columns date=%s merchant=%s amount=%s rows=%d",
        roles.date,
        roles.merchant,
        roles.amount,
        len(data_rows),
    )

    transactions: list[Transaction] = []
    skipped = 0
    for row in data_rows:
        amount = parse_amount(_cell(row, roles.amount)) if roles.amount is not None else None
        merchant = _cell(row, roles.merchant) or _longest_text_cell(row)
        merchant = merchant.replace('"', "").replace("'", "").strip()
        if not amount or not merchant:
            skipped += 1
            continue
        transactions.append(Transaction(date=_cell(row, roles.date), merchant=merchant, amount=amount))

    if skipped:
        _logger.debug("tabular:skipped rows=%d", skipped)
    return transactions


__all__ = ["ColumnRoles", "parse_csv_universal", "resolve_columns", "split_fields"]
