"""Amount and date normalization helpers shared by the statement parsers.

Pure functions with no I/O. Malformed input never raises here: amounts that do
not parse come back as ``Decimal(0)`` (callers treat that as "no usable
amount") and dates that do not parse come back as ``None``.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_CURRENCY_JUNK_RE = re.compile(r"[$€£,\s]")
_MONEY_RE = re.compile(r"^-?\d+\.?\d*$")
# Leading numeric prefix, mirroring how loose "parse a float" helpers behave on
# cells such as "12.50 USD" or "15.99*".
_NUMERIC_PREFIX_RE = re.compile(r"^(?:\d+\.?\d*|\.\d+)")

_ZERO = Decimal(0)


def parse_amount(raw: str | None) -> Decimal:
    """Return the absolute monetary value in ``raw`` or ``Decimal(0)``.

    Currency symbols, thousands separators and whitespace are removed first.
    A leading sign or accounting parentheses (``"(12.34)"``) are accepted;
    the sign is discarded because parsers only emit magnitudes.
    """

    if raw is None:
        return _ZERO
    s = _CURRENCY_JUNK_RE.sub("", raw)
    if not s:
        return _ZERO
    # Magnitudes only: drop the sign before unwrapping parentheses.
    s = s.lstrip("+-")
    if s.startswith("(") and s.endswith(")") and len(s) >= 2:
        s = s[1:-1]
    m = _NUMERIC_PREFIX_RE.match(s)
    if m is None:
        return _ZERO
    try:
        d = Decimal(m.group(0))
    except InvalidOperation:
        return _ZERO
    return abs(d)


def is_money(token: str | None) -> bool:
    """Return ``True`` when ``token`` is a plain, optionally signed number."""

    if not token:
        return False
    cleaned = re.sub(r"[$,\s]", "", token)
    return bool(_MONEY_RE.match(cleaned))


def format_amount(d: Decimal) -> str:
    # Exactly two decimals; ASCII dot.
    return f"{d.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_DATE_SHAPES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{2,4}$"),
)

_FULL_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%m-%d-%y",
)
_YEARLESS_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})$")


def is_date(token: str | None) -> bool:
    """Return ``True`` when ``token`` looks like a full statement date."""

    if not token:
        return False
    s = token.strip()
    return any(p.match(s) for p in _DATE_SHAPES)


def parse_date(token: str | None, *, reference_year: int | None = None) -> date | None:
    """Parse a raw statement date token.

    Full dates are tried against the common US export formats. Year-less
    ``M/D`` and ``M-D`` tokens (typical of PDF statements) resolve against
    ``reference_year``, defaulting to the current year. Returns ``None`` for
    anything else.
    """

    if not token:
        return None
    # Some providers include a time component; keep the first token only.
    parts = token.strip().split()
    if not parts:
        return None
    s = parts[0]
    for fmt in _FULL_DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    m = _YEARLESS_RE.match(s)
    if m:
        # No year wrap: "12/15" and "01/15" land in the same year, 334 days apart.
        year = reference_year if reference_year is not None else date.today().year
        try:
            return date(year, int(m.group(1)), int(m.group(2)))
        except ValueError:
            return None
    return None


__all__ = ["format_amount", "is_date", "is_money", "parse_amount", "parse_date"]
