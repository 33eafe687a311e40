"""Merchant description helpers: grouping keys and display cleanup.

``normalize_merchant`` produces the grouping key used by the detector and the
cancel-link lookup. ``clean_merchant`` tidies descriptions recovered from PDF
text, where card fragments, phone numbers and bank prefixes are glued onto the
merchant name.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

_NON_KEY_CHARS_RE = re.compile(r"[^a-z0-9\s]")
_WS_RE = re.compile(r"\s+")


def normalize_merchant(raw: str | None, *, max_tokens: int | None = None) -> str:
    """Return the grouping key for a raw merchant description.

    NFKC-normalizes and casefolds, drops every character outside
    ``[a-z0-9\\s]``, collapses whitespace and trims. With ``max_tokens`` the key
    is truncated to its leading tokens so that suffix noise such as store
    numbers lands in one group. Idempotent for any ``max_tokens``.
    """

    if raw is None:
        return ""
    s = unicodedata.normalize("NFKC", str(raw)).casefold()
    s = _NON_KEY_CHARS_RE.sub("", s)
    tokens = s.split()
    if max_tokens is not None:
        tokens = tokens[:max_tokens]
    return " ".join(tokens)


def contains_any(key: str, fragments: Iterable[str]) -> bool:
    """Return ``True`` when any fragment is a substring of ``key``."""

    return any(f in key for f in fragments)


# ---------------------------------------------------------------------------
# Statement description cleanup
# ---------------------------------------------------------------------------

# Bank-added prefixes in front of the merchant (debit card / ACH wording)
_ADMIN_PREFIX_RE = re.compile(
    r"^(?:"
    r"POS\s+(?:Debit|Purchase|Withdrawal)\s*-?\s*(?:Debit\s+Card\s+[X*#\d]+)?"
    r"|Debit\s+Card\s+(?:Purchase|Debit)\s*-?\s*(?:[X*#\d]{4,})?"
    r"|(?:Recurring|Preauthorized)\s+(?:Debit\s+Card\s+)?(?:Payment|Purchase|Debit)"
    r"|ACH\s+(?:Debit|Withdrawal)"
    r"|Purchase\s+(?:Authorized\s+)?On\s+\d{1,2}/\d{1,2}"
    r")\s*[-:]?\s*",
    re.IGNORECASE,
)
# Masked or partial card numbers: XXXX1234, ****1234, #1234, "Card 1234"
_CARD_FRAGMENT_RE = re.compile(
    r"(?:[X*]{2,}[\s-]?\d{4}\b|#\d{4,}\b|\bCard\s+(?:ending\s+(?:in\s+)?)?\d{4}\b)",
    re.IGNORECASE,
)
_PHONE_RE = re.compile(r"(?:\(\d{3}\)\s*|\b\d{3}[-.\s])\d{3}[-.\s]?\d{4}\b")
_TRAILING_STATE_RE = re.compile(r"\s+[A-Z]{2}$")


def clean_merchant(raw: str) -> str:
    """Strip bank prefixes, card fragments, phone numbers and a trailing state.

    The result keeps the original casing; callers normalize separately when
    they need a grouping key.
    """

    s = _WS_RE.sub(" ", raw).strip()
    s = _ADMIN_PREFIX_RE.sub("", s)
    s = _CARD_FRAGMENT_RE.sub(" ", s)
    s = _PHONE_RE.sub(" ", s)
    s = _WS_RE.sub(" ", s).strip(" -*:")
    # Only drop the state when something meaningful remains in front of it.
    stripped = _TRAILING_STATE_RE.sub("", s)
    if stripped.strip():
        s = stripped
    return s.strip()


__all__ = ["clean_merchant", "contains_any", "normalize_merchant"]
