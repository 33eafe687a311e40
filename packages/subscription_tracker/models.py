"""Data models and type aliases for ``subscription_tracker``.

Records are frozen dataclasses: a parser creates a :class:`Transaction` from
one input line or row, the detector consumes the flat list once, and the
resulting :class:`Subscription` objects are read by the report layer. Nothing
is persisted between runs.

Amounts are :class:`~decimal.Decimal` magnitudes in the statement currency so
that aggregates (means, annual projections, totals) stay exact to the cent.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, NamedTuple

# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single purchase event recovered from a statement.

    Attributes
    ----------
    date:
        The raw date token as found in the source (``M/D/YYYY``,
        ``YYYY-MM-DD``, ``M-D``...). Empty when the parser could not attach
        one; no format validation is applied at parse time.
    merchant:
        Raw display description of the merchant. Never empty for records a
        parser accepts.
    amount:
        Positive magnitude. Credits and zero amounts are dropped by the
        parsers and never represented here.
    """

    date: str
    merchant: str
    amount: Decimal


type Transactions = Iterable[Transaction]
"""Any iterable of :class:`Transaction` (parsers return lists)."""


@dataclass(frozen=True, slots=True)
class MerchantGroup:
    """All transactions sharing one normalized merchant key, in encounter order."""

    key: str
    transactions: tuple[Transaction, ...]

    @property
    def amounts(self) -> list[Decimal]:
        return [t.amount for t in self.transactions]


# ---------------------------------------------------------------------------
# Recurrence
# ---------------------------------------------------------------------------

type Frequency = Literal["monthly", "quarterly", "annual"]

# Yearly multiplier per billing cycle
ANNUAL_MULTIPLIER: dict[str, int] = {"monthly": 12, "quarterly": 4, "annual": 1}

# Short suffix shown next to a per-charge amount (``$9.99/mo``)
PERIOD_LABEL: dict[str, str] = {"monthly": "mo", "quarterly": "qtr", "annual": "yr"}


class FrequencyEstimate(NamedTuple):
    """Inferred billing cycle and the confidence of that inference."""

    frequency: Frequency
    confidence: float


@dataclass(frozen=True, slots=True)
class Subscription:
    """A detected recurring charge.

    ``merchant`` is the display name of the first transaction in the group,
    ``amount`` the mean charge, and ``annual_cost`` that mean scaled by the
    billing cycle. ``transactions`` holds the full backing group.
    """

    merchant: str
    amount: Decimal
    frequency: Frequency
    annual_cost: Decimal
    confidence: float
    transactions: tuple[Transaction, ...]

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Subscription.amount must be positive")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Subscription.confidence must be within [0,1]")


# ---------------------------------------------------------------------------
# Pipeline inputs/outputs
# ---------------------------------------------------------------------------

type StatementKind = Literal["csv", "text"]


@dataclass(frozen=True, slots=True)
class StatementSource:
    """One uploaded statement with its text already extracted.

    ``kind`` selects the parser: ``"csv"`` for delimited exports and
    ``"text"`` for free-form text such as PDF text dumps.
    """

    name: str
    text: str
    kind: StatementKind


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of one analysis run over a batch of statements."""

    transactions: tuple[Transaction, ...]
    subscriptions: tuple[Subscription, ...]
    total_annual_cost: Decimal

    @property
    def monthly_cost(self) -> Decimal:
        return self.total_annual_cost / 12

    @property
    def has_transactions(self) -> bool:
        return len(self.transactions) > 0


type Subscriptions = Sequence[Subscription]


__all__ = [
    "ANNUAL_MULTIPLIER",
    "PERIOD_LABEL",
    "AnalysisResult",
    "Frequency",
    "FrequencyEstimate",
    "MerchantGroup",
    "StatementKind",
    "StatementSource",
    "Subscription",
    "Subscriptions",
    "Transaction",
    "Transactions",
]
