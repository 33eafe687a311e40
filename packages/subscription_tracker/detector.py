"""Recurring-charge detection over a flat transaction list.

Public API:
    - :func:`detect_subscriptions`
    - :func:`detect_frequency`
    - :func:`group_by_merchant`
    - :func:`total_annual_cost`

Filter order per merchant group: amount range, minimum evidence, frequency
inference, amount consistency, known-service boost, confidence cutoff. Cheap
checks run before the date math, and amount consistency runs after frequency
so a regular cadence with a drifting price (utilities, groceries) is still
rejected.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .catalog import ServiceCatalog, load_catalog
from .logging_setup import get_logger
from .merchants import normalize_merchant
from .models import (
    ANNUAL_MULTIPLIER,
    FrequencyEstimate,
    MerchantGroup,
    Subscription,
    Transaction,
    Transactions,
)
from .normalizers import parse_date
from .settings import DetectionSettings

_logger = get_logger("subscription_tracker.detector")


def group_by_merchant(
    transactions: Transactions, *, max_tokens: int | None = None
) -> list[MerchantGroup]:
    """Group transactions by normalized merchant key, preserving encounter order.

    Groups are returned in order of first appearance; each transaction lands in
    exactly one group.
    """

    by_key: dict[str, list[Transaction]] = {}
    for tx in transactions:
        key = normalize_merchant(tx.merchant, max_tokens=max_tokens)
        by_key.setdefault(key, []).append(tx)
    return [MerchantGroup(key=k, transactions=tuple(v)) for k, v in by_key.items()]


def _mean(values: Sequence[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / len(values)


def detect_frequency(
    transactions: Sequence[Transaction],
    *,
    settings: DetectionSettings | None = None,
) -> FrequencyEstimate:
    """Infer the billing cycle from the day gaps between charges.

    Transactions are ordered by parsed date; undated ones are ignored and only
    positive gaps count, so same-day duplicates do not pull the mean down.
    Without any usable gap the result is a weak ``monthly`` guess.
    """

    s = settings or DetectionSettings()
    weak = FrequencyEstimate("monthly", s.weak_confidence)
    if len(transactions) < 2:
        return weak

    dates = sorted(
        d
        for d in (parse_date(t.date, reference_year=s.reference_year) for t in transactions)
        if d is not None
    )
    gaps = [(b - a).days for a, b in zip(dates, dates[1:], strict=False)]
    gaps = [g for g in gaps if g > 0]
    if not gaps:
        return weak

    mean_gap = sum(gaps) / len(gaps)
    for window in s.gap_windows:
        if window.min_days <= mean_gap <= window.max_days:
            return FrequencyEstimate(window.frequency, window.confidence)
    return FrequencyEstimate("monthly", s.fallback_confidence)


def _evaluate_group(
    group: MerchantGroup, settings: DetectionSettings, catalog: ServiceCatalog
) -> Subscription | None:
    amounts = group.amounts
    avg = _mean(amounts)

    if avg < settings.amount_min or avg > settings.amount_max:
        _logger.debug("detect:drop key=%r reason=amount_range avg=%s", group.key, avg)
        return None

    known = catalog.is_known_subscription(group.key)
    if len(group.transactions) < settings.min_transactions and not known:
        _logger.debug("detect:drop key=%r reason=insufficient_evidence", group.key)
        return None

    frequency, confidence = detect_frequency(group.transactions, settings=settings)

    max_dev = max(abs(a - avg) for a in amounts)
    if max_dev > avg * settings.amount_tolerance:
        _logger.debug(
            "detect:drop key=%r reason=amount_drift max_dev=%s avg=%s", group.key, max_dev, avg
        )
        return None

    if known:
        confidence = min(settings.confidence_cap, confidence + settings.known_boost)
    if confidence < settings.min_confidence:
        _logger.debug("detect:drop key=%r reason=low_confidence conf=%.2f", group.key, confidence)
        return None

    return Subscription(
        merchant=group.transactions[0].merchant,
        amount=avg,
        frequency=frequency,
        annual_cost=avg * ANNUAL_MULTIPLIER[frequency],
        confidence=confidence,
        transactions=group.transactions,
    )


def detect_subscriptions(
    transactions: Transactions,
    *,
    settings: DetectionSettings | None = None,
    catalog: ServiceCatalog | None = None,
) -> list[Subscription]:
    """Classify merchant groups and return subscriptions by annual cost, descending.

    An empty result is a normal outcome (no recurring charges found), not an
    error.
    """

    s = settings or DetectionSettings()
    cat = catalog or load_catalog()

    groups = group_by_merchant(transactions, max_tokens=s.group_key_tokens)
    found: list[Subscription] = []
    for group in groups:
        sub = _evaluate_group(group, s, cat)
        if sub is not None:
            found.append(sub)

    found.sort(key=lambda sub: sub.annual_cost, reverse=True)
    _logger.info("detect:done groups=%d subscriptions=%d", len(groups), len(found))
    return found


def total_annual_cost(subscriptions: Iterable[Subscription]) -> Decimal:
    """Sum of the projected yearly cost of every subscription."""

    return sum((sub.annual_cost for sub in subscriptions), Decimal(0))


__all__ = [
    "detect_frequency",
    "detect_subscriptions",
    "group_by_merchant",
    "total_annual_cost",
]
