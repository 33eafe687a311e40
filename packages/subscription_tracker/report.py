"""Presentation-ready view of an analysis result.

``build_report`` turns an :class:`~subscription_tracker.models.AnalysisResult`
into a validated pydantic model (cancel links resolved, money rounded to
cents) that the CLI prints as text or dumps as JSON.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .catalog import ServiceCatalog, cancel_hint, load_catalog
from .models import PERIOD_LABEL, AnalysisResult
from .normalizers import format_amount

_CENT = Decimal("0.01")


def _cents(d: Decimal) -> Decimal:
    return d.quantize(_CENT, rounding=ROUND_HALF_UP)


class ReportItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    merchant: str
    amount: Decimal
    frequency: Literal["monthly", "quarterly", "annual"]
    period_label: str
    annual_cost: Decimal
    confidence_pct: int
    charges: int
    cancel_url: str | None = None
    cancel_instructions: str | None = None
    search_query: str | None = None


class AnalysisReport(BaseModel):
    """Totals plus one :class:`ReportItem` per detected subscription."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    transaction_count: int
    subscription_count: int
    total_annual_cost: Decimal
    monthly_cost: Decimal
    items: tuple[ReportItem, ...]


def build_report(result: AnalysisResult, catalog: ServiceCatalog | None = None) -> AnalysisReport:
    cat = catalog or load_catalog()
    items: list[ReportItem] = []
    for sub in result.subscriptions:
        hint = cancel_hint(sub.merchant, cat)
        items.append(
            ReportItem(
                merchant=sub.merchant,
                amount=_cents(sub.amount),
                frequency=sub.frequency,
                period_label=PERIOD_LABEL[sub.frequency],
                annual_cost=_cents(sub.annual_cost),
                confidence_pct=round(sub.confidence * 100),
                charges=len(sub.transactions),
                cancel_url=hint.url,
                cancel_instructions=hint.instructions,
                search_query=hint.search_query,
            )
        )
    return AnalysisReport(
        transaction_count=len(result.transactions),
        subscription_count=len(items),
        total_annual_cost=_cents(result.total_annual_cost),
        monthly_cost=_cents(result.monthly_cost),
        items=tuple(items),
    )


def render_text(report: AnalysisReport) -> str:
    """Render the report for a terminal, one block per subscription."""

    lines = [
        f"Annual subscription cost: ${format_amount(report.total_annual_cost)}"
        f" (${format_amount(report.monthly_cost)}/month)",
        f"{report.subscription_count} subscriptions detected"
        f" from {report.transaction_count} transactions",
    ]
    for item in report.items:
        lines.append("")
        lines.append(
            f"{item.merchant}  ${format_amount(item.amount)}/{item.period_label}"
            f"  ${format_amount(item.annual_cost)}/year"
        )
        lines.append(
            f"  {item.frequency} - {item.charges} charges detected"
            f" - confidence {item.confidence_pct}%"
        )
        if item.cancel_url:
            lines.append(f"  Cancel: {item.cancel_url}")
            if item.cancel_instructions:
                lines.append(f"  Tip: {item.cancel_instructions}")
        else:
            lines.append(f'  Search "{item.search_query}" to find the cancellation page')
    return "\n".join(lines)


__all__ = ["AnalysisReport", "ReportItem", "build_report", "render_text"]
