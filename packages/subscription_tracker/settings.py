"""Tunable thresholds for parsing and recurrence detection.

Every number the detector and the text parser compare against lives on
:class:`DetectionSettings`. Defaults are the canonical values; hosts can
override any field through ``SUBSCRIPTION_TRACKER_<FIELD_NAME>`` environment
variables (the CLI loads a local ``.env`` first).

Thresholds with more than one reasonable value are plain fields: for a
stricter run use ``amount_tolerance=0.15``, ``min_confidence=0.4`` and
``known_amount_max=200``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

ENV_PREFIX = "SUBSCRIPTION_TRACKER_"


def _check_unit_interval(v: float) -> float:
    if 0.0 <= v <= 1.0:
        return v
    raise ValueError("confidence values must be within [0,1]")


class GapWindow(BaseModel):
    """Inclusive mean-gap window (days) mapped to a frequency and confidence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    frequency: Literal["monthly", "quarterly", "annual"]
    min_days: float
    max_days: float
    confidence: float

    @field_validator("confidence")
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        return _check_unit_interval(v)

    @model_validator(mode="after")
    def _ordered_days(self) -> GapWindow:
        if self.min_days > self.max_days:
            raise ValueError("min_days must not exceed max_days")
        return self


_DEFAULT_WINDOWS: tuple[GapWindow, ...] = (
    GapWindow(frequency="monthly", min_days=25, max_days=35, confidence=0.9),
    GapWindow(frequency="quarterly", min_days=80, max_days=100, confidence=0.85),
    GapWindow(frequency="annual", min_days=340, max_days=380, confidence=0.85),
)


class DetectionSettings(BaseModel):
    """Validated, immutable configuration for one analysis run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # ---- Recurrence detector ------------------------------------------------
    amount_min: Decimal = Decimal("1")
    amount_max: Decimal = Decimal("500")
    # Groups smaller than this need a known-service match to survive
    min_transactions: int = 2
    gap_windows: tuple[GapWindow, ...] = _DEFAULT_WINDOWS
    # Confidence when no usable gap exists / when the mean gap fits no window
    weak_confidence: float = 0.3
    fallback_confidence: float = 0.4
    amount_tolerance: Decimal = Decimal("0.20")
    known_boost: float = 0.2
    confidence_cap: float = 0.95
    min_confidence: float = 0.3
    # Truncate grouping keys to the first N tokens (None keeps the full key)
    group_key_tokens: int | None = None
    # Year used for year-less dates such as "01/15"; None means current year
    reference_year: int | None = None

    # ---- Unstructured-text parser -------------------------------------------
    known_amount_min: Decimal = Decimal("0.99")
    known_amount_max: Decimal = Decimal("500")
    generic_amount_max: Decimal = Decimal("5000")

    # ---- Tabular parser content sniffing ------------------------------------
    sniff_rows: int = 10
    sniff_min_hits: int = 5
    sniff_max_stray_hits: int = 2
    sniff_min_text_chars: int = 50

    @field_validator(
        "weak_confidence",
        "fallback_confidence",
        "known_boost",
        "confidence_cap",
        "min_confidence",
    )
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        return _check_unit_interval(v)

    @field_validator("amount_tolerance")
    @classmethod
    def _non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("amount_tolerance must be non-negative")
        return v

    @field_validator("min_transactions", "sniff_rows", "sniff_min_hits")
    @classmethod
    def _positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("group_key_tokens")
    @classmethod
    def _positive_or_none(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError("group_key_tokens must be positive when set")
        return v

    @model_validator(mode="after")
    def _ordered_bounds(self) -> DetectionSettings:
        if self.amount_min > self.amount_max:
            raise ValueError("amount_min must not exceed amount_max")
        if self.known_amount_min > self.known_amount_max:
            raise ValueError("known_amount_min must not exceed known_amount_max")
        return self


# Fields that can be overridden from the environment. Composite fields
# (``gap_windows``) are code-level configuration only.
_ENV_FIELDS: tuple[str, ...] = tuple(
    name for name in DetectionSettings.model_fields if name != "gap_windows"
)


def load_settings(
    environ: Mapping[str, str] | None = None, **overrides: object
) -> DetectionSettings:
    """Build settings from ``SUBSCRIPTION_TRACKER_*`` variables plus overrides.

    Explicit keyword ``overrides`` (e.g., from CLI flags) win over the
    environment; ``None`` values are ignored so optional flags can be passed
    through unchanged. Invalid values raise ``pydantic.ValidationError``.
    """

    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    for name in _ENV_FIELDS:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is None or not raw.strip():
            continue
        values[name] = raw.strip()
    for name, val in overrides.items():
        if val is not None:
            values[name] = val
    return DetectionSettings.model_validate(values)


__all__ = ["ENV_PREFIX", "DetectionSettings", "GapWindow", "load_settings"]
