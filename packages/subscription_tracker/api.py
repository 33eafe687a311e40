"""Public API for the ``subscription_tracker`` package.

This module is the stable import surface. Implementations live in the parser,
detector and pipeline modules and are re-exported here.
"""

from __future__ import annotations

from collections.abc import Iterable
from os import PathLike

from .catalog import ServiceCatalog, cancel_hint, find_cancel_link, load_catalog
from .detector import (
    detect_frequency,
    detect_subscriptions,
    group_by_merchant,
    total_annual_cost,
)
from .merchants import normalize_merchant
from .models import AnalysisResult
from .pipeline import analyze_statements, load_statement, parse_statement
from .settings import DetectionSettings
from .tabular import parse_csv_universal
from .text_parser import parse_statement_text


def analyze_files(
    paths: Iterable[str | PathLike[str]],
    *,
    settings: DetectionSettings | None = None,
    catalog: ServiceCatalog | None = None,
) -> AnalysisResult:
    """Load statement files from disk and analyze them as one batch.

    Thin convenience over :func:`load_statement` and
    :func:`analyze_statements` for library callers; the CLI uses the same
    path. Files are read eagerly so I/O errors surface before any parsing.
    """

    sources = [load_statement(p) for p in paths]
    return analyze_statements(sources, settings=settings, catalog=catalog)


__all__ = [
    "analyze_files",
    "analyze_statements",
    "cancel_hint",
    "detect_frequency",
    "detect_subscriptions",
    "find_cancel_link",
    "group_by_merchant",
    "load_catalog",
    "load_statement",
    "normalize_merchant",
    "parse_csv_universal",
    "parse_statement",
    "parse_statement_text",
    "total_annual_cost",
]
