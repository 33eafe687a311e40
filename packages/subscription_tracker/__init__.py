"""Public interface for the ``subscription_tracker`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    analyze_files,
    analyze_statements,
    cancel_hint,
    detect_frequency,
    detect_subscriptions,
    find_cancel_link,
    group_by_merchant,
    load_catalog,
    load_statement,
    normalize_merchant,
    parse_csv_universal,
    parse_statement,
    parse_statement_text,
    total_annual_cost,
)
from .catalog import CancelHint, CancelLink, ServiceCatalog
from .models import (
    AnalysisResult,
    Frequency,
    FrequencyEstimate,
    MerchantGroup,
    StatementSource,
    Subscription,
    Transaction,
    Transactions,
)
from .settings import DetectionSettings, load_settings

__all__ = [
    # API
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
    # Configuration
    "DetectionSettings",
    "load_settings",
    # Models / types
    "AnalysisResult",
    "CancelHint",
    "CancelLink",
    "Frequency",
    "FrequencyEstimate",
    "MerchantGroup",
    "ServiceCatalog",
    "StatementSource",
    "Subscription",
    "Transaction",
    "Transactions",
]
