"""Statement loading and the end-to-end analysis flow.

Files are handled one at a time: read to completion, parsed with the parser
matching their kind, and their transactions appended to one list. Detection
runs once over the merged list. Each call works on its own data and returns a
fresh :class:`~subscription_tracker.models.AnalysisResult`.
"""

from __future__ import annotations

from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from .catalog import ServiceCatalog, load_catalog
from .detector import detect_subscriptions, total_annual_cost
from .logging_setup import get_logger
from .models import AnalysisResult, StatementKind, StatementSource, Transaction
from .settings import DetectionSettings
from .tabular import parse_csv_universal
from .text_parser import parse_statement_text

_logger = get_logger("subscription_tracker.pipeline")

_CSV_SUFFIXES = frozenset({".csv"})
_PDF_SUFFIXES = frozenset({".pdf"})


def statement_kind(name: str | PathLike[str]) -> StatementKind:
    """Pick the parser for a file name: ``.csv`` is tabular, anything else text."""

    return "csv" if Path(name).suffix.lower() in _CSV_SUFFIXES else "text"


def load_statement(path: str | PathLike[str]) -> StatementSource:
    """Read one statement file into a :class:`StatementSource`.

    PDFs go through the text extractor; other files are read as UTF-8 text
    (undecodable bytes are replaced). I/O errors propagate to the caller.
    """

    p = Path(path)
    if p.suffix.lower() in _PDF_SUFFIXES:
        from .pdf_text import extract_pdf_text

        text = extract_pdf_text(p)
    else:
        text = p.read_text(encoding="utf-8", errors="replace")
    return StatementSource(name=p.name, text=text, kind=statement_kind(p))


def parse_statement(
    source: StatementSource,
    *,
    settings: DetectionSettings | None = None,
    catalog: ServiceCatalog | None = None,
) -> list[Transaction]:
    if source.kind == "csv":
        return parse_csv_universal(source.text, settings=settings)
    return parse_statement_text(source.text, settings=settings, catalog=catalog)


def analyze_statements(
    sources: Iterable[StatementSource],
    *,
    settings: DetectionSettings | None = None,
    catalog: ServiceCatalog | None = None,
) -> AnalysisResult:
    """Parse every statement, merge the transactions and detect subscriptions.

    "No transactions" and "no subscriptions" are ordinary results; callers
    decide how to word them for the user.
    """

    s = settings or DetectionSettings()
    cat = catalog or load_catalog()

    transactions: list[Transaction] = []
    for source in sources:
        found = parse_statement(source, settings=s, catalog=cat)
        _logger.info("parse:file name=%s kind=%s transactions=%d", source.name, source.kind, len(found))
        transactions.extend(found)

    subscriptions = detect_subscriptions(transactions, settings=s, catalog=cat) if transactions else []
    return AnalysisResult(
        transactions=tuple(transactions),
        subscriptions=tuple(subscriptions),
        total_annual_cost=total_annual_cost(subscriptions),
    )


__all__ = ["analyze_statements", "load_statement", "parse_statement", "statement_kind"]
