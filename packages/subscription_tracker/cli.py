# ruff: noqa: I001
"""CLI for the ``subscription_tracker`` package.

This module exposes callable command handlers (``cmd_analyze``,
``cmd_extract_text``) and a Typer-based console interface. Environment
variables (``SUBSCRIPTION_TRACKER_*`` overrides) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to command logic. Business
logic lives in ``subscription_tracker.pipeline`` and related modules.
"""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path
from typing import Annotated
from collections.abc import Sequence

import typer
from dotenv import load_dotenv

from .logging_setup import configure_logging


def _to_decimal(value: float | None) -> Decimal | None:
    # Go through str() so 0.15 stays 0.15 instead of its binary expansion.
    return None if value is None else Decimal(str(value))


def cmd_analyze(
    paths: Sequence[str],
    *,
    as_json: bool = False,
    min_confidence: float | None = None,
    amount_tolerance: float | None = None,
) -> int:
    """Analyze statement files and print detected subscriptions to stdout.

    Behavior
    --------
    - Builds :class:`~subscription_tracker.settings.DetectionSettings` from the
      environment, with ``min_confidence``/``amount_tolerance`` overriding it.
    - Reads every file in order (``.csv`` through the tabular parser, ``.pdf``
      through text extraction and the unstructured-text parser, anything else
      as plain text).
    - Prints a text report, or the report as JSON with ``as_json``.

    Errors are written to stderr and the function returns a non-zero exit
    status. "No transactions" and "no subscriptions" are reported on stdout
    and return ``0``.
    """

    # Local imports keep CLI startup fast
    from .catalog import load_catalog
    from .pipeline import analyze_statements, load_statement
    from .report import build_report, render_text
    from .settings import load_settings

    if not paths:
        print("Error: at least one statement file is required.", file=sys.stderr)
        return 1

    try:
        settings = load_settings(
            min_confidence=min_confidence,
            amount_tolerance=_to_decimal(amount_tolerance),
        )
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        catalog = load_catalog()
    except (OSError, ValueError) as e:
        print(f"Error: failed to load service catalog: {e}", file=sys.stderr)
        return 1

    sources = []
    for path in paths:
        try:
            sources.append(load_statement(path))
        except FileNotFoundError:
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
        except PermissionError:
            print(f"Error: Permission denied: {path}", file=sys.stderr)
            return 1
        except Exception as e:  # pdfplumber raises its own exception types
            print(f"Error: Unexpected failure reading '{path}': {e}", file=sys.stderr)
            return 1

    result = analyze_statements(sources, settings=settings, catalog=catalog)
    report = build_report(result, catalog)

    if as_json:
        print(report.model_dump_json(indent=2))
        return 0

    if not result.has_transactions:
        print("No valid transactions found in uploaded files.")
        return 0
    if not result.subscriptions:
        print(
            f"No recurring subscriptions detected in {len(result.transactions)} transactions."
        )
        return 0

    print(render_text(report))
    return 0


def cmd_extract_text(pdf_path: str) -> int:
    """Print the raw text extracted from a PDF statement (debugging aid)."""

    from .pdf_text import extract_pdf_text

    try:
        text = extract_pdf_text(pdf_path)
    except FileNotFoundError:
        print(f"Error: File not found: {pdf_path}", file=sys.stderr)
        return 1
    except Exception as e:  # pdfplumber raises its own exception types
        print(f"Error: failed to extract text from '{pdf_path}': {e}", file=sys.stderr)
        return 1

    print(f"Extracted text ({len(text)} characters):")
    print(text)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Find recurring subscriptions in bank/credit-card statements (CSV or PDF) "
        "and estimate their yearly cost."
    ),
)


@app.command("analyze")
def analyze_cmd(
    files: Annotated[
        list[Path],
        typer.Argument(help="Statement files (.csv exports, .pdf statements or .txt dumps)."),
    ],
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    min_confidence: float | None = typer.Option(
        None, help="Discard subscriptions below this confidence (default 0.3)."
    ),
    amount_tolerance: float | None = typer.Option(
        None, help="Allowed charge deviation from the mean, as a fraction (default 0.20)."
    ),
) -> None:
    """Detect subscriptions across one or more statements."""

    code = cmd_analyze(
        [str(f) for f in files],
        as_json=as_json,
        min_confidence=min_confidence,
        amount_tolerance=amount_tolerance,
    )
    if code:
        raise typer.Exit(code)


@app.command("extract-text")
def extract_text_cmd(
    pdf_path: Annotated[Path, typer.Argument(help="PDF statement to dump as text.")],
) -> None:
    """Show the text the PDF extractor sees."""

    code = cmd_extract_text(str(pdf_path))
    if code:
        raise typer.Exit(code)


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (DEBUG, INFO...). Falls back to SUBSCRIPTION_TRACKER_LOG_LEVEL."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m subscription_tracker.cli`
    app()
