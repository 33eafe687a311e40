"""PDF → plain text adapter.

Returns one string with every page's extracted text joined by newlines. Column
alignment is not preserved; the unstructured-text parser is built for that.
``pdfplumber`` is imported lazily so CSV-only use does not pay for it.
"""

from __future__ import annotations

import io
from os import PathLike
from typing import BinaryIO

from .logging_setup import get_logger

_logger = get_logger("subscription_tracker.pdf_text")


def extract_pdf_text(source: str | PathLike[str] | bytes | BinaryIO) -> str:
    """Extract the text of all pages from a PDF path, byte string or stream."""

    import pdfplumber

    if isinstance(source, bytes):
        source = io.BytesIO(source)

    pages: list[str] = []
    with pdfplumber.open(source) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    _logger.debug("pdf:extracted pages=%d chars=%d", len(pages), sum(map(len, pages)))
    return "\n".join(pages) + ("\n" if pages else "")


__all__ = ["extract_pdf_text"]
