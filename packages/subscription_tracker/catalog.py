"""Static reference data: known subscription services and cancel links.

The data ships as versioned JSON seeds under ``seeds/`` and is validated with
pydantic on load. :func:`load_catalog` is cached so the catalog is built once
per process and shared read-only; extend the seed files to teach the detector
and the cancel-link lookup about new services.

Public surface
--------------
- ``ServiceCatalog``: known-service fragments, text-scan patterns, cancel links.
- ``load_catalog(...)``: cached loader for the packaged (or a custom) seed set.
- ``find_cancel_link(...)`` / ``cancel_hint(...)``: lookup for presentation.
"""

from __future__ import annotations

import json
import re
from functools import cache
from pathlib import Path
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .logging_setup import get_logger
from .merchants import contains_any, normalize_merchant

_SEEDS_DIR = Path(__file__).resolve().parent / "seeds"
KNOWN_SERVICES_FILE = _SEEDS_DIR / "known_services.v1.json"
CANCEL_LINKS_FILE = _SEEDS_DIR / "cancel_links.v1.json"

_SUPPORTED_SCHEMA_VERSION = 1

_logger = get_logger("subscription_tracker.catalog")


class ServicePattern(BaseModel):
    """A recognizable service name used by the text scan.

    ``match`` is either a case-insensitive substring (escaped before use) or,
    when ``regex`` is true, a regular expression fragment.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    display_name: str
    match: str
    regex: bool = False

    @field_validator("display_name", "match")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @model_validator(mode="after")
    def _regex_compiles(self) -> ServicePattern:
        if self.regex:
            try:
                re.compile(self.match)
            except re.error as e:
                raise ValueError(f"invalid regex for {self.display_name!r}: {e}") from e
        return self

    def pattern_source(self) -> str:
        return self.match if self.regex else re.escape(self.match)


class CancelLink(BaseModel):
    """Where and how to cancel one known service."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    merchant: str
    url: str
    instructions: str | None = None

    @field_validator("merchant")
    @classmethod
    def _normalized_key(cls, v: str) -> str:
        key = normalize_merchant(v)
        if not key:
            raise ValueError("merchant key must contain letters or digits")
        return key


class ServiceCatalog(BaseModel):
    """Immutable bundle of all static lookup data."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subscription_keywords: tuple[str, ...]
    services: tuple[ServicePattern, ...]
    cancel_links: tuple[CancelLink, ...]

    @field_validator("subscription_keywords")
    @classmethod
    def _normalize_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        keys = tuple(k for k in (normalize_merchant(s) for s in v) if k)
        if not keys:
            raise ValueError("subscription_keywords must not be empty")
        return keys

    def is_known_subscription(self, merchant_key: str) -> bool:
        """Return ``True`` when a known-service fragment occurs in the key."""

        return contains_any(merchant_key, self.subscription_keywords)

    def find_cancel_link(self, merchant_name: str) -> CancelLink | None:
        normalized = normalize_merchant(merchant_name)
        for link in self.cancel_links:
            if link.merchant in normalized:
                return link
        return None


class CancelHint(NamedTuple):
    """Cancel link for a merchant, or the search query to use instead."""

    url: str | None
    instructions: str | None
    search_query: str | None


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Seed JSON must be an object: {path}")
    version = data.get("schema_version")
    if version != _SUPPORTED_SCHEMA_VERSION:
        raise ValueError(f"Unsupported schema_version {version!r} in {path}")
    return data


@cache
def load_catalog(
    services_file: Path = KNOWN_SERVICES_FILE,
    cancel_links_file: Path = CANCEL_LINKS_FILE,
) -> ServiceCatalog:
    """Load and validate the seed files (cached per argument pair).

    Raises ``OSError`` when a file cannot be read and ``ValueError`` (including
    ``pydantic.ValidationError``) when its content is invalid.
    """

    services = _load_json(Path(services_file))
    links = _load_json(Path(cancel_links_file))
    catalog = ServiceCatalog.model_validate(
        {
            "subscription_keywords": services.get("subscription_keywords") or [],
            "services": services.get("services") or [],
            "cancel_links": links.get("links") or [],
        }
    )
    _logger.debug(
        "catalog:loaded keywords=%d services=%d cancel_links=%d",
        len(catalog.subscription_keywords),
        len(catalog.services),
        len(catalog.cancel_links),
    )
    return catalog


def find_cancel_link(
    merchant_name: str, catalog: ServiceCatalog | None = None
) -> CancelLink | None:
    """Return the first cancel link whose key is contained in the merchant name."""

    return (catalog or load_catalog()).find_cancel_link(merchant_name)


def cancel_hint(merchant_name: str, catalog: ServiceCatalog | None = None) -> CancelHint:
    """Return the cancel link for ``merchant_name`` or a web-search fallback."""

    link = find_cancel_link(merchant_name, catalog)
    if link is not None:
        return CancelHint(url=link.url, instructions=link.instructions, search_query=None)
    return CancelHint(
        url=None,
        instructions=None,
        search_query=f"{merchant_name} cancel subscription",
    )


__all__ = [
    "CANCEL_LINKS_FILE",
    "KNOWN_SERVICES_FILE",
    "CancelHint",
    "CancelLink",
    "ServiceCatalog",
    "ServicePattern",
    "cancel_hint",
    "find_cancel_link",
    "load_catalog",
]
