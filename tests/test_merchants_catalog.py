import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from subscription_tracker import CancelLink, find_cancel_link, load_catalog, normalize_merchant
from subscription_tracker.catalog import KNOWN_SERVICES_FILE, ServicePattern, cancel_hint
from subscription_tracker.merchants import clean_merchant

# ---- normalize_merchant ------------------------------------------------------


def test_normalize_is_case_insensitive_and_idempotent():
    assert normalize_merchant("NETFLIX.COM") == normalize_merchant("netflix.com")
    assert normalize_merchant("netflix.com") == normalize_merchant(normalize_merchant("Netflix.Com"))
    assert normalize_merchant("NETFLIX.COM") == "netflixcom"


def test_normalize_strips_punctuation_and_collapses_whitespace():
    assert normalize_merchant("  SQ *Blue   Bottle  #42 ") == "sq blue bottle 42"
    assert normalize_merchant("ＮＥＴＦＬＩＸ") == "netflix"
    assert normalize_merchant("***") == ""
    assert normalize_merchant(None) == ""


def test_normalize_max_tokens_truncates_and_stays_idempotent():
    key = normalize_merchant("Starbucks Store 1234 Seattle", max_tokens=2)
    assert key == "starbucks store"
    assert normalize_merchant(key, max_tokens=2) == key


# ---- clean_merchant ------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("NETFLIX.COM 866-579-7172 CA", "NETFLIX.COM"),
        ("SQ *COFFEE XXXX1234", "SQ *COFFEE"),
        ("Recurring Payment - ADOBE *CREATIVE CLD", "ADOBE *CREATIVE CLD"),
        ("Purchase Authorized On 01/05 SPOTIFY USA", "SPOTIFY USA"),
        ("ACH Debit PLANET FITNESS", "PLANET FITNESS"),
        ("HULU Card ending in 9876", "HULU"),
        ("CA", "CA"),
        ("   ", ""),
    ],
)
def test_clean_merchant(raw, expected):
    assert clean_merchant(raw) == expected


# ---- catalog -------------------------------------------------------------------


def test_load_catalog_is_cached_and_populated():
    cat = load_catalog()
    assert cat is load_catalog()
    assert "netflix" in cat.subscription_keywords
    assert any(s.display_name == "Spotify" for s in cat.services)
    assert len(cat.cancel_links) >= 20


def test_known_subscription_matches_fragments():
    cat = load_catalog()
    assert cat.is_known_subscription("netflixcom")
    assert cat.is_known_subscription("spotify usa")
    assert not cat.is_known_subscription("joes diner")


def test_find_cancel_link_by_contained_key():
    link = find_cancel_link("NETFLIX.COM")
    assert link is not None
    assert link.url == "https://www.netflix.com/cancelplan"

    prime = find_cancel_link("Amazon Prime Video")
    assert prime is not None and prime.merchant == "amazon prime"

    assert find_cancel_link("Joe's Diner") is None


def test_cancel_hint_falls_back_to_search_query():
    hint = cancel_hint("Joe's Gym")
    assert hint.url is None
    assert hint.search_query == "Joe's Gym cancel subscription"

    hint = cancel_hint("SPOTIFY USA")
    assert hint.url == "https://www.spotify.com/account/subscription/"
    assert hint.search_query is None


def test_cancel_link_merchant_is_normalized():
    link = CancelLink(merchant="Disney+", url="https://www.disneyplus.com/account")
    assert link.merchant == "disney"
    with pytest.raises(ValidationError):
        CancelLink(merchant="+++", url="https://example.com")


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_custom_seed_files(tmp_path: Path):
    services = _write(
        tmp_path / "services.json",
        {
            "schema_version": 1,
            "subscription_keywords": ["Acme Cloud"],
            "services": [{"display_name": "Acme Cloud", "match": "acme cloud"}],
        },
    )
    links = _write(
        tmp_path / "links.json",
        {"schema_version": 1, "links": [{"merchant": "ACME", "url": "https://acme.test/cancel"}]},
    )

    cat = load_catalog(services, links)

    assert cat.subscription_keywords == ("acme cloud",)
    assert cat.is_known_subscription("acme cloud storage")
    assert find_cancel_link("ACME CLOUD*STORAGE", cat).url == "https://acme.test/cancel"


def test_unsupported_schema_version_is_rejected(tmp_path: Path):
    bad = _write(tmp_path / "services.json", {"schema_version": 2, "services": []})
    with pytest.raises(ValueError, match="schema_version"):
        load_catalog(bad)


def test_seed_file_ships_with_package():
    assert KNOWN_SERVICES_FILE.is_file()


def test_regex_service_pattern_must_compile():
    assert ServicePattern(display_name="Disney+", match=r"disney\s*\+?", regex=True)
    # Plain substrings are escaped, so regex metacharacters are fine there.
    assert ServicePattern(display_name="Odd", match="odd(", regex=False).pattern_source() == r"odd\("
    with pytest.raises(ValidationError, match="invalid regex"):
        ServicePattern(display_name="Broken", match="broken(", regex=True)


def test_bad_regex_in_seed_file_fails_at_load(tmp_path: Path):
    services = _write(
        tmp_path / "services.json",
        {
            "schema_version": 1,
            "subscription_keywords": ["acme"],
            "services": [{"display_name": "Acme", "match": "acme[", "regex": True}],
        },
    )
    with pytest.raises(ValueError, match="invalid regex"):
        load_catalog(services)
