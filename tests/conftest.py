"""Pytest configuration for test isolation.

Detection thresholds can be overridden through ``SUBSCRIPTION_TRACKER_*``
environment variables, and the CLI loads a ``.env`` from the working
directory. A developer's shell or ``.env`` must not change test outcomes, so
every test starts from a clean environment inside its own temporary working
directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `subscription_tracker`
# is importable without an editable install.
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
if str(_PKG_DIR) not in sys.path:
    sys.path.insert(0, str(_PKG_DIR))


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ``SUBSCRIPTION_TRACKER_*`` overrides and run from a scratch cwd."""

    for name in list(os.environ):
        if name.startswith("SUBSCRIPTION_TRACKER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
