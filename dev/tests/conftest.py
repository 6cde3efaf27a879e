from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure repo root on path
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pchtxt.patching import DiagnosticCollector  # noqa: E402


@pytest.fixture
def collector() -> DiagnosticCollector:
    return DiagnosticCollector()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    from pchtxt.logging_config import cleanup_logging

    cleanup_logging()
