from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.runner import RecordingRunner
from tests._fixtures.site_builder import SiteBuilder


@pytest.fixture
def site_builder(tmp_path: Path) -> SiteBuilder:
    """Provide a reusable site builder rooted at the pytest tmp_path."""
    return SiteBuilder(tmp_path)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture(autouse=True)
def _propagate_cascadoc_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    # configure_logging() detaches the logger from the root; caplog needs it attached.
    monkeypatch.setattr(logging.getLogger("cascadoc"), "propagate", True)
