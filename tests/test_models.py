"""Tests for cascadoc.models."""

from __future__ import annotations

import logging

import pytest

from cascadoc.models import DEFAULT_PORT, ENV_CONVERTER, ENV_PORT, BuildOptions


def test_from_env_reads_environment_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_CONVERTER, "pandoc3")
    monkeypatch.setenv(ENV_PORT, "9001")

    options = BuildOptions.from_env(port=None, recursive=True)

    assert options.converter == "pandoc3"
    assert options.port == 9001
    assert options.recursive is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_PORT, "9001")
    assert BuildOptions.from_env(port=8080).port == 8080


def test_from_env_warns_on_invalid_port(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv(ENV_PORT, "80OO")

    with caplog.at_level(logging.WARNING, logger="cascadoc"):
        options = BuildOptions.from_env()

    assert options.port == DEFAULT_PORT
    assert "Ignoring invalid CASCADOC_PORT='80OO'" in caplog.text
