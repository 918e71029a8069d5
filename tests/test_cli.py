"""CLI argument handling tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from cascadoc import cli
from cascadoc.cli import _build_parser, split_arguments


def test_split_keeps_own_options_and_sources() -> None:
    own, passthrough = split_arguments(
        ["--recursive", "--port", "9000", "posts", "--converter=pandoc3", "index.md"]
    )
    assert own == ["--recursive", "--port", "9000", "posts", "--converter=pandoc3", "index.md"]
    assert passthrough == []


def test_split_passes_everything_after_first_foreign_option() -> None:
    own, passthrough = split_arguments(["posts", "--toc", "--preview", "-s", "notes.md"])
    assert own == ["posts"]
    assert passthrough == ["--toc", "--preview", "-s", "notes.md"]


def test_parser_reads_run_options() -> None:
    args = _build_parser().parse_args(
        ["--dry-run", "--feed", "--latency", "1.5", "--watch", "posts", "a.md"]
    )
    assert args.dry is True
    assert args.feed is True
    assert args.latency == 1.5
    assert args.watch_path == "posts"
    assert args.sources == ["a.md"]


def test_parser_reads_quiet_flag() -> None:
    own, passthrough = split_arguments(["--quiet", "a.md"])
    assert passthrough == []
    args = _build_parser().parse_args(own)
    assert args.quiet is True
    assert args.verbose is False


def test_main_rejects_absolute_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.main([str(tmp_path / "post.md")]) == 2


def test_main_rejects_missing_sources(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.main(["missing.md"]) == 2


def test_main_dry_run_succeeds_without_converter(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "index.md").write_text("# Home\n", encoding="utf-8")
    assert cli.main(["--dry-run", "--converter", "cascadoc-no-such-converter", "index.md", "--toc"]) == 0


def test_main_reports_missing_converter(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "index.md").write_text("# Home\n", encoding="utf-8")
    assert cli.main(["--converter", "cascadoc-no-such-converter", "index.md"]) == 127


def test_main_reports_feed_configuration_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "index.md").write_text("# Home\n", encoding="utf-8")
    assert cli.main(["--dry-run", "--feed"]) == 1
