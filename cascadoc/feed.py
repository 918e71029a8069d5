"""Syndication feed assembly from cached build output."""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .cascade import resolve_ancestors
from .config import ConfigError, as_dict, as_str, collect, load_document_metadata
from .converter import Converter
from .logging import get_logger
from .models import BuildContext

ARCHIVE_MARKER = ".archived"
BODY_TOKEN_KEY = "body"
CACHED_TOKEN_KEY = "body-token"
REQUIRED_KEYS = ("canonical", "feed", "feed.file", "feed-template", "feed-cache")
_TOKEN_FORMAT = "cascadoc-feed-body-{index:04d}-end"
_TOKEN_PATTERN = re.compile(r"cascadoc-feed-body-\d{4,}-end")


@dataclass
class FeedDocument:
    """Feed metadata handed to the converter, plus the body placeholder map."""

    canonical: str
    feed: Dict[str, Any]
    entries: List[Dict[str, Any]] = field(default_factory=list)
    tokens: Dict[str, str] = field(default_factory=dict)

    def as_metadata(self) -> Dict[str, Any]:
        return {"canonical": self.canonical, "feed": self.feed, "entry": self.entries}


def require_feed_settings(metadata: Mapping[str, Any]) -> None:
    """Raise ``ConfigError`` unless every key the feed needs is configured."""
    for key in REQUIRED_KEYS:
        if _lookup(metadata, key) in (None, "", {}):
            raise ConfigError(f"Feed configuration is missing '{key}'")


def format_timestamp(value: Any) -> Optional[str]:
    """Normalise a YAML date/datetime/string to an ISO-8601 timestamp with offset."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.isoformat(timespec="seconds")


def parse_timestamp(value: Any) -> Optional[dt.datetime]:
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime.combine(value, dt.time())
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed


class FeedAssembler:
    """Aggregates cached documents into one feed and renders it with the converter."""

    def __init__(self, context: BuildContext, converter: Converter) -> None:
        self.context = context
        self.converter = converter
        self.logger = get_logger("feed")

    def build_feed(self, site_dir: Path | str | None = None) -> int:
        """Assemble, serialise and render the feed configured at ``site_dir``."""
        site = Path(site_dir) if site_dir is not None else self.context.working_root
        metadata = resolve_ancestors(site, {}, working_root=self.context.working_root)
        require_feed_settings(metadata)

        document = self.assemble(metadata)
        self.logger.info("Feed contains %d entries", len(document.entries))

        cache_file = self._site_path(str(metadata["feed-cache"]))
        output_file = self._site_path(str(_lookup(metadata, "feed.file")))
        parameters = [
            "--template",
            str(metadata["feed-template"]),
            "-t",
            "html",
            "--output",
            str(output_file),
            str(cache_file),
        ]
        if self.context.options.dry:
            self.logger.info("Would write feed cache %s (dry-run)", cache_file)
            return 0

        write_feed_cache(cache_file, document)
        result = self.converter.run(parameters)
        status = self.converter.report(result, self.context.identifier(output_file))
        if status == 0:
            self.restore_bodies(output_file, document.tokens)
        return status

    def assemble(self, metadata: Mapping[str, Any]) -> FeedDocument:
        """Collect eligible cache entries, newest first."""
        feed = dict(as_dict(metadata.get("feed")))
        document = FeedDocument(canonical=str(metadata.get("canonical", "")), feed=feed)
        metadata_name = as_str(metadata.get("source-metadata"))

        dated: List[Tuple[dt.datetime, Dict[str, Any]]] = []
        for index, (identifier, _entry) in enumerate(self.context.cache.items()):
            source = self.context.working_root / identifier
            fields = self._entry_fields(source, metadata_name, document.canonical)
            if fields is None:
                continue
            published, entry = fields
            if (source.parent / ARCHIVE_MARKER).exists():
                self.logger.debug("Skipping archived %s", identifier)
                continue
            token = _TOKEN_FORMAT.format(index=index)
            entry[BODY_TOKEN_KEY] = token
            document.tokens[token] = identifier
            self.context.cache.update(identifier, {**entry, CACHED_TOKEN_KEY: token})
            dated.append((published, entry))

        dated.sort(key=lambda item: item[0], reverse=True)
        document.entries = [entry for _, entry in dated]
        if document.entries:
            document.feed["updated"] = document.entries[0]["published"]
        return document

    def restore_bodies(self, output_file: Path, tokens: Mapping[str, str]) -> None:
        """Swap body placeholders for cached bodies in one pass over the rendered feed.

        Inserted bodies are not rescanned, so a body that quotes a placeholder
        keeps it verbatim. Unknown placeholders are left in place.
        """
        if not tokens or not output_file.is_file():
            return
        rendered = output_file.read_text(encoding="utf-8")

        def _body(match: "re.Match[str]") -> str:
            identifier = tokens.get(match.group(0))
            body = self.context.cache.body(identifier) if identifier else None
            return match.group(0) if body is None else body

        output_file.write_text(_TOKEN_PATTERN.sub(_body, rendered), encoding="utf-8")

    # ------------------------------------------------------------------
    # Internal helpers

    def _entry_fields(
        self, source: Path, metadata_name: Optional[str], canonical: str
    ) -> Optional[Tuple[dt.datetime, Dict[str, Any]]]:
        info = load_document_metadata(source, metadata_name)
        published = parse_timestamp(info.get("date"))
        if published is None:
            return None
        updated = parse_timestamp(info.get("date-updated")) or published

        identifier = self.context.identifier(source.parent)
        entry: Dict[str, Any] = {
            "id": identifier,
            "title": as_str(info.get("title")) or "",
            "author-name": _author_name(info.get("author")),
            "published": format_timestamp(published),
            "updated": format_timestamp(updated),
            "category": collect(info, "category", "categories"),
            "link": as_str(info.get("link")) or _join_url(canonical, identifier),
        }
        return published, entry

    def _site_path(self, value: str) -> Path:
        candidate = Path(value).expanduser()
        if not candidate.is_absolute():
            candidate = self.context.working_root / candidate
        return candidate


def write_feed_cache(path: Path, document: FeedDocument) -> None:
    """Write the feed as a YAML metadata block the converter reads as input."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(document.as_metadata(), sort_keys=False, allow_unicode=True)
    path.write_text(f"---\n{text}...\n", encoding="utf-8")


def _author_name(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("name")
    return as_str(value) or ""


def _join_url(base: str, identifier: str) -> str:
    if not base:
        return identifier
    if not identifier:
        return base
    return f"{base.rstrip('/')}/{identifier}/"


def _lookup(metadata: Mapping[str, Any], dotted: str) -> Any:
    """Follow ``dotted`` through nested mappings; flat dotted keys are not read."""
    current: Any = metadata
    for part in dotted.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


__all__ = [
    "ARCHIVE_MARKER",
    "CACHED_TOKEN_KEY",
    "FeedAssembler",
    "FeedDocument",
    "format_timestamp",
    "parse_timestamp",
    "require_feed_settings",
    "write_feed_cache",
]
