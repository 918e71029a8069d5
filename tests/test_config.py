"""Tests for cascadoc.config."""

from __future__ import annotations

import datetime as dt

from cascadoc.config import (
    as_str,
    as_str_list,
    collect,
    load_document_metadata,
    read_front_matter,
    read_metadata,
)
from tests._fixtures.site_builder import SiteBuilder


def test_read_metadata_parses_mapping(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "site.yaml": """
            canonical: https://example.org
            feed:
              file: feed.xml
            filters: [pandoc-crossref, links.lua]
            """
        }
    )
    metadata = read_metadata(site_builder.path("site.yaml"))

    assert metadata == {
        "canonical": "https://example.org",
        "feed": {"file": "feed.xml"},
        "filters": ["pandoc-crossref", "links.lua"],
    }


def test_read_metadata_treats_unusable_documents_as_empty(site_builder: SiteBuilder) -> None:
    site_builder.write({"bad.yaml": "key: [\n", "scalar.yaml": "just text\n"})

    assert read_metadata(site_builder.path("bad.yaml")) == {}
    assert read_metadata(site_builder.path("scalar.yaml")) == {}
    assert read_metadata(site_builder.path("missing.yaml")) == {}


def test_read_front_matter_extracts_leading_block(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "post.md": """
            ---
            title: Hello
            date: 2021-06-15
            ...

            Body text.
            """
        }
    )
    metadata = read_front_matter(site_builder.path("post.md"))

    assert metadata == {"title": "Hello", "date": dt.date(2021, 6, 15)}


def test_read_front_matter_ignores_documents_without_block(site_builder: SiteBuilder) -> None:
    site_builder.write({"plain.md": "# Title\n\n---\ntitle: no\n---\n"})

    assert read_front_matter(site_builder.path("plain.md")) == {}


def test_sibling_metadata_overrides_front_matter(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "post/index.md": "---\ntitle: Front\nauthor: Ada\n---\nBody\n",
            "post/metadata.yaml": "title: Sibling\n",
        }
    )
    metadata = load_document_metadata(site_builder.path("post/index.md"), "metadata.yaml")

    assert metadata == {"title": "Sibling", "author": "Ada"}


def test_coercion_helpers() -> None:
    assert as_str(3) == "3"
    assert as_str(True) == "true"
    assert as_str(["x"]) is None
    assert as_str_list("one") == ["one"]
    assert as_str_list(["a", 1, {"b": 2}]) == ["a", "1"]
    assert collect({"filter": "a", "filters": ["b", "c"]}, "filter", "filters") == ["a", "b", "c"]
