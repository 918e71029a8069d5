"""Tests for cascadoc.tree."""

from __future__ import annotations

from pathlib import Path

from cascadoc import patterns
from cascadoc.tree import list_tree
from tests._fixtures.site_builder import SiteBuilder


def _names(paths: list[Path]) -> set[str]:
    return {path.name for path in paths}


def test_missing_path_lists_nothing(tmp_path: Path) -> None:
    listing = list_tree(tmp_path / "missing")
    assert listing.files == []
    assert listing.directories == []


def test_file_lists_itself(site_builder: SiteBuilder) -> None:
    site_builder.write({"post.md": "# Post\n"})
    listing = list_tree(site_builder.path("post.md"))
    assert listing.files == [site_builder.path("post.md")]
    assert listing.directories == []


def test_non_recursive_listing_partitions_children(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "index.md": "# Home\n",
            "defaults.yaml": "template: site.html\n",
            "posts/first.md": "# First\n",
            "_templates/site.html": "$body$\n",
        }
    )
    listing = list_tree(site_builder.root, exclude=patterns.CONFIG)

    assert _names(listing.files) == {"index.md", "defaults.yaml"}
    assert _names(listing.directories) == {"posts"}


def test_recursive_listing_folds_files_and_honours_exclusions(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "index.md": "# Home\n",
            "posts/first.md": "# First\n",
            "posts/_draft.md": "# Draft\n",
            "posts/2020/old.md": "# Old\n",
            "_site/index.html": "<p></p>\n",
            ".git/config": "[core]\n",
        }
    )
    listing = list_tree(site_builder.root, recursive=True, exclude=patterns.CONFIG)

    assert listing.directories == []
    assert _names(listing.files) == {"index.md", "first.md", "old.md"}
    for path in listing.files:
        relative = path.relative_to(site_builder.root)
        assert not any(patterns.is_config(part) for part in relative.parts)
