"""Tests for cascadoc.patterns."""

from __future__ import annotations

import pytest

from cascadoc import patterns


@pytest.mark.parametrize(
    ("name", "kind"),
    [
        ("defaults.yaml", "metadata"),
        ("site.YML", "metadata"),
        ("post.md", "source"),
        ("post.markdown", "source"),
        ("notes.md.txt", "source"),
        ("refs.bib", "bibliography"),
        ("style.css", "other"),
        ("README", "other"),
    ],
)
def test_classify_assigns_kind(name: str, kind: str) -> None:
    assert patterns.classify(name) == kind


def test_config_and_general_are_complementary() -> None:
    assert patterns.is_config("_templates")
    assert patterns.is_config(".git")
    assert not patterns.is_general("_drafts")
    assert patterns.is_general("posts")
    assert not patterns.is_config("posts")


def test_unmatched_names_fail_every_content_predicate() -> None:
    assert patterns.matching_patterns("image.png") == frozenset({"general"})


def test_classification_is_stable_across_calls() -> None:
    names = ["_site.yaml", "post.md", "refs.bib", "logo.svg", ".hidden.md.txt"]
    first = [patterns.matching_patterns(name) for name in names]
    second = [patterns.matching_patterns(name) for name in names]
    assert first == second
    assert first[0] == frozenset({"config", "metadata"})
    assert first[4] == frozenset({"config", "source"})
