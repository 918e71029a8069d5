"""Name classification for site entries."""

from __future__ import annotations

import re
from typing import FrozenSet

# Names starting with "_" or "." are configuration/hidden entries and are
# never built or traversed directly.
GENERAL = re.compile(r"^[^_.]")
CONFIG = re.compile(r"^[_.]")
METADATA = re.compile(r"\.ya?ml$", re.IGNORECASE)
SOURCE = re.compile(r"\.(?:markdown|md|md\.txt)$", re.IGNORECASE)
BIBLIOGRAPHY = re.compile(r"\.bib$", re.IGNORECASE)

KIND_METADATA = "metadata"
KIND_SOURCE = "source"
KIND_BIBLIOGRAPHY = "bibliography"
KIND_OTHER = "other"


def is_general(name: str) -> bool:
    return GENERAL.search(name) is not None


def is_config(name: str) -> bool:
    return CONFIG.search(name) is not None


def is_metadata(name: str) -> bool:
    return METADATA.search(name) is not None


def is_source(name: str) -> bool:
    return SOURCE.search(name) is not None


def is_bibliography(name: str) -> bool:
    return BIBLIOGRAPHY.search(name) is not None


def classify(name: str) -> str:
    """Return the entry kind for a basename: metadata, source, bibliography or other."""
    if is_metadata(name):
        return KIND_METADATA
    if is_source(name):
        return KIND_SOURCE
    if is_bibliography(name):
        return KIND_BIBLIOGRAPHY
    return KIND_OTHER


def matching_patterns(name: str) -> FrozenSet[str]:
    """Return the names of every pattern the basename satisfies."""
    checks = (
        ("general", is_general),
        ("config", is_config),
        (KIND_METADATA, is_metadata),
        (KIND_SOURCE, is_source),
        (KIND_BIBLIOGRAPHY, is_bibliography),
    )
    return frozenset(label for label, check in checks if check(name))


__all__ = [
    "BIBLIOGRAPHY",
    "CONFIG",
    "GENERAL",
    "METADATA",
    "SOURCE",
    "classify",
    "is_bibliography",
    "is_config",
    "is_general",
    "is_metadata",
    "is_source",
    "matching_patterns",
]
