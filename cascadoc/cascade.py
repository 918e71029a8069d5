"""Cascading resolution of per-directory configuration documents.

Metadata is folded with a single rule: a key already present in the running
(closer to the document) mapping is never overwritten by a mapping found later
in the walk. The walk visits the document directory's subtree first and then
each ancestor up to the working root, so local configuration always wins over
inherited site defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from . import patterns
from .config import read_metadata
from .logging import get_logger
from .tree import list_tree

METADATA_FILES_KEY = "metadata-files"

Metadata = Dict[str, Any]

logger = get_logger("cascade")


def merge_metadata(target: Mapping[str, Any], source: Mapping[str, Any]) -> Metadata:
    """Return ``target`` with keys it lacks filled in from ``source``.

    The contributing file list is the exception: it is concatenated and
    deduplicated, keeping ``target``'s order first.
    """
    merged: Metadata = dict(target)
    for key, value in source.items():
        if key == METADATA_FILES_KEY:
            continue
        if key not in merged:
            merged[key] = value
    files = _merge_files(target.get(METADATA_FILES_KEY), source.get(METADATA_FILES_KEY))
    if files:
        merged[METADATA_FILES_KEY] = files
    return merged


def metadata_files(metadata: Mapping[str, Any]) -> List[str]:
    """Return the configuration documents that contributed to ``metadata``."""
    value = metadata.get(METADATA_FILES_KEY)
    return list(value) if isinstance(value, list) else []


def resolve_local(path: Path | str, seed: Optional[Mapping[str, Any]] = None) -> Metadata:
    """Fold every configuration document found under ``path`` into ``seed``.

    Subdirectories are walked depth-first before the directory's own files;
    entries matching the config pattern are never visited.
    """
    metadata: Metadata = dict(seed or {})
    listing = list_tree(path, recursive=False, exclude=patterns.CONFIG)

    for directory in listing.directories:
        metadata = resolve_local(directory, metadata)

    for file_path in listing.files:
        if not patterns.is_metadata(file_path.name):
            continue
        parsed = read_metadata(file_path)
        if not parsed:
            logger.debug("Config %s contributes nothing", file_path)
            continue
        parsed.pop(METADATA_FILES_KEY, None)
        metadata = merge_metadata(metadata, parsed)
        _record_file(metadata, str(file_path.resolve()))
    return metadata


def resolve_ancestors(
    path: Path | str,
    seed: Optional[Mapping[str, Any]] = None,
    *,
    working_root: Path | str | None = None,
) -> Metadata:
    """Resolve ``path``'s local cascade and then every ancestor up to the working root.

    The walk stops once the current directory's path is no longer than the
    working root's; the comparison is on string length, not containment.
    """
    seed_metadata: Metadata = dict(seed or {})
    root = os.path.normpath(os.path.abspath(working_root or os.getcwd()))

    current = os.path.normpath(os.path.abspath(path))
    if not os.path.isdir(current):
        current = os.path.dirname(current)

    metadata = resolve_local(current, seed_metadata)
    while len(current) > len(root):
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
        metadata = merge_metadata(metadata, resolve_local(current))

    return merge_metadata(seed_metadata, metadata)


def _record_file(metadata: Metadata, file_path: str) -> None:
    files = metadata_files(metadata)
    if file_path not in files:
        files.append(file_path)
    metadata[METADATA_FILES_KEY] = files


def _merge_files(first: Any, second: Any) -> List[str]:
    files: List[str] = []
    for group in (first, second):
        if not isinstance(group, list):
            continue
        for item in group:
            if item not in files:
                files.append(item)
    return files


__all__ = [
    "METADATA_FILES_KEY",
    "merge_metadata",
    "metadata_files",
    "resolve_ancestors",
    "resolve_local",
]
