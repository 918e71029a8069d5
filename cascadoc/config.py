"""Reading of YAML configuration documents and source front matter."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .logging import get_logger

_FRONT_MATTER_OPEN = "---"
_FRONT_MATTER_CLOSE = {"---", "..."}

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or unusable."""


def read_metadata(path: Path) -> Dict[str, Any]:
    """Parse a configuration document, returning ``{}`` when it contributes nothing.

    Unreadable files, YAML syntax errors, empty documents and documents whose
    root is not a mapping are all treated as empty.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable config %s: %s", path, exc)
        return {}
    return _load_mapping(text, path)


def read_front_matter(path: Path) -> Dict[str, Any]:
    """Return the YAML front matter block of a source document, if any."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable source %s: %s", path, exc)
        return {}

    lines = text.splitlines()
    if not lines or lines[0].strip() != _FRONT_MATTER_OPEN:
        return {}
    for index in range(1, len(lines)):
        if lines[index].strip() in _FRONT_MATTER_CLOSE:
            return _load_mapping("\n".join(lines[1:index]), path)
    return {}


def load_document_metadata(source: Path, metadata_name: Optional[str]) -> Dict[str, Any]:
    """Return per-document metadata: the sibling metadata document over front matter."""
    metadata = read_front_matter(source)
    if metadata_name:
        sibling = source.parent / metadata_name
        if sibling.is_file():
            metadata.update(read_metadata(sibling))
    return metadata


def _load_mapping(text: str, path: Path) -> Dict[str, Any]:
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.debug("Skipping malformed YAML in %s: %s", path, exc)
        return {}
    if not isinstance(loaded, dict) or not loaded:
        return {}
    return loaded


def as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def collect(metadata: Dict[str, Any], *keys: str) -> List[str]:
    """Collect string values from every key present, in key order (singular then plural)."""
    values: List[str] = []
    for key in keys:
        values.extend(as_str_list(metadata.get(key)))
    return values


__all__ = [
    "ConfigError",
    "as_dict",
    "as_str",
    "as_str_list",
    "collect",
    "load_document_metadata",
    "read_front_matter",
    "read_metadata",
]
