"""Core data models shared across cascadoc components."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .logging import get_logger
from .stores import BuildCache

DEFAULT_CONVERTER = "pandoc"
DEFAULT_PORT = 8000
ENV_CONVERTER = "CASCADOC_CONVERTER"
ENV_PORT = "CASCADOC_PORT"

EVENT_CHANGED = "changed"
EVENT_ADDED = "added"
EVENT_REMOVED = "removed"


@dataclass(frozen=True)
class BuildOptions:
    """Run-wide settings fixed once the command line has been parsed."""

    converter: str = DEFAULT_CONVERTER
    port: int = DEFAULT_PORT
    host: str = "127.0.0.1"
    watch_path: Optional[str] = None
    latency: float = 0.5
    settle: float = 0.2
    recursive: bool = False
    preview: bool = False
    dry: bool = False
    feed: bool = False
    extra: Tuple[str, ...] = ()

    @classmethod
    def from_env(cls, **overrides: object) -> "BuildOptions":
        """Build options using environment defaults, with explicit overrides applied on top."""
        values: dict[str, object] = {}
        converter = os.environ.get(ENV_CONVERTER)
        if converter:
            values["converter"] = converter
        port = os.environ.get(ENV_PORT)
        if port:
            try:
                values["port"] = int(port)
            except ValueError:
                get_logger("config").warning(
                    "Ignoring invalid %s=%r; using port %d", ENV_PORT, port, DEFAULT_PORT
                )
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]

    @property
    def caches_output(self) -> bool:
        """True when successful builds must keep their stdout in the build cache."""
        return self.preview or self.feed


@dataclass(frozen=True)
class BuildContext:
    """Process-scoped state consulted by every component."""

    working_root: Path
    options: BuildOptions = field(default_factory=BuildOptions)
    cache: BuildCache = field(default_factory=BuildCache)

    @classmethod
    def create(
        cls, options: BuildOptions | None = None, working_root: Path | None = None
    ) -> "BuildContext":
        root = (working_root or Path.cwd()).expanduser().resolve()
        return cls(working_root=root, options=options or BuildOptions())

    def identifier(self, path: Path | str) -> str:
        """Return the document identifier (working-root relative, posix) for a path."""
        absolute = Path(path)
        if not absolute.is_absolute():
            absolute = self.working_root / absolute
        relative = os.path.relpath(os.path.normpath(absolute), self.working_root)
        if relative == os.curdir:
            return ""
        return Path(relative).as_posix()


@dataclass
class Listing:
    """Files and directories found under a listed path."""

    files: List[Path] = field(default_factory=list)
    directories: List[Path] = field(default_factory=list)


@dataclass(frozen=True)
class ConversionResult:
    """Captured outcome of one converter process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class WatchEvent:
    """Filesystem change reported by the watch loop."""

    kind: str
    path: str
