"""Invocation of the external document converter."""

from __future__ import annotations

import shlex
import subprocess
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from . import patterns
from .cascade import metadata_files, resolve_ancestors
from .config import as_str, as_str_list, collect
from .logging import get_logger
from .models import BuildContext, BuildOptions, ConversionResult
from .tree import list_tree

IDENTIFIER_VARIABLE = "identifier"

Runner = Callable[..., ConversionResult]


class ConverterNotFoundError(RuntimeError):
    """Raised when the converter program cannot be executed at all."""


class Converter:
    """Derives converter parameters from resolved metadata and runs the converter."""

    def __init__(self, context: BuildContext, runner: Runner | None = None) -> None:
        self.context = context
        self._runner = runner or self._default_runner
        self.logger = get_logger("converter")

    @property
    def options(self) -> BuildOptions:
        return self.context.options

    def build(
        self,
        source: Path | str,
        seed: Optional[Mapping[str, Any]] = None,
        *,
        preload: bool = True,
        extra: Sequence[str] = (),
    ) -> int:
        """Build a source document, or every source document in a directory.

        Returns the converter exit status; for directories only the status of
        the last document processed is reported.
        """
        path = self._absolute(source)
        metadata = dict(seed or {})
        if path.is_dir():
            return self._build_directory(path, metadata, preload=preload, extra=extra)
        return self._build_file(path, metadata, preload=preload, extra=extra)

    def parameters(
        self,
        source: Path,
        metadata: Mapping[str, Any],
        extra: Sequence[str] = (),
    ) -> List[str]:
        """Return the converter arguments for ``source``, in converter order."""
        options = self.options
        document_dir = source.parent
        args: List[str] = []

        input_format = as_str(metadata.get("input-format"))
        if input_format:
            args.extend(["-f", input_format])

        output_format = as_str(metadata.get("output-format"))
        if output_format:
            args.extend(["-t", output_format])

        template = as_str(metadata.get("template"))
        if template and not options.feed:
            args.extend(["--template", template])

        for name in collect(metadata, "filter", "filters"):
            flag = "--lua-filter" if name.endswith(".lua") else "--filter"
            args.extend([flag, name])

        bibliography = as_str(metadata.get("source-bibliography"))
        if bibliography:
            bibliography_path = self._site_path(bibliography)
            if bibliography_path.is_file():
                args.extend(["--bibliography", str(bibliography_path)])

        target = as_str(metadata.get("target"))
        if target and not (options.preview or options.feed):
            args.extend(["--output", str(document_dir / target)])

        identifier = self.context.identifier(document_dir)
        if not identifier:
            self.logger.debug("%s is a top-level document", source.name)
        args.extend(["-M", f"{IDENTIFIER_VARIABLE}={identifier}"])

        for raw in collect(metadata, "raw-option", "raw-options"):
            args.extend(shlex.split(raw))

        args.extend(options.extra)
        args.extend(extra)
        args.append(str(source))

        metadata_name = as_str(metadata.get("source-metadata"))
        if metadata_name:
            sibling = document_dir / metadata_name
            if sibling.is_file():
                args.append(str(sibling))

        args.extend(metadata_files(metadata))
        return args

    def run(self, parameters: Iterable[str]) -> ConversionResult:
        """Run the converter synchronously with ``parameters`` and capture its streams."""
        args = [self.options.converter, *parameters]
        self.logger.debug("Running %s", shlex.join(args))
        return self._runner(args, cwd=self.context.working_root)

    def report(self, result: ConversionResult, label: str) -> int:
        """Log the outcome of a conversion and return its exit status."""
        stderr = result.stderr.strip()
        if result.returncode != 0:
            self.logger.error(
                "Converter failed for %s (exit %d): %s", label, result.returncode, stderr
            )
        elif stderr:
            self.logger.warning("Converter reported for %s: %s", label, stderr)
        return result.returncode

    # ------------------------------------------------------------------
    # Internal helpers

    def _build_directory(
        self,
        directory: Path,
        seed: dict[str, Any],
        *,
        preload: bool,
        extra: Sequence[str],
    ) -> int:
        metadata = seed
        if preload:
            metadata = resolve_ancestors(
                directory, seed, working_root=self.context.working_root
            )
        listing = list_tree(directory, recursive=False, exclude=patterns.CONFIG)
        source_globs = as_str_list(metadata.get("source"))

        status = 0
        for file_path in listing.files:
            if not patterns.is_source(file_path.name):
                continue
            if source_globs and not any(fnmatch(file_path.name, glob) for glob in source_globs):
                continue
            status = self._build_file(file_path, metadata, preload=False, extra=extra)

        if self.options.recursive:
            for subdirectory in listing.directories:
                status = self._build_directory(
                    subdirectory, seed, preload=preload, extra=extra
                )
        return status

    def _build_file(
        self,
        source: Path,
        seed: dict[str, Any],
        *,
        preload: bool,
        extra: Sequence[str],
    ) -> int:
        metadata = seed
        if preload:
            metadata = resolve_ancestors(
                source.parent, seed, working_root=self.context.working_root
            )
        if not patterns.is_source(source.name):
            self.logger.warning("%s does not look like a source document; building anyway", source)

        identifier = self.context.identifier(source)
        parameters = self.parameters(source, metadata, extra)
        if self.options.dry:
            self.logger.info("Would build %s (dry-run)", identifier)
            self.logger.debug("Parameters: %s", shlex.join(parameters))
            return 0

        self.logger.info("Building %s", identifier)
        result = self.run(parameters)
        status = self.report(result, identifier)
        if status == 0 and self.options.caches_output:
            self.context.cache.store(identifier, result.stdout)
        return status

    def _absolute(self, path: Path | str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.context.working_root / candidate
        return candidate

    def _site_path(self, value: str) -> Path:
        candidate = Path(value).expanduser()
        if not candidate.is_absolute():
            candidate = self.context.working_root / candidate
        return candidate

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path) -> ConversionResult:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise ConverterNotFoundError(
                f"Unable to locate converter '{args[0]}'. Install it or pass --converter."
            ) from exc
        return ConversionResult(
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


__all__ = ["Converter", "ConverterNotFoundError", "IDENTIFIER_VARIABLE", "Runner"]
