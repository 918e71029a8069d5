"""CLI entrypoint for cascadoc builds."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Tuple

from .config import ConfigError
from .converter import ConverterNotFoundError
from .logging import configure_logging, get_logger
from .models import BuildOptions
from .orchestrator import InputError, Orchestrator

# cascadoc's own options; the first other token starting with "-" begins the
# converter passthrough.
_FLAG_OPTIONS = {
    "--recursive",
    "--preview",
    "--dry-run",
    "--feed",
    "--verbose",
    "--quiet",
    "-h",
    "--help",
}
_VALUE_OPTIONS = {"--converter", "--port", "--host", "--watch", "--latency", "--settle", "--log-file"}


def split_arguments(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Separate cascadoc arguments from converter passthrough arguments."""
    own: List[str] = []
    index = 0
    while index < len(argv):
        arg = argv[index]
        name = arg.split("=", 1)[0]
        if name in _FLAG_OPTIONS:
            own.append(arg)
        elif name in _VALUE_OPTIONS:
            own.append(arg)
            if "=" not in arg and index + 1 < len(argv):
                index += 1
                own.append(argv[index])
        elif arg.startswith("-"):
            return own, argv[index:]
        else:
            own.append(arg)
        index += 1
    return own, []


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cascadoc",
        description=(
            "Build source documents with cascading directory configuration. "
            "Unrecognised options and everything after them are passed to the converter."
        ),
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="Source documents or directories relative to the working root (defaults to '.').",
    )
    parser.add_argument("--converter", help="Converter program (default: pandoc or $CASCADOC_CONVERTER).")
    parser.add_argument("--port", type=int, help="Preview server port (default: 8000 or $CASCADOC_PORT).")
    parser.add_argument("--host", help="Preview server bind address (default: 127.0.0.1).")
    parser.add_argument("--watch", dest="watch_path", help="Directory to watch in preview mode.")
    parser.add_argument("--latency", type=float, help="Seconds to batch filesystem events.")
    parser.add_argument("--settle", type=float, help="Seconds to wait before rebuilding a batch.")
    parser.add_argument("--recursive", action="store_true", help="Descend into subdirectories.")
    parser.add_argument("--preview", action="store_true", help="Serve rendered output and rebuild on change.")
    parser.add_argument("--dry-run", dest="dry", action="store_true", help="Resolve parameters without running the converter.")
    parser.add_argument("--feed", action="store_true", help="Assemble the syndication feed after building.")
    parser.add_argument("--verbose", action="store_true", help="Increase log verbosity for troubleshooting.")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and failures.")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for cascadoc."""
    own, passthrough = split_arguments(list(sys.argv[1:] if argv is None else argv))
    parser = _build_parser()
    args = parser.parse_args(own)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )
    logger = get_logger("cli")

    options = BuildOptions.from_env(
        converter=args.converter,
        port=args.port,
        host=args.host,
        watch_path=args.watch_path,
        latency=args.latency,
        settle=args.settle,
        recursive=args.recursive,
        preview=args.preview,
        dry=args.dry,
        feed=args.feed,
        extra=tuple(passthrough),
    )
    orchestrator = Orchestrator(options)

    try:
        return orchestrator.run(args.sources)
    except InputError as exc:
        logger.critical("%s", exc)
        return 2
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        return 1
    except ConverterNotFoundError as exc:
        logger.critical("%s", exc)
        return 127
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        return 130


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
