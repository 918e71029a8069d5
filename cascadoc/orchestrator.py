"""Run coordination for build, feed and preview flows."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .converter import Converter, Runner
from .feed import FeedAssembler
from .logging import get_logger
from .models import BuildContext, BuildOptions
from .service import create_app, run_service
from .watch import WatchLoop


class InputError(ValueError):
    """Raised when an explicit source argument cannot be built."""


class Orchestrator:
    """Coordinates one cascadoc run over a fixed working root."""

    def __init__(
        self,
        options: BuildOptions | None = None,
        *,
        working_root: Path | None = None,
        runner: Runner | None = None,
        context: BuildContext | None = None,
    ) -> None:
        self.context = context or BuildContext.create(options, working_root)
        self.converter = Converter(self.context, runner=runner)
        self.feed = FeedAssembler(self.context, self.converter)
        self.logger = get_logger("orchestrator")

    @property
    def options(self) -> BuildOptions:
        return self.context.options

    def validate_sources(self, sources: Sequence[str]) -> List[str]:
        """Reject absolute or missing sources; defaults to the working root."""
        if not sources:
            return ["."]
        validated: List[str] = []
        for source in sources:
            if Path(source).is_absolute():
                raise InputError(f"Source paths must be relative to the working root: {source}")
            if not (self.context.working_root / source).exists():
                raise InputError(f"Source not found: {source}")
            validated.append(source)
        return validated

    def build(self, sources: Sequence[str]) -> int:
        """Build every source in order; returns the status of the last one."""
        status = 0
        for source in sources:
            status = self.converter.build(source, {}, preload=True)
        return status

    def run(self, sources: Sequence[str]) -> int:
        """Validate, build, then assemble the feed and/or serve previews as configured."""
        targets = self.validate_sources(sources)
        self.logger.info("Working root %s", self.context.working_root)

        status = self.build(targets)

        if self.options.feed:
            status = self.feed.build_feed(self.context.working_root)

        if self.options.preview:
            self.serve()
        return status

    def serve(self, watch: Optional[WatchLoop] = None) -> None:
        """Watch sources and serve previews until interrupted."""
        loop = watch or WatchLoop(self.context, self.converter)
        loop.start()
        try:
            app = create_app(self.context, lambda: self.converter)
            self.logger.info(
                "Serving previews at http://%s:%d/", self.options.host, self.options.port
            )
            run_service(app, host=self.options.host, port=self.options.port)
        finally:
            loop.stop()


__all__ = ["InputError", "Orchestrator"]
