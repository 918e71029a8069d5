"""In-process stores shared by build, feed and preview components."""

from .build_cache import BuildCache

__all__ = ["BuildCache"]
