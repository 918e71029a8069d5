"""Directory listing used by the cascade resolver and the converter."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from .models import Listing


def list_tree(
    path: Path | str,
    *,
    recursive: bool = False,
    exclude: Optional[re.Pattern[str]] = None,
) -> Listing:
    """List ``path`` into files and directories.

    A missing path yields an empty listing and a file yields itself. Children
    whose basename matches ``exclude`` are dropped entirely. With ``recursive``
    the files of every non-excluded subdirectory are folded into ``files`` and
    ``directories`` stays empty. Ordering follows filesystem enumeration.
    """
    root = Path(path)
    listing = Listing()
    if not root.exists():
        return listing
    if not root.is_dir():
        listing.files.append(root)
        return listing

    with os.scandir(root) as entries:
        for entry in entries:
            if exclude is not None and exclude.search(entry.name):
                continue
            child = root / entry.name
            if entry.is_dir():
                if recursive:
                    listing.files.extend(
                        list_tree(child, recursive=True, exclude=exclude).files
                    )
                else:
                    listing.directories.append(child)
            else:
                listing.files.append(child)
    return listing


__all__ = ["list_tree"]
