from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from pkgfiles.domain.errors import ForbiddenPath

PathLike = Union[str, os.PathLike]


def guard_path(full_path: PathLike, containing_dir: PathLike) -> Path:
    """
    Return ``full_path`` if it lexically stays inside ``containing_dir``.

    Both paths are normalized first, so ``..`` segments are collapsed before
    the containment check. Raises ForbiddenPath otherwise.
    """
    full = os.path.normpath(os.fspath(full_path))
    root = os.path.normpath(os.fspath(containing_dir))
    if full != root and not full.startswith(root.rstrip(os.sep) + os.sep):
        raise ForbiddenPath(f"Forbidden path: {full_path}")
    return Path(full)
