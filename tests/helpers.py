"""Constants and archive builders shared by the test modules."""

from __future__ import annotations

import io
import tarfile
from typing import Dict, List, Optional

REGISTRY = "https://registry.test"
BLOBS = "https://blobs.test"
SCOPE = "acme"
TOKEN = "s3cret"


def make_tarball(
    files: Dict[str, bytes],
    prefix: str = "package",
    compress: bool = True,
    extra_members: Optional[List[tarfile.TarInfo]] = None,
) -> bytes:
    """Build a tarball with every file wrapped in a single top-level folder."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz" if compress else "w") as tar:
        root = tarfile.TarInfo(prefix)
        root.type = tarfile.DIRTYPE
        tar.addfile(root)
        for name, content in files.items():
            info = tarfile.TarInfo(f"{prefix}/{name}")
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
        for member in extra_members or []:
            tar.addfile(member)
    return buffer.getvalue()

