"""
Download a single package file and print its local path.

    PKGFILES_SCOPE=my-org PKGFILES_TOKEN=... python -m pkgfiles @my-org/ui@latest/dist/theme.css
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import tarfile
from pathlib import Path
from typing import List, Optional

import httpx

from pkgfiles.core.config import load_settings
from pkgfiles.domain.errors import PackageFileError
from pkgfiles.services.client import PackageFileClient


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="pkgfiles", description=__doc__.strip().splitlines()[0])
    parser.add_argument("address", help="[@scope/]name@version/path/to/file")
    parser.add_argument("--cache-dir", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        client = PackageFileClient(load_settings(cache_dir=args.cache_dir))
        path = asyncio.run(client.download_file(args.address))
    except (PackageFileError, httpx.HTTPError, tarfile.TarError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
