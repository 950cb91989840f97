"""
Download a package tarball and unpack it into a directory.

Registry tarball URLs answer with a redirect to the actual blob. The blob is
streamed to a temporary file next to the target directory, then unpacked with
the single top-level folder (``package/`` for npm tarballs) stripped.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import tarfile
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
import httpx

from pkgfiles.domain.errors import HttpStatusError
from pkgfiles.domain.paths import guard_path

logger = logging.getLogger(__name__)


def strip_top_level(entry_name: str) -> Optional[str]:
    """
    Drop the first path component of a tar entry name.

    Returns None for the top-level entry itself (nothing left after stripping).
    """
    parts = [p for p in entry_name.replace("\\", "/").split("/") if p and p != "."]
    if len(parts) < 2:
        return None
    return "/".join(parts[1:])


def extract_archive(archive_path: Path, target_dir: Path) -> int:
    """
    Unpack a (possibly gzipped) tar archive into ``target_dir``.

    Every entry is checked against ``target_dir`` before anything is written.
    Returns the number of files written.
    """
    written = 0
    with tarfile.open(archive_path, "r:*") as tar:
        for member in tar:
            relative = strip_top_level(member.name)
            if relative is None:
                if not member.isdir():
                    logger.warning(f"Skipping top-level archive entry {member.name!r}")
                continue

            destination = guard_path(target_dir / relative, target_dir)

            if member.isdir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            if not member.isfile():
                logger.warning(f"Skipping {member.name!r}: unsupported entry type")
                continue

            destination.parent.mkdir(parents=True, exist_ok=True)
            source = tar.extractfile(member)
            if source is None:
                continue
            with source, open(destination, "wb") as dst:
                shutil.copyfileobj(source, dst)
            written += 1
    return written


class ArchiveFetcher:
    def __init__(
        self,
        authorization: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
    ):
        self._authorization = authorization
        self._transport = transport
        self._timeout = timeout

    async def fetch_and_extract(self, tarball_url: str, target_dir: Path) -> None:
        target_dir = Path(target_dir)
        await aiofiles.os.makedirs(target_dir, exist_ok=True)

        archive_path = target_dir.parent / f".{target_dir.name}.{uuid.uuid4().hex}.tgz"
        try:
            await self._download(tarball_url, archive_path)
            logger.info(f"Extracting {tarball_url} into {target_dir}")
            count = await asyncio.to_thread(extract_archive, archive_path, target_dir)
            logger.debug(f"Extracted {count} files into {target_dir}")
        finally:
            if await aiofiles.os.path.exists(archive_path):
                await aiofiles.os.remove(archive_path)

    async def _download(self, tarball_url: str, archive_path: Path) -> None:
        logger.info(f"Downloading {tarball_url}")
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            async with client.stream(
                "GET",
                tarball_url,
                headers={"Authorization": self._authorization},
                follow_redirects=False,
            ) as response:
                if response.is_success:
                    await self._save(response, archive_path)
                    return
                if not response.is_redirect:
                    raise HttpStatusError(response.status_code, tarball_url)
                location = response.url.join(response.headers["location"])

            # The blob URL is pre-signed; it must not receive the registry credentials.
            async with client.stream("GET", location, follow_redirects=True) as response:
                if not response.is_success:
                    raise HttpStatusError(response.status_code, str(location))
                await self._save(response, archive_path)

    @staticmethod
    async def _save(response: httpx.Response, archive_path: Path) -> None:
        downloaded = 0
        async with aiofiles.open(archive_path, "wb") as f:
            async for chunk in response.aiter_bytes():
                await f.write(chunk)
                downloaded += len(chunk)
        logger.debug(f"Downloaded {downloaded} bytes from {response.url}")
