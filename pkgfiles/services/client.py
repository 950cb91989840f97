"""
Client that turns a file address into a local file path.

Packages are extracted once per exact version under
``<cache_dir>/files/<name>/<version>`` and reused afterwards. Addresses that
name an exact version are served from disk without touching the network once
the version has been extracted; dist-tags and ranges are always re-resolved
against the (cached) registry index.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import uuid
import weakref
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
import httpx

from pkgfiles.core.config import ClientSettings
from pkgfiles.domain.address import parse_address
from pkgfiles.domain.errors import EmptyAddress, RegistryError
from pkgfiles.domain.models import Address, ResolvedVersion
from pkgfiles.domain.paths import guard_path
from pkgfiles.domain.versions import is_exact_version, resolve_version
from pkgfiles.services.archive import ArchiveFetcher
from pkgfiles.storage.index_cache import IndexCache

logger = logging.getLogger(__name__)


class PackageFileClient:
    """
    Fetch single files out of registry packages.

    Either pass a ClientSettings or the individual settings as keyword
    arguments (``scope``, ``token``, ``cache_dir``, ...). ``transport`` is
    handed to every httpx client the package opens.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs,
    ):
        if settings is None:
            settings = ClientSettings(**kwargs)
        elif kwargs:
            settings = settings.model_copy(update=kwargs)
        self.settings = settings
        self.cache_dir = Path(settings.cache_dir)

        authorization = settings.basic_authorization()
        self.index_cache = IndexCache(
            self.cache_dir, authorization, transport=transport, timeout=settings.http_timeout
        )
        self.fetcher = ArchiveFetcher(authorization, transport=transport, timeout=settings.http_timeout)
        # Entries vanish once no caller holds the lock any more.
        self._extract_locks: "weakref.WeakValueDictionary[Tuple[str, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    @property
    def files_root(self) -> Path:
        return self.cache_dir / "files"

    def download_dir(self, name: str, exact_version: str) -> Path:
        return guard_path(self.files_root / name / exact_version, self.files_root)

    def parse(self, address: str) -> Address:
        if not address:
            raise EmptyAddress("Empty file address")
        return parse_address(address, self.settings.registry_base, self.settings.scope)

    def get_local_path(self, address: str) -> Optional[Path]:
        """
        Where an exact-version address lives on disk, without checking that it
        has been downloaded. None for dist-tags and ranges.
        """
        parsed = self.parse(address)
        if not is_exact_version(parsed.version_spec):
            return None
        dl_dir = self.download_dir(parsed.name, parsed.version_spec)
        return guard_path(dl_dir / parsed.file_path, dl_dir)

    async def download_file(self, address: str) -> Path:
        parsed = self.parse(address)

        if is_exact_version(parsed.version_spec):
            cached = await self._cached_file(parsed)
            if cached is not None:
                return cached

        index = await self.index_cache.get(
            parsed.name, parsed.registry_url, self.settings.index_expiry_ms
        )
        resolved = resolve_version(index, parsed.version_spec)
        if resolved.was_dist_tag:
            logger.debug(f"{parsed.name}@{parsed.version_spec} is {resolved.exact_version}")

        dl_dir = self.download_dir(parsed.name, resolved.exact_version)
        await self._ensure_extracted(parsed.name, resolved, dl_dir)
        return guard_path(dl_dir / parsed.file_path, dl_dir)

    async def read_text(self, address: str, encoding: str = "utf-8") -> str:
        path = await self.download_file(address)
        async with aiofiles.open(path, "r", encoding=encoding) as f:
            return await f.read()

    async def _cached_file(self, parsed: Address) -> Optional[Path]:
        dl_dir = self.download_dir(parsed.name, parsed.version_spec)
        full_path = guard_path(dl_dir / parsed.file_path, dl_dir)
        try:
            await aiofiles.os.stat(full_path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        logger.debug(f"Serving {full_path} from local cache")
        return full_path

    async def _ensure_extracted(self, name: str, resolved: ResolvedVersion, dl_dir: Path) -> None:
        key = (name, resolved.exact_version)
        lock = self._extract_locks.get(key)
        if lock is None:
            lock = self._extract_locks[key] = asyncio.Lock()
        async with lock:
            # The download directory only ever appears by renaming a fully
            # extracted staging directory, so its existence means complete.
            if await aiofiles.os.path.isdir(dl_dir):
                return

            tarball_url = resolved.tarball_url
            if not tarball_url:
                raise RegistryError(f"{name}@{resolved.exact_version} has no tarball URL")

            staging_dir = dl_dir.parent / f".{dl_dir.name}.{uuid.uuid4().hex}.staging"
            try:
                await self.fetcher.fetch_and_extract(tarball_url, staging_dir)
                try:
                    await aiofiles.os.rename(staging_dir, dl_dir)
                except OSError:
                    if not await aiofiles.os.path.isdir(dl_dir):
                        raise
                    logger.info(f"{name}@{resolved.exact_version} was extracted concurrently")
                else:
                    logger.info(f"Extracted {name}@{resolved.exact_version} to {dl_dir}")
            finally:
                if await aiofiles.os.path.exists(staging_dir):
                    await asyncio.to_thread(shutil.rmtree, staging_dir, True)
