"""
On-disk cache of registry index documents.

Each package's index lives at ``<cache_dir>/index/<name>/index.json``; the
file's mtime is the time it was fetched.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Optional, Tuple

import aiofiles
import aiofiles.os
import httpx
from pydantic import ValidationError

from pkgfiles.domain.errors import RegistryError
from pkgfiles.domain.models import CacheEntry, RegistryIndex, index_from_json

logger = logging.getLogger(__name__)

INDEX_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8, */*"


def _now_ms() -> int:
    return int(time.time() * 1000)


class IndexCache:
    def __init__(
        self,
        cache_dir: Path,
        authorization: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 60.0,
    ):
        self.cache_dir = Path(cache_dir)
        self._authorization = authorization
        self._transport = transport
        self._timeout = timeout

    def index_path(self, name: str) -> Path:
        return self.cache_dir / "index" / name / "index.json"

    async def read_entry(self, name: str) -> CacheEntry:
        """Read the persisted entry; a missing or unreadable file is an empty entry."""
        path = self.index_path(name)
        try:
            stat = await aiofiles.os.stat(path)
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                index = index_from_json(json.loads(await f.read()))
        except FileNotFoundError:
            return CacheEntry()
        except ValueError as e:
            # Covers bad JSON as well as documents that fail validation.
            logger.warning(f"Discarding unreadable index cache {path}: {e}")
            return CacheEntry()

        return CacheEntry(index=index, fetched_at_ms=int(stat.st_mtime * 1000))

    async def get(
        self,
        name: str,
        registry_url: str,
        expiry_ms: int = 30_000,
    ) -> Optional[RegistryIndex]:
        entry = await self.read_entry(name)
        if not entry.is_stale(_now_ms(), expiry_ms):
            logger.debug(f"Index cache hit for {name}")
            return entry.index

        logger.debug(f"Index cache miss for {name}, fetching {registry_url}")
        raw, index = await self._fetch(registry_url)
        await self._persist(name, raw)
        return index

    async def _fetch(self, registry_url: str) -> Tuple[Any, Optional[RegistryIndex]]:
        headers = {
            "Authorization": self._authorization,
            "Accept": INDEX_ACCEPT,
        }
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.get(registry_url, headers=headers)

        try:
            raw = response.json()
        except ValueError:
            raise RegistryError(
                f"Registry returned a non-JSON response ({response.status_code}) for {registry_url}",
                status_code=response.status_code,
            )

        try:
            return raw, index_from_json(raw)
        except ValidationError as e:
            raise RegistryError(
                f"Registry returned a malformed index ({response.status_code}) for {registry_url}: {e}",
                status_code=response.status_code,
            )

    async def _persist(self, name: str, raw) -> None:
        path = self.index_path(name)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)

        # Write then rename so readers never see a truncated document.
        tmp_path = path.with_name(f"index.json.{uuid.uuid4().hex}.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(raw))
        await aiofiles.os.replace(tmp_path, path)
