from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Address(BaseModel):
    """
    A parsed file address such as ``@scope/name@1.2.0/dist/index.js``.
    """

    name: str = Field(min_length=1, description="Package name, possibly scoped (@scope/name).")
    version_spec: str = Field(description="Exact version, dist-tag or semver range.")
    registry_url: str = Field(description="URL of the package's registry index document.")
    file_path: str = Field(description="Path of the file inside the package, relative.")


class DistInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    tarball: Optional[str] = None
    shasum: Optional[str] = None
    integrity: Optional[str] = None


class VersionRecord(BaseModel):
    """One entry of the registry index ``versions`` mapping."""

    model_config = ConfigDict(extra="allow")

    version: Optional[str] = None
    dist: Optional[DistInfo] = None


class RegistryIndex(BaseModel):
    """
    The registry's index document for one package.

    Only the parts the resolver reads are typed; everything else the registry
    sends is kept as extra fields so the persisted copy round-trips.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    dist_tags: Dict[str, str] = Field(default_factory=dict, alias="dist-tags")
    versions: Dict[str, VersionRecord] = Field(default_factory=dict)
    error: Optional[str] = None


class CacheEntry(BaseModel):
    index: Optional[RegistryIndex] = None
    fetched_at_ms: int = 0

    def is_stale(self, now_ms: int, expiry_ms: int) -> bool:
        return self.index is None or now_ms >= self.fetched_at_ms + expiry_ms


class ResolvedVersion(BaseModel):
    exact_version: str
    version_record: VersionRecord
    was_dist_tag: bool = False

    @property
    def tarball_url(self) -> Optional[str]:
        dist = self.version_record.dist
        return dist.tarball if dist else None


def index_from_json(raw: Any) -> Optional[RegistryIndex]:
    """Build a RegistryIndex from decoded JSON, or None for a non-object body."""
    if not isinstance(raw, dict):
        return None
    return RegistryIndex.model_validate(raw)
