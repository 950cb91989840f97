"""
Version resolution against a registry index.

A version specifier is tried, in order, as a dist-tag, as a known version
string and finally as an npm-style semver range, in which case the highest
published version satisfying the range wins.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

import semantic_version

from pkgfiles.domain.errors import RegistryError, RegistryNotFound, VersionNotFound
from pkgfiles.domain.models import RegistryIndex, ResolvedVersion

logger = logging.getLogger(__name__)


def is_exact_version(version_spec: str) -> bool:
    """True if the specifier is a literal semantic version (no tag, no range)."""
    return bool(version_spec) and bool(semantic_version.validate(version_spec))


def _known_versions(index: RegistryIndex) -> Dict[semantic_version.Version, str]:
    known: Dict[semantic_version.Version, str] = {}
    for key in index.versions:
        try:
            known[semantic_version.Version(key)] = key
        except ValueError:
            logger.debug(f"Ignoring non-semver version key {key!r}")
    return known


def max_satisfying(index: RegistryIndex, version_range: str) -> Optional[str]:
    try:
        spec = semantic_version.NpmSpec(version_range)
    except ValueError:
        return None
    known = _known_versions(index)
    best = spec.select(known.keys())
    return known[best] if best is not None else None


def resolve_version(index: Optional[RegistryIndex], version_spec: str) -> ResolvedVersion:
    if index is None:
        raise RegistryNotFound("Package not found in registry")
    if index.error:
        if index.error == "Not Found":
            raise RegistryNotFound("Package not found in registry")
        raise RegistryError(index.error)

    was_dist_tag = False
    if version_spec in index.dist_tags:
        was_dist_tag = True
        exact = index.dist_tags[version_spec]
    elif version_spec in index.versions:
        exact = version_spec
    else:
        exact = max_satisfying(index, version_spec)
        if exact is None:
            raise VersionNotFound(f"No version matching {version_spec!r}")

    record = index.versions.get(exact)
    if record is None:
        raise VersionNotFound(f"Version {exact!r} is not published")

    return ResolvedVersion(exact_version=exact, version_record=record, was_dist_tag=was_dist_tag)
