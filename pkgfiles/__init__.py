"""
Fetch single files out of versioned packages on a private npm registry.

    client = PackageFileClient(scope="my-org", token="...", cache_dir=Path("/var/cache/pkgfiles"))
    path = await client.download_file("@my-org/config@^2.1.0/settings/defaults.json")
"""

from pkgfiles.core.config import ClientSettings
from pkgfiles.domain.errors import (
    EmptyAddress,
    ForbiddenPath,
    HttpErrorKind,
    HttpStatusError,
    InvalidAddress,
    PackageFileError,
    RegistryError,
    RegistryNotFound,
    VersionNotFound,
)
from pkgfiles.services.client import PackageFileClient

__all__ = [
    "ClientSettings",
    "PackageFileClient",
    "PackageFileError",
    "InvalidAddress",
    "EmptyAddress",
    "RegistryNotFound",
    "RegistryError",
    "VersionNotFound",
    "ForbiddenPath",
    "HttpStatusError",
    "HttpErrorKind",
]
