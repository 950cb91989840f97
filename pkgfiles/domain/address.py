"""
Parsing of ``[@scope/]name@versionSpec/relative/file/path`` addresses.
"""
from __future__ import annotations

from urllib.parse import quote

from pkgfiles.domain.errors import InvalidAddress
from pkgfiles.domain.models import Address


def registry_url_for(registry_base: str, scope: str, name: str) -> str:
    """
    Index URL for a package. Registries expect the scope marker unescaped,
    so a leading ``%40`` goes back to ``@``.
    """
    encoded = quote(name, safe="")
    if encoded.startswith("%40"):
        encoded = "@" + encoded[3:]
    return f"{registry_base.rstrip('/')}/{scope}/{encoded}"


def parse_address(address: str, registry_base: str, scope: str) -> Address:
    segments = [s for s in (address or "").split("/") if s]
    if len(segments) < 2:
        raise InvalidAddress(f"Invalid file address: {address!r}")

    name_with_version = segments.pop(0)
    if name_with_version.startswith("@"):
        name_with_version += "/" + segments.pop(0)
        if not segments:
            raise InvalidAddress(f"No file path in address: {address!r}")

    parts = name_with_version.split("@")
    if len(parts) == 3 and parts[0] == "":
        name, version_spec = f"@{parts[1]}", parts[2]
    elif len(parts) == 2:
        name, version_spec = parts
    else:
        raise InvalidAddress(f"Expected name@version in address: {address!r}")

    if not name or name == "@" or name.endswith("/") or not version_spec:
        raise InvalidAddress(f"Expected name@version in address: {address!r}")
    if any(part in ("", ".", "..") for part in name.lstrip("@").split("/")):
        raise InvalidAddress(f"Invalid package name in address: {address!r}")

    return Address(
        name=name,
        version_spec=version_spec,
        registry_url=registry_url_for(registry_base, scope, name),
        file_path="/".join(segments),
    )
