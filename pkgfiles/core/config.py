"""
Client configuration.

Settings are explicit: callers pass a ClientSettings (or keyword arguments to
the client). load_settings() builds one from environment variables for the
HTTP app and the command line entry point.
"""
from __future__ import annotations

import base64
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_REGISTRY_URL = "https://npm.pkg.github.com"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "pkgfiles"
DEFAULT_INDEX_EXPIRY_MS = 30_000

SCOPE_ENV_VAR = "PKGFILES_SCOPE"
TOKEN_ENV_VAR = "PKGFILES_TOKEN"
CACHE_DIR_ENV_VAR = "PKGFILES_CACHE_DIR"
REGISTRY_URL_ENV_VAR = "PKGFILES_REGISTRY_URL"
INDEX_EXPIRY_ENV_VAR = "PKGFILES_INDEX_EXPIRY_MS"


class ClientSettings(BaseModel):
    scope: str = Field(description="Registry scope (owner); also the basic-auth user name.")
    token: str = Field(default="", repr=False, description="Registry access token.")
    cache_dir: Path = Field(
        default=DEFAULT_CACHE_DIR,
        description="Root of the index cache and the extracted package files.",
    )
    registry_base: str = Field(default=DEFAULT_REGISTRY_URL)
    index_expiry_ms: int = Field(
        default=DEFAULT_INDEX_EXPIRY_MS,
        ge=0,
        description="How long a cached registry index is trusted before refetching.",
    )
    http_timeout: float = Field(default=60.0, gt=0)

    def basic_authorization(self) -> str:
        raw = f"{self.scope}:{self.token}".encode("utf-8")
        return "Basic " + base64.b64encode(raw).decode("ascii")


def load_settings(cache_dir: Optional[Path] = None) -> ClientSettings:
    scope = os.environ.get(SCOPE_ENV_VAR)
    if not scope:
        raise RuntimeError(f"{SCOPE_ENV_VAR} is not set")

    values = {
        "scope": scope,
        "token": os.environ.get(TOKEN_ENV_VAR, ""),
    }
    if cache_dir is not None:
        values["cache_dir"] = cache_dir
    elif os.environ.get(CACHE_DIR_ENV_VAR):
        values["cache_dir"] = Path(os.environ[CACHE_DIR_ENV_VAR]).expanduser()
    if os.environ.get(REGISTRY_URL_ENV_VAR):
        values["registry_base"] = os.environ[REGISTRY_URL_ENV_VAR]
    if os.environ.get(INDEX_EXPIRY_ENV_VAR):
        values["index_expiry_ms"] = int(os.environ[INDEX_EXPIRY_ENV_VAR])

    return ClientSettings(**values)
