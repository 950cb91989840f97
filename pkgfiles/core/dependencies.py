from typing import Optional

from pkgfiles.core.config import ClientSettings, load_settings
from pkgfiles.services.client import PackageFileClient

_settings: Optional[ClientSettings] = None
_client: Optional[PackageFileClient] = None

def get_settings() -> ClientSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings

def get_client() -> PackageFileClient:
    global _client
    if _client is None:
        _client = PackageFileClient(get_settings())
    return _client
