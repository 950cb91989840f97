"""
Error types raised while resolving and downloading package files.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class PackageFileError(Exception):
    """Base class for every error raised by pkgfiles."""


class InvalidAddress(PackageFileError):
    """The file address could not be parsed."""


class EmptyAddress(InvalidAddress):
    """No file address was given."""


class RegistryNotFound(PackageFileError):
    """The registry has no index for the requested package."""


class RegistryError(PackageFileError):
    """The registry answered with an error document or an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class VersionNotFound(PackageFileError):
    """No published version satisfies the requested version specifier."""


class ForbiddenPath(PackageFileError):
    """A resolved path escapes the directory it must stay in."""


class HttpErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    GONE = "gone"
    TOO_MANY_REQUESTS = "too_many_requests"
    SERVER_ERROR = "server_error"
    UNEXPECTED = "unexpected"


_STATUS_KINDS = {
    400: HttpErrorKind.BAD_REQUEST,
    401: HttpErrorKind.UNAUTHORIZED,
    403: HttpErrorKind.FORBIDDEN,
    404: HttpErrorKind.NOT_FOUND,
    410: HttpErrorKind.GONE,
    429: HttpErrorKind.TOO_MANY_REQUESTS,
}


def kind_for_status(status_code: int) -> HttpErrorKind:
    """Map an HTTP status code onto a fixed error kind."""
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    if 500 <= status_code < 600:
        return HttpErrorKind.SERVER_ERROR
    return HttpErrorKind.UNEXPECTED


class HttpStatusError(PackageFileError):
    """An archive download returned a non-success status."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.kind = kind_for_status(status_code)
        self.url = url
        super().__init__(f"{self.kind.value.replace('_', ' ')} ({status_code}) for {url}")
