"""
HTTP endpoint serving single files out of registry packages.

``GET /files/@scope/name@1.2.0/dist/index.js`` downloads (or reuses) the
package and streams the requested file back.
"""

from __future__ import annotations

import logging
import mimetypes

import aiofiles.os
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from pkgfiles.core.dependencies import get_client
from pkgfiles.domain.errors import (
    ForbiddenPath,
    HttpStatusError,
    InvalidAddress,
    PackageFileError,
    RegistryError,
    RegistryNotFound,
    VersionNotFound,
)
from pkgfiles.services.client import PackageFileClient

logger = logging.getLogger(__name__)
router = APIRouter()


def _status_for(error: PackageFileError) -> int:
    if isinstance(error, InvalidAddress):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, ForbiddenPath):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, (RegistryNotFound, VersionNotFound)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, (HttpStatusError, RegistryError)):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.get("/files/{address:path}")
async def get_file(
    address: str,
    client: PackageFileClient = Depends(get_client),
) -> FileResponse:
    try:
        path = await client.download_file(address)
    except PackageFileError as e:
        code = _status_for(e)
        if code >= 500:
            logger.error(f"Failed to fetch {address}: {e}")
        raise HTTPException(status_code=code, detail=str(e))

    if not await aiofiles.os.path.isfile(path):
        raise HTTPException(status_code=404, detail="File not found in package")

    media_type, _ = mimetypes.guess_type(path.name)
    return FileResponse(
        path=str(path),
        filename=path.name,
        media_type=media_type or "application/octet-stream",
    )
