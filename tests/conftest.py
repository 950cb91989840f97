"""Shared fixtures: an in-memory npm-style registry behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from pkgfiles.core.config import ClientSettings
from pkgfiles.services.client import PackageFileClient

from .helpers import BLOBS, REGISTRY, SCOPE, TOKEN, make_tarball


class FakeRegistry:
    """
    Serves package indexes, tarball redirects and blobs.

    ``publish`` registers a version; requests are counted per kind so tests
    can assert how much network traffic an operation caused.
    """

    def __init__(self) -> None:
        self.packages: Dict[str, dict] = {}
        self.blobs: Dict[str, bytes] = {}
        self.index_requests = 0
        self.tarball_requests = 0
        self.blob_requests = 0
        self.blob_status = 200
        self.seen_headers: List[httpx.Headers] = []

    def publish(self, name: str, version: str, files: Dict[str, bytes], tags: Optional[List[str]] = None,
                tarball: Optional[bytes] = None) -> None:
        doc = self.packages.setdefault(name, {"name": name, "dist-tags": {}, "versions": {}})
        doc["versions"][version] = {
            "name": name,
            "version": version,
            "dist": {"tarball": f"{REGISTRY}/download/{name}/{version}.tgz"},
        }
        for tag in tags or []:
            doc["dist-tags"][tag] = version
        self.blobs[f"/{name}/{version}.tgz"] = tarball if tarball is not None else make_tarball(files)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.seen_headers.append(request.headers)
        path = unquote(request.url.raw_path.decode("ascii"))

        if request.url.host == "blobs.test":
            self.blob_requests += 1
            if "authorization" in request.headers:
                return httpx.Response(400, text="blob requests must not carry credentials")
            if self.blob_status != 200:
                return httpx.Response(self.blob_status)
            body = self.blobs.get(path)
            if body is None:
                return httpx.Response(404)
            return httpx.Response(200, content=body, headers={"content-type": "application/octet-stream"})

        if "authorization" not in request.headers:
            return httpx.Response(401, json={"error": "Unauthorized"})

        if path.startswith("/download/"):
            self.tarball_requests += 1
            return httpx.Response(302, headers={"location": f"{BLOBS}{path[len('/download'):]}"})

        self.index_requests += 1
        prefix = f"/{SCOPE}/"
        name = path[len(prefix):] if path.startswith(prefix) else None
        if name not in self.packages:
            return httpx.Response(404, json={"error": "Not Found"})
        return httpx.Response(200, content=json.dumps(self.packages[name]).encode("utf-8"))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def settings(tmp_path) -> ClientSettings:
    return ClientSettings(scope=SCOPE, token=TOKEN, cache_dir=tmp_path / "cache", registry_base=REGISTRY)


@pytest.fixture
def client(settings, registry) -> PackageFileClient:
    return PackageFileClient(settings, transport=registry.transport)
