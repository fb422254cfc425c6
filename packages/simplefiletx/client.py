"""Thin httpx client wrappers with the file transport mounted.

Only the ``file://`` scheme is routed to the file transport; every other
scheme keeps httpx's default network transport.

httpx treats any URL without a host as relative and merges it onto the
client's ``base_url``, which drops the ``file`` scheme from ``file:/x``,
``file:///x`` and ``file:relative``. The wrappers below pin the caller's URL
back onto ``file:`` requests before sending them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .openers import Opener
from .response import DEFAULT_CHUNK_SIZE
from .transport import (
    AsyncFileTransport,
    FileTransport,
    create_async_file_transport,
    create_file_transport,
)

FILE_MOUNT = "file://"


def file_mounts(
    transport: httpx.BaseTransport | httpx.AsyncBaseTransport,
) -> dict[str, httpx.BaseTransport | httpx.AsyncBaseTransport]:
    """Return an httpx ``mounts`` mapping routing ``file:`` URLs to ``transport``."""
    return {FILE_MOUNT: transport}


def is_file_url(url: httpx.URL | str) -> bool:
    """Return whether ``url`` names the ``file`` scheme."""
    return httpx.URL(url).scheme == "file"


def _pin_file_url(request: httpx.Request, url: httpx.URL | str) -> httpx.Request:
    if is_file_url(url):
        request.url = httpx.URL(url)
    return request


class HttpClient:
    """Thin synchronous wrapper over ``httpx.Client`` serving ``file:`` URLs."""

    def __init__(
        self,
        *,
        base_dir: str = "",
        opener: Opener | None = None,
        transport: FileTransport | None = None,
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: httpx.Client | None = None,
    ) -> None:
        """Create a client; ``transport`` overrides ``base_dir``/``opener``."""
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            follow_redirects=follow_redirects,
            mounts=file_mounts(
                transport
                or create_file_transport(base_dir, opener=opener, chunk_size=chunk_size)
            ),
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        stream: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request; ``stream=True`` leaves the body unread."""
        request = _pin_file_url(self._client.build_request(method, url, **kwargs), url)
        return self._client.send(request, stream=stream)

    def get(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        """Issue one GET request."""
        return self.request("GET", url, **kwargs)


class AsyncHttpClient:
    """Thin asynchronous wrapper over ``httpx.AsyncClient`` serving ``file:`` URLs."""

    def __init__(
        self,
        *,
        base_dir: str = "",
        opener: Opener | None = None,
        transport: AsyncFileTransport | None = None,
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client; ``transport`` overrides ``base_dir``/``opener``."""
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            follow_redirects=follow_redirects,
            mounts=file_mounts(
                transport
                or create_async_file_transport(
                    base_dir, opener=opener, chunk_size=chunk_size
                )
            ),
        )

    async def aclose(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        stream: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request; ``stream=True`` leaves the body unread."""
        request = _pin_file_url(self._client.build_request(method, url, **kwargs), url)
        return await self._client.send(request, stream=stream)

    async def get(self, url: httpx.URL | str, **kwargs: Any) -> httpx.Response:
        """Issue one GET request."""
        return await self.request("GET", url, **kwargs)
