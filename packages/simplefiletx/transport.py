"""httpx transports serving ``file:`` URLs.

Usage:

    transport = create_file_transport("/srv/files")
    client = httpx.Client(mounts={"file://": transport})
    client.get("file://localhost/srv/files/readme.txt").content

A bare ``httpx.Client`` only routes host-carrying ``file:`` URLs correctly;
``packages.simplefiletx.client`` wraps it to accept every form.

Each request is handled in one pass: reject non-GET methods, resolve the URL
to a path, open it through the configured opener, and synthesize a response
that owns the opened resource.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Callable, TypeVar

import httpx

from .config import FileTransportSettings
from .errors import UnsupportedMethodError
from .logging import fields, get_logger, log_context
from .openers import DefaultOpener, Opener
from .paths import resolve_path
from .response import DEFAULT_CHUNK_SIZE, SynthesizedResponse, build_response

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FileTransportConfig:
    """Immutable transport parameters shared by all requests."""

    base_dir: str
    opener: Opener
    chunk_size: int = DEFAULT_CHUNK_SIZE


def ensure_retrieval(method: str) -> None:
    """Reject any set method other than GET."""
    if method and method != "GET":
        raise UnsupportedMethodError(
            message=f"only GET method is allowed, got {method}",
            method=method,
        )


def round_trip(
    config: FileTransportConfig,
    request: httpx.Request,
    finish: Callable[[SynthesizedResponse], T],
) -> T:
    """Resolve, open and synthesize one request, then hand it to ``finish``.

    ``finish`` converts the synthesized response into what the caller returns.
    The resource is closed again if synthesis or ``finish`` fails; on success
    the returned value owns it.
    """
    url = str(request.url)
    with log_context({fields.METHOD: request.method, fields.URL: url}):
        try:
            ensure_retrieval(request.method)
            path = resolve_path(config.base_dir, request.url)
            resource = config.opener.open(path)
            try:
                synthesized = build_response(request, resource)
                response = finish(synthesized)
            except BaseException:
                resource.close()
                raise
        except Exception as exc:
            with log_context(
                {
                    fields.EVENT: fields.FILE_REQUEST_FAILED_EVENT,
                    fields.ERROR_TYPE: type(exc).__name__,
                    fields.ERROR: str(exc),
                }
            ):
                logger.warning("File request failed")
            raise

        with log_context(
            {
                fields.EVENT: fields.FILE_RESPONSE_EVENT,
                fields.PATH: path,
                fields.CONTENT_LENGTH: synthesized.content_length,
                fields.LENGTH_SOURCE: synthesized.length_source,
            }
        ):
            logger.debug("File response synthesized")
        return response


class FileTransport(httpx.BaseTransport):
    """Synchronous transport for ``httpx.Client`` mounts."""

    def __init__(self, config: FileTransportConfig) -> None:
        self._config = config

    @classmethod
    def from_settings(
        cls,
        settings: FileTransportSettings,
        *,
        opener: Opener | None = None,
    ) -> FileTransport:
        """Build a transport from one resolved settings object."""
        return cls(_config_from_settings(settings, opener))

    @property
    def config(self) -> FileTransportConfig:
        return self._config

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return round_trip(
            self._config,
            request,
            partial(SynthesizedResponse.to_httpx, chunk_size=self._config.chunk_size),
        )


class AsyncFileTransport(httpx.AsyncBaseTransport):
    """Asynchronous transport for ``httpx.AsyncClient`` mounts.

    Opening and probing run in a worker thread so the event loop is not
    blocked by filesystem calls.
    """

    def __init__(self, config: FileTransportConfig) -> None:
        self._config = config

    @classmethod
    def from_settings(
        cls,
        settings: FileTransportSettings,
        *,
        opener: Opener | None = None,
    ) -> AsyncFileTransport:
        """Build a transport from one resolved settings object."""
        return cls(_config_from_settings(settings, opener))

    @property
    def config(self) -> FileTransportConfig:
        return self._config

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await asyncio.to_thread(
            round_trip,
            self._config,
            request,
            partial(
                SynthesizedResponse.to_async_httpx, chunk_size=self._config.chunk_size
            ),
        )


def create_file_transport(
    base_dir: str = "",
    *,
    opener: Opener | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FileTransport:
    """Return a transport; ``opener`` defaults to a fresh ``DefaultOpener``."""
    return FileTransport(
        FileTransportConfig(
            base_dir=base_dir,
            opener=opener if opener is not None else DefaultOpener(),
            chunk_size=chunk_size,
        )
    )


def create_async_file_transport(
    base_dir: str = "",
    *,
    opener: Opener | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AsyncFileTransport:
    """Async counterpart of ``create_file_transport``."""
    return AsyncFileTransport(
        FileTransportConfig(
            base_dir=base_dir,
            opener=opener if opener is not None else DefaultOpener(),
            chunk_size=chunk_size,
        )
    )


def _config_from_settings(
    settings: FileTransportSettings, opener: Opener | None
) -> FileTransportConfig:
    return FileTransportConfig(
        base_dir=settings.transport.base_dir,
        opener=opener if opener is not None else DefaultOpener(),
        chunk_size=settings.transport.chunk_size,
    )
