"""Synthesize HTTP responses from opened ``file:`` resources.

The response shape is fixed: 200 OK, a header set built from resource
metadata plus a Content-Length, and the resource itself as the body. The
content length comes from exactly one source, in priority order:

1. a ``Content-Length`` value supplied by a metadata provider (authoritative)
2. ``stat().st_size``
3. an integer ``size`` attribute
4. a ``size()`` method

A resource offering none of these is rejected; unsized or chunked responses
are never produced.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import AsyncIterator, Iterator

import httpx

from .capabilities import MetadataProvider, Resource, probe_content_length
from .errors import ContentLengthUnknownError, MetadataError

CONTENT_LENGTH = "Content-Length"
DEFAULT_CHUNK_SIZE = 65_536
MAX_CONTENT_LENGTH = (1 << 63) - 1

_HEADER_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_DECIMAL = re.compile(r"[0-9]+")


def canonical_header_key(key: str) -> str:
    """Return the canonical MIME form of a header name.

    The first letter and any letter following a hyphen are upper-cased, the
    rest lower-cased. Names containing non-token characters are returned
    unchanged.
    """
    if not _HEADER_TOKEN.fullmatch(key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


@dataclass(frozen=True)
class SynthesizedResponse:
    """Fully-formed response for one ``file:`` request.

    ``proto`` says HTTP/1.0 while ``proto_minor`` says 1; both are reported
    exactly as given.
    """

    headers: tuple[tuple[str, str], ...]
    body: Resource
    content_length: int
    request: httpx.Request | None = None
    length_source: str = ""
    status_code: int = 200
    status: str = "200 OK"
    proto: str = "HTTP/1.0"
    proto_major: int = 1
    proto_minor: int = 1
    close: bool = True
    uncompressed: bool = True

    @property
    def reason_phrase(self) -> str:
        return self.status.partition(" ")[2]

    def header_values(self, name: str) -> list[str]:
        """Return every value stored for one header name."""
        wanted = canonical_header_key(name)
        return [value for key, value in self.headers if key == wanted]

    def to_httpx(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> httpx.Response:
        """Build a synchronous ``httpx.Response`` streaming the resource."""
        return httpx.Response(
            status_code=self.status_code,
            headers=list(self.headers),
            stream=ResourceByteStream(self.body, self.content_length, chunk_size),
            request=self.request,
            extensions=self._extensions(),
        )

    def to_async_httpx(
        self, *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> httpx.Response:
        """Build an asynchronous ``httpx.Response`` streaming the resource."""
        return httpx.Response(
            status_code=self.status_code,
            headers=list(self.headers),
            stream=AsyncResourceByteStream(
                self.body, self.content_length, chunk_size
            ),
            request=self.request,
            extensions=self._extensions(),
        )

    def _extensions(self) -> dict[str, object]:
        return {
            "http_version": self.proto.encode("ascii"),
            "reason_phrase": self.reason_phrase.encode("ascii"),
            "file_transport": {
                "proto_major": self.proto_major,
                "proto_minor": self.proto_minor,
                "close": self.close,
                "uncompressed": self.uncompressed,
            },
        }


class ResourceByteStream(httpx.SyncByteStream):
    """Yield at most ``content_length`` bytes from a resource, then close it."""

    def __init__(
        self,
        resource: Resource,
        content_length: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._resource = resource
        self._remaining = content_length
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        while self._remaining > 0:
            chunk = self._resource.read(min(self._chunk_size, self._remaining))
            if not chunk:
                return
            self._remaining -= len(chunk)
            yield chunk

    def close(self) -> None:
        self._resource.close()


class AsyncResourceByteStream(httpx.AsyncByteStream):
    """Async twin of ``ResourceByteStream``; blocking reads run in a thread."""

    def __init__(
        self,
        resource: Resource,
        content_length: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._resource = resource
        self._remaining = content_length
        self._chunk_size = chunk_size

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while self._remaining > 0:
            chunk = await asyncio.to_thread(
                self._resource.read, min(self._chunk_size, self._remaining)
            )
            if not chunk:
                return
            self._remaining -= len(chunk)
            yield chunk

    async def aclose(self) -> None:
        await asyncio.to_thread(self._resource.close)


def parse_content_length(values: list[str]) -> int:
    """Parse a metadata-supplied Content-Length value list."""
    if len(values) > 1:
        raise MetadataError(
            message="Content-Length cannot have multiple values",
            key=CONTENT_LENGTH,
        )
    value = values[0]
    if not _DECIMAL.fullmatch(value) or int(value) > MAX_CONTENT_LENGTH:
        raise MetadataError(
            message=f"invalid value for Content-Length: {value}",
            key=CONTENT_LENGTH,
        )
    return int(value)


def _metadata_headers(
    resource: MetadataProvider,
) -> tuple[dict[str, list[str]], int | None]:
    """Collect canonical headers and any authoritative content length."""
    headers: dict[str, list[str]] = {}
    content_length: int | None = None
    for key in resource.get_http_metadata_keys():
        values = resource.get_http_metadata(key)
        if values is None:
            raise MetadataError(
                message=f"metadata provider returned no values for {key!r}",
                key=key,
            )
        if isinstance(values, (str, bytes)):
            raise MetadataError(
                message=(
                    f"metadata provider returned a bare string for {key!r}, "
                    "expected a list of values"
                ),
                key=key,
            )
        values = list(values)
        if not values:
            raise MetadataError(
                message=f"metadata provider returned an empty value list for {key!r}",
                key=key,
            )
        name = canonical_header_key(key)
        headers[name] = values
        if name == CONTENT_LENGTH:
            content_length = parse_content_length(values)
    return headers, content_length


def resolve_content_length(
    request: httpx.Request | None,
    resource: object,
) -> tuple[dict[str, list[str]], int, str]:
    """Return ``(headers, content length, length source)`` for one resource."""
    headers: dict[str, list[str]] = {}
    content_length: int | None = None
    if isinstance(resource, MetadataProvider):
        headers, content_length = _metadata_headers(resource)
    if content_length is not None:
        return headers, content_length, "metadata"

    url = str(request.url) if request is not None else ""
    probed = probe_content_length(resource)
    if probed is None:
        raise ContentLengthUnknownError(
            message=f"{url}: content length unknown",
            url=url,
        )
    source, content_length = probed
    if content_length < 0:
        raise ContentLengthUnknownError(
            message=f"{url}: {source} reported negative size {content_length}",
            url=url,
        )
    headers[CONTENT_LENGTH] = [str(content_length)]
    return headers, content_length, source


def build_response(
    request: httpx.Request | None,
    resource: Resource,
) -> SynthesizedResponse:
    """Compose a response from a request and an opened resource.

    Only metadata and size are consulted; body bytes are left for the
    consumer. On success the response owns ``resource``.
    """
    headers, content_length, source = resolve_content_length(request, resource)
    return SynthesizedResponse(
        headers=tuple(
            (name, value) for name, values in headers.items() for value in values
        ),
        body=resource,
        content_length=content_length,
        request=request,
        length_source=source,
    )
