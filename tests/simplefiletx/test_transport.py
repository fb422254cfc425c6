"""End-to-end tests for the file transport through real httpx clients."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path
from typing import Iterator

import httpx
import pytest

from packages.simplefiletx import (
    AsyncFileTransport,
    ContentLengthUnknownError,
    DefaultOpener,
    FileTransport,
    MetadataError,
    UnsupportedMethodError,
    create_async_file_transport,
    create_file_transport,
    ensure_retrieval,
    file_mounts,
)
from packages.simplefiletx.client import AsyncHttpClient, HttpClient
from packages.simplefiletx.config import load_settings
from tests.simplefiletx.fakes import (
    HELLO,
    FakeResource,
    SpyOpener,
    StatResource,
    with_metadata,
)

FIXTURES = Path(__file__).resolve().parent / "fixtures"
TEST_FILE = FIXTURES / "test.txt"


@pytest.mark.parametrize(
    "url",
    [
        f"file:{TEST_FILE.as_posix()}",
        f"file://{TEST_FILE.as_posix()}",
        f"file://localhost{TEST_FILE.as_posix()}",
        "file:test.txt",
    ],
)
def test_client_reads_fixture_file(url: str) -> None:
    """Every accepted URL form should serve the fixture's exact bytes."""
    with HttpClient(base_dir=str(FIXTURES)) as client:
        response = client.get(url)

    assert response.status_code == 200
    assert response.content == TEST_FILE.read_bytes()
    assert response.headers["Content-Length"] == str(TEST_FILE.stat().st_size)


def test_plain_httpx_client_with_mount_serves_hosted_urls() -> None:
    """A bare httpx client can use the transport for URLs carrying a host."""
    with httpx.Client(mounts=file_mounts(create_file_transport())) as client:
        response = client.get(f"file://localhost{TEST_FILE.as_posix()}")

    assert response.content == HELLO


def test_transport_handles_request_directly() -> None:
    """``handle_request`` should work without any client around it."""
    transport = create_file_transport(str(FIXTURES))

    response = transport.handle_request(httpx.Request("GET", "file:test.txt"))

    assert response.read() == HELLO
    assert response.headers["content-length"] == "12"


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "HEAD"])
def test_non_get_methods_never_reach_the_opener(method: str) -> None:
    """Disallowed methods are rejected before any open is attempted."""
    opener = SpyOpener(lambda _: StatResource())

    with HttpClient(base_dir=str(FIXTURES), opener=opener) as client:
        with pytest.raises(UnsupportedMethodError) as exc_info:
            client.request(method, "file:test.txt")

    assert exc_info.value.method == method
    assert opener.calls == []


def test_unset_method_is_allowed() -> None:
    """An empty method counts as a retrieval."""
    ensure_retrieval("")
    ensure_retrieval("GET")


def test_open_failure_propagates_verbatim(tmp_path: Path) -> None:
    """Missing files surface as the opener's own exception."""
    with HttpClient(base_dir=str(tmp_path)) as client:
        with pytest.raises(FileNotFoundError):
            client.get("file:missing.txt")


def test_custom_opener_metadata_reaches_response_headers() -> None:
    """Opener-supplied metadata should appear as response headers."""
    opener = SpyOpener(
        lambda _: with_metadata(StatResource, {"Content-Type": ["text/x-test"]})
    )

    with HttpClient(base_dir=str(FIXTURES), opener=opener) as client:
        response = client.get("file:///test.txt")

    assert response.content == HELLO
    assert response.headers["Content-Type"] == "text/x-test"
    assert opener.calls == [os.sep + "test.txt"]


@pytest.mark.parametrize(
    ("values", "expected"),
    [(None, None), ([], None), (["5"], b"hello")],
)
def test_custom_opener_content_length_metadata(
    values: list[str] | None, expected: bytes | None
) -> None:
    """Content-Length metadata is validated and bounds the body."""
    opener = SpyOpener(
        lambda _: with_metadata(
            StatResource,
            {"Content-Type": ["text/x-test"], "Content-Length": values},
        )
    )

    with HttpClient(base_dir=str(FIXTURES), opener=opener) as client:
        if expected is None:
            with pytest.raises(MetadataError):
                client.get("file:///test.txt")
            return
        response = client.get("file:///test.txt")

    assert response.headers["Content-Length"] == "5"
    assert response.content == expected


def test_resource_is_closed_when_synthesis_fails() -> None:
    """A resource that cannot be sized is closed before the error surfaces."""
    opener = SpyOpener(lambda _: FakeResource())
    transport = create_file_transport(opener=opener)

    with pytest.raises(ContentLengthUnknownError):
        transport.handle_request(httpx.Request("GET", "file:///test.txt"))

    assert opener.opened[0].closed is True


def test_streamed_response_owns_resource_until_closed() -> None:
    """Streaming leaves the resource open until the response is closed."""
    opener = SpyOpener(lambda _: StatResource())

    with HttpClient(opener=opener) as client:
        response = client.request("GET", "file:///test.txt", stream=True)
        assert opener.opened[0].closed is False
        assert response.read() == HELLO
        response.close()

    assert opener.opened[0].closed is True


def test_failures_are_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Failed requests emit one warning from the transport logger."""
    transport = create_file_transport(str(tmp_path))

    with caplog.at_level(logging.WARNING, logger="packages.simplefiletx.transport"):
        with pytest.raises(FileNotFoundError):
            transport.handle_request(httpx.Request("GET", "file:missing.txt"))

    assert [record.getMessage() for record in caplog.records] == [
        "File request failed"
    ]


def test_transport_from_settings(tmp_path: Path) -> None:
    """Settings should provide the base directory and chunk size."""
    settings = load_settings(
        cli_params={"transport": {"base_dir": str(FIXTURES), "chunk_size": 3}},
        config_path=tmp_path / "missing.yaml",
    )

    transport = FileTransport.from_settings(settings)

    assert transport.config.base_dir == str(FIXTURES)
    assert transport.config.chunk_size == 3
    assert isinstance(transport.config.opener, DefaultOpener)
    response = transport.handle_request(httpx.Request("GET", "file:test.txt"))
    assert response.read() == HELLO


def test_async_client_reads_fixture_file() -> None:
    """The async transport should serve files through ``httpx.AsyncClient``."""

    async def _run() -> httpx.Response:
        async with AsyncHttpClient(base_dir=str(FIXTURES)) as client:
            return await client.get("file:test.txt")

    response = asyncio.run(_run())

    assert response.content == HELLO
    assert response.headers["Content-Length"] == "12"


def test_async_transport_rejects_post_without_opening(tmp_path: Path) -> None:
    """The async path applies the same method check before opening."""
    opener = SpyOpener(lambda _: StatResource())
    settings = load_settings(config_path=tmp_path / "missing.yaml")
    transport = AsyncFileTransport.from_settings(settings, opener=opener)

    async def _run() -> None:
        async with AsyncHttpClient(transport=transport) as client:
            await client.request("POST", "file:test.txt")

    with pytest.raises(UnsupportedMethodError):
        asyncio.run(_run())
    assert opener.calls == []


def test_header_encoding_failure_closes_resource_and_logs(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Headers httpx cannot encode fail the request without leaking the file."""
    opener = SpyOpener(
        lambda _: with_metadata(
            StatResource, {"Content-Disposition": ["attachment; filename=ü.txt"]}
        )
    )
    transport = create_file_transport(opener=opener)

    with caplog.at_level(logging.WARNING, logger="packages.simplefiletx.transport"):
        with pytest.raises(UnicodeEncodeError):
            transport.handle_request(httpx.Request("GET", "file:///test.txt"))

    assert opener.opened[0].closed is True
    assert [record.getMessage() for record in caplog.records] == [
        "File request failed"
    ]


def test_async_header_encoding_failure_closes_resource() -> None:
    """The async transport closes the resource when conversion fails."""
    opener = SpyOpener(lambda _: with_metadata(StatResource, {"X-Name": ["naïve"]}))
    transport = create_async_file_transport(opener=opener)

    async def run() -> None:
        await transport.handle_async_request(httpx.Request("GET", "file:///test.txt"))

    with pytest.raises(UnicodeEncodeError):
        asyncio.run(run())

    assert opener.opened[0].closed is True


def test_package_errors_keep_their_type_through_context_managers() -> None:
    """Errors leave generator-based context managers as the original type."""

    @contextlib.contextmanager
    def scope() -> Iterator[None]:
        yield

    transport = create_file_transport(opener=SpyOpener(lambda _: FakeResource()))

    with pytest.raises(UnsupportedMethodError):
        with scope():
            transport.handle_request(httpx.Request("POST", "file:///test.txt"))
    with httpx.Client(mounts=file_mounts(transport)) as client:
        with pytest.raises(ContentLengthUnknownError):
            with scope():
                client.get("file://localhost/test.txt")
