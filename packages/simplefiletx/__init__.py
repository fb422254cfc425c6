"""Public API for the ``file:`` URL transport for httpx."""

from .capabilities import (
    SIZE_PROBES,
    MetadataProvider,
    Resource,
    SizeProbe,
    StatProvider,
    probe_content_length,
)
from .client import AsyncHttpClient, FILE_MOUNT, HttpClient, file_mounts, is_file_url
from .errors import (
    ContentLengthUnknownError,
    FileTransportError,
    MetadataError,
    UnsupportedMethodError,
    UrlDecodeError,
)
from .openers import DefaultOpener, LocalFile, Opener
from .paths import resolve_path, url_path
from .response import (
    AsyncResourceByteStream,
    ResourceByteStream,
    SynthesizedResponse,
    build_response,
    canonical_header_key,
)
from .transport import (
    AsyncFileTransport,
    FileTransport,
    FileTransportConfig,
    create_async_file_transport,
    create_file_transport,
    ensure_retrieval,
)

__all__ = [
    "AsyncFileTransport",
    "AsyncHttpClient",
    "AsyncResourceByteStream",
    "build_response",
    "canonical_header_key",
    "ContentLengthUnknownError",
    "create_async_file_transport",
    "create_file_transport",
    "DefaultOpener",
    "ensure_retrieval",
    "FILE_MOUNT",
    "file_mounts",
    "FileTransport",
    "FileTransportConfig",
    "FileTransportError",
    "HttpClient",
    "is_file_url",
    "LocalFile",
    "MetadataError",
    "MetadataProvider",
    "Opener",
    "probe_content_length",
    "resolve_path",
    "Resource",
    "ResourceByteStream",
    "SIZE_PROBES",
    "SizeProbe",
    "StatProvider",
    "SynthesizedResponse",
    "UnsupportedMethodError",
    "url_path",
    "UrlDecodeError",
]
