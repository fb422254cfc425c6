"""Typed errors for the ``file:`` transport.

Opener and size-probe failures are not wrapped: they reach the caller as the
collaborator raised them. Only failures that originate in this package are
expressed with the types below.

Instances must stay mutable and hashable: ``contextlib`` context managers on
the way out, httpx's ``request_context`` among them, reassign
``__traceback__`` on the exception they re-raise.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class FileTransportError(Exception):
    """Base error type for file transport failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(eq=False)
class UnsupportedMethodError(FileTransportError):
    """Request method is set and is not a retrieval (GET)."""

    method: str = ""


@dataclass(eq=False)
class UrlDecodeError(FileTransportError):
    """``file:`` URL path could not be percent-decoded."""

    url: str = ""
    cause: Exception | None = None


@dataclass(eq=False)
class MetadataError(FileTransportError):
    """Resource metadata provider violated the header metadata contract."""

    key: str = ""


@dataclass(eq=False)
class ContentLengthUnknownError(FileTransportError):
    """Resource offers neither Content-Length metadata nor a size capability."""

    url: str = ""
