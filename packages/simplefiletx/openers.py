"""Opener protocol and the default local-filesystem implementation."""

from __future__ import annotations

import os
from typing import BinaryIO, Protocol, runtime_checkable

from .capabilities import Resource


@runtime_checkable
class Opener(Protocol):
    """Map a path string to an open, readable resource.

    The returned resource may also implement any capability from
    ``packages.simplefiletx.capabilities``. Failures raise; the transport
    propagates them unchanged.
    """

    def open(self, name: str) -> Resource:
        """Open ``name`` for reading."""


class LocalFile:
    """Binary file handle that reports its size through ``os.fstat``."""

    def __init__(self, path: str) -> None:
        self._handle: BinaryIO = open(path, "rb")

    @property
    def name(self) -> str:
        return self._handle.name

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def read(self, size: int = -1, /) -> bytes:
        return self._handle.read(size)

    def close(self) -> None:
        self._handle.close()

    def stat(self) -> os.stat_result:
        """Return filesystem info for the open descriptor."""
        return os.fstat(self._handle.fileno())

    def __enter__(self) -> LocalFile:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class DefaultOpener:
    """Open paths on the local filesystem."""

    def open(self, name: str) -> LocalFile:
        return LocalFile(name)
