"""Optional resource capabilities and the ordered content-length probes.

An opened resource is at minimum readable and closable. It may additionally
report its size in one of three shapes, and may offer HTTP header metadata.
Each capability is checked independently per handle; the size shapes are
tried in the fixed order of ``SIZE_PROBES``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Resource(Protocol):
    """Readable, closable byte source returned by an opener."""

    def read(self, size: int = -1, /) -> bytes:
        """Read up to ``size`` bytes; an empty result signals end of data."""

    def close(self) -> None:
        """Release the underlying handle."""


class StatResult(Protocol):
    """Filesystem-info structure exposing at least a size field."""

    @property
    def st_size(self) -> int:
        """Size of the resource in bytes."""


@runtime_checkable
class StatProvider(Protocol):
    """Resource that reports ``os.stat_result``-like information."""

    def stat(self) -> StatResult:
        """Return filesystem info for the open resource; may raise."""


@runtime_checkable
class MetadataProvider(Protocol):
    """Resource that supplies HTTP headers for the synthesized response."""

    def get_http_metadata_keys(self) -> Sequence[str]:
        """Return header names accepted by ``get_http_metadata``."""

    def get_http_metadata(self, key: str) -> Sequence[str] | None:
        """Return the values for one header name."""


@dataclass(frozen=True)
class SizeProbe:
    """One named content-length strategy.

    ``probe`` returns ``None`` when the resource lacks the capability, and
    otherwise the size; failures inside the capability propagate.
    """

    name: str
    probe: Callable[[object], int | None]


def _stat_size(resource: object) -> int | None:
    if not isinstance(resource, StatProvider):
        return None
    return resource.stat().st_size


def _size_attribute(resource: object) -> int | None:
    size = getattr(resource, "size", None)
    if callable(size) or isinstance(size, bool) or not isinstance(size, int):
        return None
    return size


def _size_method(resource: object) -> int | None:
    size = getattr(resource, "size", None)
    if not callable(size):
        return None
    return size()


SIZE_PROBES: tuple[SizeProbe, ...] = (
    SizeProbe(name="stat", probe=_stat_size),
    SizeProbe(name="size_attribute", probe=_size_attribute),
    SizeProbe(name="size_method", probe=_size_method),
)


def probe_content_length(
    resource: object,
    probes: Sequence[SizeProbe] = SIZE_PROBES,
) -> tuple[str, int] | None:
    """Return ``(probe name, size)`` from the first applicable probe."""
    for size_probe in probes:
        size = size_probe.probe(resource)
        if size is not None:
            return size_probe.name, size
    return None
