"""Translate ``file:`` URLs into filesystem paths.

Accepted forms:

- ``file:/abs/path``
- ``file:///abs/path``
- ``file://host/abs/path`` (host is ignored)
- ``file:relative/path`` (not RFC 8089, but common; joined to the base dir)

Escapes that are not valid UTF-8 decode with ``surrogateescape``, so
``os.fsencode`` gives back the exact bytes the URL named.

Paths are not normalized: ``..`` segments are passed through untouched and
no containment check against the base directory is made.
"""

from __future__ import annotations

import os
import re
from urllib.parse import unquote, unquote_plus, urlsplit

import httpx

from .errors import UrlDecodeError

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def url_path(url: httpx.URL | str) -> str:
    """Return the decoded path named by one ``file:`` URL."""
    text = str(url)
    parts = urlsplit(text)
    if parts.netloc or parts.path.startswith("/"):
        return _unescape(parts.path, url=text, plus=False)
    # Opaque form: the scheme-specific part is query-escaped text.
    return _unescape(parts.path, url=text, plus=True)


def resolve_path(base_dir: str, url: httpx.URL | str) -> str:
    """Resolve one ``file:`` URL to a platform path string.

    Relative paths are prefixed with ``base_dir``; absolute paths ignore it.
    Empty segments after the first are dropped, collapsing ``//`` runs.
    """
    head, *rest = url_path(url).split("/")
    pieces = [f"{base_dir}{os.sep}{head}"] if head else [""]
    pieces.extend(segment for segment in rest if segment)
    return os.sep.join(pieces)


def _unescape(raw: str, *, url: str, plus: bool) -> str:
    """Percent-decode, rejecting malformed escapes."""
    match = _MALFORMED_ESCAPE.search(raw)
    if match is not None:
        raise UrlDecodeError(
            message=f"invalid URL escape {raw[match.start() : match.start() + 3]!r} in {url}",
            url=url,
        )
    decode = unquote_plus if plus else unquote
    return decode(raw, errors="surrogateescape")
