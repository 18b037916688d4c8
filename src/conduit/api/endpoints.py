"""Build absolute request URLs from the configured base address."""

from __future__ import annotations

import re

import httpx

from conduit.errors import InvalidConfiguration

DEFAULT_SCHEME = "http"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


def normalize_base_url(base_url: str) -> httpx.URL:
    """Trim, parse and default the scheme of *base_url*.

    ``"localhost:3000"`` becomes ``http://localhost:3000``; an explicit
    scheme is kept.  Raises :class:`InvalidConfiguration` when nothing
    URL-shaped is left.
    """
    raw = (base_url or "").strip()
    if not raw:
        raise InvalidConfiguration(base_url)
    if not _SCHEME_RE.match(raw):
        raw = f"{DEFAULT_SCHEME}://{raw}"
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as exc:
        raise InvalidConfiguration(base_url) from exc
    if not url.scheme or not url.host:
        raise InvalidConfiguration(base_url)
    return url


def build_url(base_url: str, path: str) -> str:
    """Append *path* to the path of the normalized base.

    Any base path prefix, query or fragment is kept in place.
    """
    url = normalize_base_url(base_url)
    joined = f"{url.path.rstrip('/')}/{path.lstrip('/')}"
    return str(url.copy_with(path=joined))
