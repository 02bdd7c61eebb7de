"""Canonical forms for user-supplied URLs and domains.

Rules, applied in order:
- trim, parse
- force ``https``
- lowercase the hostname
- drop the fragment and the default ``https`` port
- strip trailing slashes from the path; the bare root renders without one

Query strings are preserved verbatim. Unparsable input yields ``None``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import urlsplit, urlunsplit

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def is_non_empty_string(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_url(value: object) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()

    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError:
        return None
    host = parts.hostname
    if not parts.scheme or not host:
        return None

    netloc = f"[{host}]" if ":" in host else host
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    if port is not None and port != 443:
        netloc = f"{netloc}:{port}"

    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"

    canonical = urlunsplit(("https", netloc, path, parts.query, ""))
    if path == "/" and not parts.query:
        return canonical.removesuffix("/")
    return canonical


def split_delimited(value: str) -> list[str]:
    """Split newline- or comma-delimited input, trimming and dropping empties."""

    items: list[str] = []
    for line in value.splitlines():
        items.extend(piece.strip() for piece in line.split(","))
    return [item for item in items if item]


def normalize_url_list(values: object) -> list[str]:
    """Normalize each entry, drop the unparsable ones, dedupe and sort."""

    if isinstance(values, str):
        items: Iterable[object] = split_delimited(values)
    elif isinstance(values, list | tuple | set | frozenset):
        items = values
    else:
        items = ()

    canonical = (normalize_url(item) for item in items)
    return dedupe_and_sort(url for url in canonical if url is not None)


def dedupe_and_sort(urls: Iterable[str]) -> list[str]:
    return sorted(set(urls))


def normalize_identity_url(value: str) -> str:
    """Turn a bare host or host/path into an ``https`` URL; URLs pass through."""

    trimmed = value.strip()
    if _SCHEME_RE.match(trimmed):
        return trimmed
    return f"https://{trimmed}"
