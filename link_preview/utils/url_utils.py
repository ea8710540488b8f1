"""URL policy helpers for link previews."""

from __future__ import annotations

import ipaddress
from urllib.parse import urljoin, urlsplit

PERMITTED_SCHEMES = {"https"}


def _looks_like_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def is_permitted_link_preview_url(url: str | None) -> bool:
    """Return True when url may be fetched to build a link preview.

    Only https URLs with an ASCII (punycode) DNS host are allowed; IP literals,
    single-label hosts and URLs carrying credentials are rejected. The same
    policy applies to every hop of a redirect chain.
    """
    if not url or not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in PERMITTED_SCHEMES:
        return False
    if not host or _looks_like_ip_address(host):
        return False
    if parts.username is not None or parts.password is not None:
        return False
    if port is not None and port != 443:
        return False
    if not host.isascii() or "." not in host.strip("."):
        return False
    return all(label and not label.startswith("-") for label in host.strip(".").split("."))


def resolve_http_url(candidate: str | None, base_url: str) -> str | None:
    """Resolve candidate against base_url, returning None unless the result is absolute http(s)."""
    if not candidate or not candidate.strip():
        return None
    try:
        resolved = urljoin(base_url, candidate.strip())
        parts = urlsplit(resolved)
    except ValueError:
        return None
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        return None
    return resolved
