"""Shared URL utilities: normalize target URLs and derive file-safe slugs."""

from __future__ import annotations

import re
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_target_url(raw: str) -> str:
    """Prefix bare domains with https:// and strip surrounding whitespace."""
    raw = (raw or "").strip()
    if not raw:
        return ""
    if _SCHEME_RE.match(raw):
        return raw
    return f"https://{raw}"


def slugify_url(url: str, max_length: int = 80) -> str:
    """File-safe slug for a URL: scheme removed, unsafe chars replaced with _."""
    stripped = _SCHEME_RE.sub("", url)
    return re.sub(r"[^a-zA-Z0-9.-]", "_", stripped)[:max_length]


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()
