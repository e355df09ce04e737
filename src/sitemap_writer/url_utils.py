from __future__ import annotations

import re
from typing import Optional


_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def is_absolute_url(url: str) -> bool:
    return bool(_ABSOLUTE_URL.match(url or ""))


def url_join(base: str, path: str) -> str:
    """
    Join a base URL and a path with exactly one "/" between them.
    - "https://example.com/" + "/page"  -> "https://example.com/page"
    - "https://example.com" + "?q=1"    -> "https://example.com?q=1"
    - query and fragment of `path` are kept as-is
    """
    base = (base or "").rstrip("/")
    path = path or ""
    if not path:
        return base
    if path.startswith(("?", "#")):
        return base + path
    path = path.lstrip("/")
    if not base:
        return path
    return f"{base}/{path}"


def prefix_hostname(url: str, hostname: Optional[str]) -> str:
    """Make `url` absolute against `hostname`. No hostname means no change."""
    if not hostname or is_absolute_url(url):
        return url
    return url_join(hostname, url)
