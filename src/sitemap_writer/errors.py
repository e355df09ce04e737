"""
Exception types raised while building and writing sitemaps.
"""
from __future__ import annotations

from typing import List, Tuple


class SitemapError(Exception):
    """Base class for every sitemap_writer error."""


class InvalidEntry(SitemapError, ValueError):
    """URL entry without a `url` field."""

    def __init__(self, message: str = "URL is required"):
        super().__init__(message)


class ChangeFreqInvalid(SitemapError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"changefreq is invalid: {value!r}")


class PriorityInvalid(SitemapError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"priority must be a number between 0.0 and 1.0: {value!r}")


class InvalidVideoFormat(SitemapError, ValueError):
    def __init__(self, message: str = "video must include thumbnail_loc, title and description"):
        super().__init__(message)


class InvalidVideoDuration(SitemapError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"video duration must be an integer of seconds in 0..28800: {value!r}")


class InvalidVideoDescription(SitemapError, ValueError):
    def __init__(self, length: int):
        super().__init__(f"video description is limited to 2048 characters, got {length}")


class InvalidVideoRating(SitemapError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"video rating must be between 0.0 and 5.0: {value!r}")


class InvalidAttrValue(SitemapError, ValueError):
    def __init__(self, key: str, value: object, expected: str):
        super().__init__(f"{key!r} must be {expected}, got {value!r}")


class InvalidNewsFormat(SitemapError, ValueError):
    def __init__(self, message: str = "news must include publication name, language, publication_date and title"):
        super().__init__(message)


class InvalidNewsAccessValue(SitemapError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"news access must be 'Registration' or 'Subscription': {value!r}")


class SitemapTooLarge(SitemapError):
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"sitemap holds {count} URLs, the protocol allows {limit} per file; "
            "use SitemapIndex to split it"
        )


class InvalidTargetDirectory(SitemapError):
    def __init__(self, path: object):
        self.path = path
        super().__init__(f"target folder must exist and be a directory: {path}")


class InvalidSitemapSize(SitemapError, ValueError):
    def __init__(self, value: object, limit: int):
        super().__init__(f"sitemap_size must be an integer in 1..{limit}: {value!r}")


class SitemapWriteError(SitemapError):
    """One or more sitemap files could not be written.

    `failures` holds `(filename, exception)` pairs in chunk order, with the
    index file last.
    """

    def __init__(self, failures: List[Tuple[str, BaseException]]):
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"Failed to write {len(failures)} sitemap file(s): {names}")
