"""
sitemap-writer

Sitemap XML documents, split sitemaps and sitemap indexes.
"""

from .entry import ImageEntry, LinkEntry, UrlEntry, normalize_entry
from .errors import (
    InvalidEntry,
    InvalidTargetDirectory,
    SitemapError,
    SitemapTooLarge,
    SitemapWriteError,
)
from .index import SitemapIndex, build_sitemap_index, create_sitemap_index
from .sitemap import Sitemap, create_sitemap

__all__ = [
    "__version__",
    "ImageEntry",
    "LinkEntry",
    "UrlEntry",
    "normalize_entry",
    "InvalidEntry",
    "InvalidTargetDirectory",
    "SitemapError",
    "SitemapTooLarge",
    "SitemapWriteError",
    "Sitemap",
    "create_sitemap",
    "SitemapIndex",
    "build_sitemap_index",
    "create_sitemap_index",
]

__version__ = "0.1.0"
