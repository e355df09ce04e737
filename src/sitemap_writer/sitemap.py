from __future__ import annotations

import asyncio
import gzip
import time
from typing import Callable, Iterable, List, Mapping, Optional, Union

from .builder import URLSET_NAMESPACES, new_root, parse_xml_ns, render_document
from .entry import RawEntry, UrlEntry, entry_key, normalize_entry
from .errors import SitemapTooLarge
from .item import build_url_element
from .logger import get_logger

logger = get_logger(__name__)

# Defined by the protocol, see https://www.sitemaps.org/protocol.html#index
MAX_URLS_PER_SITEMAP = 50000


class Sitemap:
    """
    A single <urlset> document.

    Entries keep insertion order and are rendered through `normalize_entry`,
    so relative URLs (including image and alternate-link URLs) are made
    absolute against `hostname`. Rendered output is cached for `cache_time`
    milliseconds; 0 disables the cache.
    """

    limit = MAX_URLS_PER_SITEMAP

    def __init__(
        self,
        urls: Union[RawEntry, Iterable[RawEntry], None] = None,
        hostname: Optional[str] = None,
        cache_time: int = 0,
        xsl_url: Optional[str] = None,
        xml_ns: Optional[str] = None,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.hostname = hostname
        self.cache_time = cache_time or 0
        self.xsl_url = xsl_url
        self.xml_ns = xml_ns
        self._clock = clock

        # Make a copy so later add()/remove() never touch the caller's list
        if urls is None:
            self.urls: List[RawEntry] = []
        elif isinstance(urls, (str, Mapping, UrlEntry)):
            self.urls = [urls]
        else:
            self.urls = list(urls)

        self._cache: Optional[str] = None
        self._cache_set_at: Optional[float] = None

    def __len__(self) -> int:
        return len(self.urls)

    def clear_cache(self) -> None:
        self._cache = None
        self._cache_set_at = None

    def is_cache_valid(self) -> bool:
        if not self.cache_time or self._cache is None or self._cache_set_at is None:
            return False
        now_ms = self._clock() * 1000
        return now_ms <= self._cache_set_at * 1000 + self.cache_time

    def _set_cache(self, xml: str) -> str:
        self._cache = xml
        self._cache_set_at = self._clock()
        return xml

    def add(self, url: RawEntry) -> int:
        """Append an entry (no de-duplication). Returns the new entry count."""
        self.urls.append(url)
        self.clear_cache()
        return len(self.urls)

    def remove(self, url: RawEntry) -> int:
        """Remove every entry whose URL equals that of `url`. Returns how many were removed."""
        key = entry_key(url)
        kept = [u for u in self.urls if entry_key(u) != key]
        removed = len(self.urls) - len(kept)
        if removed:
            self.urls = kept
            self.clear_cache()
        return removed

    delete = remove

    def _namespaces(self):
        if self.xml_ns:
            return parse_xml_ns(self.xml_ns)
        return URLSET_NAMESPACES

    def to_string(self) -> str:
        """Render the document, serving the cached copy while it is fresh."""
        if self.is_cache_valid():
            logger.debug("Serving sitemap from cache")
            return self._cache  # type: ignore[return-value]

        if len(self.urls) > self.limit:
            raise SitemapTooLarge(len(self.urls), self.limit)

        # A fresh root per render, nothing carries over from the previous one
        root = new_root("urlset", self._namespaces())
        for raw in self.urls:
            build_url_element(root, normalize_entry(raw, self.hostname))

        return self._set_cache(render_document(root, self.xsl_url))

    to_xml = to_string

    def __str__(self) -> str:
        return self.to_string()

    async def to_xml_async(self) -> str:
        """Render on the next loop iteration; errors are raised on await."""
        await asyncio.sleep(0)
        return self.to_string()

    def to_gzip(self) -> bytes:
        return gzip.compress(self.to_string().encode("utf-8"))

    async def to_gzip_async(self) -> bytes:
        xml = await self.to_xml_async()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, gzip.compress, xml.encode("utf-8"))


def create_sitemap(
    urls: Union[RawEntry, Iterable[RawEntry], None] = None,
    hostname: Optional[str] = None,
    cache_time: int = 0,
    xsl_url: Optional[str] = None,
    xml_ns: Optional[str] = None,
    **extra,
) -> Sitemap:
    """
    Shortcut for `Sitemap(...)` that also accepts the camelCase option names
    (cacheTime, xslUrl, xmlNs).
    """
    return Sitemap(
        urls,
        hostname=hostname,
        cache_time=extra.pop("cacheTime", cache_time),
        xsl_url=extra.pop("xslUrl", xsl_url),
        xml_ns=extra.pop("xmlNs", xml_ns),
        **extra,
    )
