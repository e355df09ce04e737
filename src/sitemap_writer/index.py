from __future__ import annotations

import threading
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .builder import SITEMAPINDEX_NAMESPACES, new_root, parse_xml_ns, render_document, to_iso
from .entry import RawEntry, UrlEntry
from .errors import InvalidSitemapSize, InvalidTargetDirectory, SitemapWriteError
from .logger import get_logger
from .sitemap import MAX_URLS_PER_SITEMAP, Sitemap
from .url_utils import url_join

logger = get_logger(__name__)

# callback(error, done): (None, True) on success, (SitemapWriteError, False) on failure
CompletionCallback = Callable[[Optional[BaseException], bool], None]

LastmodValue = Union[datetime, date, int, float, str]


def _resolve_lastmod(
    lastmod_iso: Optional[str],
    lastmod_realtime: bool,
    lastmod: Optional[LastmodValue],
    now: Optional[datetime],
) -> Optional[str]:
    if lastmod_iso:
        return lastmod_iso
    if lastmod_realtime:
        return to_iso(now or datetime.now(timezone.utc))
    if lastmod is None or lastmod == "":
        return None
    if isinstance(lastmod, (datetime, date)):
        return to_iso(lastmod)
    if isinstance(lastmod, bool):
        raise TypeError(f"lastmod must be a date, timestamp or ISO string, not {lastmod!r}")
    if isinstance(lastmod, (int, float)):
        # Epoch milliseconds
        return to_iso(datetime.fromtimestamp(lastmod / 1000, tz=timezone.utc))
    text = str(lastmod)
    if text.endswith(("Z", "z")):
        # fromisoformat only accepts a Z suffix from 3.11 on
        text = text[:-1] + "+00:00"
    return to_iso(datetime.fromisoformat(text))


def build_sitemap_index(
    urls: Sequence[str],
    xsl_url: Optional[str] = None,
    xml_ns: Optional[str] = None,
    lastmod_iso: Optional[str] = None,
    lastmod_realtime: bool = False,
    lastmod: Optional[LastmodValue] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Render a <sitemapindex> document listing `urls`.

    Only one lastmod source is used, in this order: `lastmod_iso` as given,
    the current time (`now` if passed) when `lastmod_realtime` is set, or
    `lastmod` converted to ISO 8601 (datetime, date, epoch milliseconds or
    an ISO string). The same value is written for every <sitemap>.
    """
    value = _resolve_lastmod(lastmod_iso, lastmod_realtime, lastmod, now)
    namespaces = parse_xml_ns(xml_ns) if xml_ns else SITEMAPINDEX_NAMESPACES

    root = new_root("sitemapindex", namespaces)
    for url in urls:
        sm_el = ET.SubElement(root, "sitemap")
        ET.SubElement(sm_el, "loc").text = url
        if value:
            ET.SubElement(sm_el, "lastmod").text = value

    return render_document(root, xsl_url)


def chunk(items: Sequence[RawEntry], size: int) -> List[List[RawEntry]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class _Countdown:
    """
    Pending-write counter. `done()` is called once per finished write and
    the callback fires the first time the counter reaches zero.
    """

    def __init__(self, pending: int, on_zero: Callable[[], None]):
        self._pending = pending
        self._on_zero = on_zero
        self._fired = False
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        return self._pending

    def done(self) -> None:
        with self._lock:
            self._pending -= 1
            fire = self._pending == 0 and not self._fired
            if fire:
                self._fired = True
        if fire:
            self._on_zero()


class SitemapIndex:
    """
    Split a large URL list into sitemap files of at most `sitemap_size`
    entries and write `<sitemap_name>-index.xml` referencing all of them.

    Files are named `<sitemap_name>-0.xml`, `<sitemap_name>-1.xml`, ...
    (with `.gz` appended when `gzip` is set) in input order.
    """

    def __init__(
        self,
        urls: Union[RawEntry, Iterable[RawEntry], None],
        target_folder: Union[str, Path],
        hostname: Optional[str] = None,
        cache_time: int = 0,
        sitemap_name: str = "sitemap",
        sitemap_size: int = MAX_URLS_PER_SITEMAP,
        xsl_url: Optional[str] = None,
        xml_ns: Optional[str] = None,
        gzip: bool = False,
        callback: Optional[CompletionCallback] = None,
        max_workers: int = 4,
    ):
        if target_folder is None or not Path(target_folder).is_dir():
            raise InvalidTargetDirectory(target_folder)
        if (
            isinstance(sitemap_size, bool)
            or not isinstance(sitemap_size, int)
            or not 0 < sitemap_size <= MAX_URLS_PER_SITEMAP
        ):
            raise InvalidSitemapSize(sitemap_size, MAX_URLS_PER_SITEMAP)

        self.target_folder = Path(target_folder)
        self.hostname = hostname
        self.cache_time = cache_time
        self.sitemap_name = sitemap_name or "sitemap"
        self.sitemap_size = sitemap_size
        self.xsl_url = xsl_url
        self.xml_ns = xml_ns
        self.gzip = gzip
        self.callback = callback
        self.max_workers = max_workers

        if urls is None:
            self.urls: List[RawEntry] = []
        elif isinstance(urls, (str, Mapping, UrlEntry)):
            self.urls = [urls]
        else:
            self.urls = list(urls)

        self.chunks = chunk(self.urls, self.sitemap_size)

        extension = ".xml.gz" if gzip else ".xml"
        self.sitemaps: List[str] = [
            f"{self.sitemap_name}-{sitemap_id}{extension}" for sitemap_id in range(len(self.chunks))
        ]
        self.index_filename = f"{self.sitemap_name}-index.xml"

    def sitemap_urls(self) -> List[str]:
        """Absolute URLs of the chunk files, in chunk order."""
        if not self.hostname:
            return list(self.sitemaps)
        return [url_join(self.hostname, name) for name in self.sitemaps]

    def build_index(self) -> str:
        return build_sitemap_index(self.sitemap_urls(), xsl_url=self.xsl_url, xml_ns=self.xml_ns)

    def _write_chunk(self, filename: str, urls: List[RawEntry]) -> Path:
        sitemap = Sitemap(
            urls,
            hostname=self.hostname,
            cache_time=self.cache_time,
            xsl_url=self.xsl_url,
            xml_ns=self.xml_ns,
        )
        path = self.target_folder / filename
        if self.gzip:
            path.write_bytes(sitemap.to_gzip())
        else:
            path.write_text(sitemap.to_string(), encoding="utf-8")
        logger.info(f"Wrote {len(urls)} URLs to {path}")
        return path

    def _write_index(self) -> Path:
        path = self.target_folder / self.index_filename
        path.write_text(self.build_index(), encoding="utf-8")
        logger.info(f"Wrote sitemap index ({len(self.sitemaps)} sitemaps) to {path}")
        return path

    def write(self) -> List[Path]:
        """
        Write every chunk file and the index file concurrently.

        Completion is reported once all writes have finished. With a callback
        configured, it receives `(None, True)` or `(SitemapWriteError, False)`
        and nothing is raised; without one, failures raise SitemapWriteError.

        Returns:
            Paths of the files that were written (chunk files first, index last)
        """
        jobs: List[Tuple[str, Callable[[], Path]]] = [
            (name, lambda name=name, urls=urls: self._write_chunk(name, urls))
            for name, urls in zip(self.sitemaps, self.chunks)
        ]
        jobs.append((self.index_filename, self._write_index))

        results: List[Optional[Path]] = [None] * len(jobs)
        failures: List[Tuple[str, BaseException]] = []
        failures_lock = threading.Lock()
        finished = threading.Event()
        countdown = _Countdown(len(jobs), finished.set)

        def run(position: int, name: str, job: Callable[[], Path]) -> None:
            try:
                results[position] = job()
            except Exception as e:  # noqa: BLE001
                logger.error(f"Failed to write {name}: {e}")
                with failures_lock:
                    failures.append((name, e))
            finally:
                countdown.done()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for position, (name, job) in enumerate(jobs):
                executor.submit(run, position, name, job)
        finished.wait()

        written = [p for p in results if p is not None]
        error: Optional[SitemapWriteError] = None
        if failures:
            order = {name: i for i, (name, _) in enumerate(jobs)}
            error = SitemapWriteError(sorted(failures, key=lambda f: order[f[0]]))

        if self.callback is not None:
            if error is not None:
                self.callback(error, False)
            else:
                self.callback(None, True)
        elif error is not None:
            raise error
        return written


def create_sitemap_index(
    urls: Union[RawEntry, Iterable[RawEntry], None] = None,
    target_folder: Union[str, Path, None] = None,
    **conf,
) -> SitemapIndex:
    """
    Build a SitemapIndex and write all files right away.

    Accepts the snake_case keyword arguments of SitemapIndex as well as the
    camelCase option names (targetFolder, cacheTime, sitemapName,
    sitemapSize, xslUrl, xmlNs).
    """
    aliases = {
        "cacheTime": "cache_time",
        "sitemapName": "sitemap_name",
        "sitemapSize": "sitemap_size",
        "xslUrl": "xsl_url",
        "xmlNs": "xml_ns",
    }
    if target_folder is None:
        target_folder = conf.pop("targetFolder", None)
    if target_folder is None:
        raise InvalidTargetDirectory(target_folder)
    for camel, snake in aliases.items():
        if camel in conf:
            conf[snake] = conf.pop(camel)

    index = SitemapIndex(urls, target_folder, **conf)
    index.write()
    return index
