from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidEntry
from .url_utils import prefix_hostname


@dataclass(frozen=True)
class ImageEntry:
    url: str
    caption: Optional[str] = None
    title: Optional[str] = None
    geo_location: Optional[str] = None
    license: Optional[str] = None


@dataclass(frozen=True)
class LinkEntry:
    """Alternate-language version of a page (<xhtml:link rel="alternate">)."""

    url: str
    lang: Optional[str] = None


@dataclass(frozen=True)
class UrlEntry:
    url: str
    lastmod: Optional[Union[str, date, datetime]] = None
    lastmod_realtime: bool = False
    lastmod_file: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[Union[float, str]] = None
    images: Tuple[ImageEntry, ...] = ()
    links: Tuple[LinkEntry, ...] = ()
    video: Tuple[Mapping[str, Any], ...] = ()
    news: Optional[Mapping[str, Any]] = None
    expires: Optional[Union[str, date, datetime]] = None
    android_link: Optional[str] = None
    mobile: Union[bool, str] = False
    amp_link: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: "RawEntry") -> "UrlEntry":
        """
        Build a canonical entry from a bare URL string or a mapping.

        `images` (or `img`) may be a string, a single mapping or a sequence of
        either; `video` may be a mapping or a sequence of mappings. Both end up
        as tuples so serialization never has to look at the input shape.
        """
        if isinstance(raw, UrlEntry):
            return raw
        if isinstance(raw, str):
            if not raw:
                raise InvalidEntry()
            return cls(url=raw)
        if not isinstance(raw, Mapping):
            raise InvalidEntry(f"URL entry must be a string or a mapping, got {type(raw).__name__}")

        url = raw.get("url")
        if not url:
            raise InvalidEntry()

        return cls(
            url=str(url),
            lastmod=raw.get("lastmod"),
            lastmod_realtime=bool(_first(raw, "lastmod_realtime", "lastmodrealtime")),
            lastmod_file=_first(raw, "lastmod_file", "lastmodfile"),
            changefreq=raw.get("changefreq"),
            priority=raw.get("priority"),
            images=_to_images(_first(raw, "images", "img")),
            links=_to_links(raw.get("links")),
            video=_to_videos(raw.get("video")),
            news=_freeze(raw["news"]) if raw.get("news") else None,
            expires=raw.get("expires"),
            android_link=_first(raw, "android_link", "androidLink"),
            mobile=raw.get("mobile") or False,
            amp_link=_first(raw, "amp_link", "ampLink"),
        )


RawEntry = Union[str, Mapping[str, Any], UrlEntry]


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _freeze(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _to_image(value: Any) -> ImageEntry:
    if isinstance(value, ImageEntry):
        return value
    if isinstance(value, str):
        return ImageEntry(url=value)
    if isinstance(value, Mapping) and value.get("url"):
        return ImageEntry(
            url=str(value["url"]),
            caption=value.get("caption"),
            title=value.get("title"),
            geo_location=_first(value, "geo_location", "geoLocation"),
            license=value.get("license"),
        )
    raise InvalidEntry(f"image entry requires a url: {value!r}")


def _to_images(value: Any) -> Tuple[ImageEntry, ...]:
    if not value:
        return ()
    if not _is_sequence(value):
        value = [value]
    return tuple(_to_image(v) for v in value)


def _to_links(value: Any) -> Tuple[LinkEntry, ...]:
    if not value:
        return ()
    if not _is_sequence(value):
        value = [value]
    links = []
    for link in value:
        if isinstance(link, LinkEntry):
            links.append(link)
            continue
        if not isinstance(link, Mapping) or not link.get("url"):
            raise InvalidEntry(f"link entry requires a url: {link!r}")
        links.append(LinkEntry(url=str(link["url"]), lang=link.get("lang")))
    return tuple(links)


def _to_videos(value: Any) -> Tuple[Mapping[str, Any], ...]:
    if not value:
        return ()
    if not _is_sequence(value):
        value = [value]
    videos = []
    for video in value:
        if not isinstance(video, Mapping):
            raise InvalidEntry(f"video entry must be a mapping: {video!r}")
        videos.append(_freeze(video))
    return tuple(videos)


def entry_key(raw: RawEntry) -> Optional[str]:
    """URL used to match entries on removal."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, UrlEntry):
        return raw.url
    if isinstance(raw, Mapping):
        return raw.get("url")
    return None


def normalize_entry(raw: RawEntry, hostname: Optional[str] = None) -> UrlEntry:
    """
    Return a new entry whose primary, image and alternate-link URLs are all
    absolute against `hostname`. Already absolute URLs are left untouched and
    without a hostname nothing is rewritten. `raw` itself is never modified.
    """
    entry = UrlEntry.from_raw(raw)
    if not hostname:
        return entry
    return replace(
        entry,
        url=prefix_hostname(entry.url, hostname),
        images=tuple(replace(img, url=prefix_hostname(img.url, hostname)) for img in entry.images),
        links=tuple(replace(link, url=prefix_hostname(link.url, hostname)) for link in entry.links),
    )

