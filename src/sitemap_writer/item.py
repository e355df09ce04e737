"""
Serialization of a single UrlEntry into a <url> element.

Child order follows what search engines commonly emit:
loc, lastmod, changefreq, priority, image:image*, video:video*,
xhtml:link (alternates)*, expires, android app link, mobile:mobile,
news:news, amphtml link.
"""
from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Union

from .builder import to_iso
from .entry import ImageEntry, UrlEntry
from .errors import (
    ChangeFreqInvalid,
    InvalidAttrValue,
    InvalidEntry,
    InvalidNewsAccessValue,
    InvalidNewsFormat,
    InvalidVideoDescription,
    InvalidVideoDuration,
    InvalidVideoFormat,
    InvalidVideoRating,
    PriorityInvalid,
)

CHANGEFREQ = ("always", "hourly", "daily", "weekly", "monthly", "yearly", "never")
NEWS_ACCESS = ("Registration", "Subscription")

VIDEO_DESCRIPTION_MAX = 2048
VIDEO_DURATION_MAX = 28800


def _text(parent: ET.Element, tag: str, value: Any, **attrib: str) -> ET.Element:
    el = ET.SubElement(parent, tag, {k: v for k, v in attrib.items() if v is not None})
    el.text = str(value)
    return el


def _format_date(value: Union[str, date, datetime]) -> str:
    if isinstance(value, (date, datetime)):
        return to_iso(value)
    return str(value)


def _yes_no(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    text = str(value).lower()
    if text not in ("yes", "no"):
        raise InvalidAttrValue(key, value, "'yes' or 'no'")
    return text


def _get(data: Mapping[str, Any], *keys: str) -> Any:
    # Video attributes may be spelled "player_loc:autoplay" or "player_loc_autoplay"
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def resolve_lastmod(entry: UrlEntry, now: Optional[datetime] = None) -> Optional[str]:
    """File mtime wins over real-time, which wins over an explicit value."""
    if entry.lastmod_file:
        mtime = os.stat(entry.lastmod_file).st_mtime
        return to_iso(datetime.fromtimestamp(mtime, tz=timezone.utc))
    if entry.lastmod_realtime:
        return to_iso(now or datetime.now(timezone.utc))
    if entry.lastmod:
        return _format_date(entry.lastmod)
    return None


def _format_priority(value: Any) -> str:
    if isinstance(value, bool):
        raise PriorityInvalid(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PriorityInvalid(value) from None
    if not 0.0 <= number <= 1.0:
        raise PriorityInvalid(value)
    return str(number)


def _build_image(url_el: ET.Element, image: ImageEntry) -> None:
    img_el = ET.SubElement(url_el, "image:image")
    _text(img_el, "image:loc", image.url)
    if image.caption:
        _text(img_el, "image:caption", image.caption)
    if image.geo_location:
        _text(img_el, "image:geo_location", image.geo_location)
    if image.title:
        _text(img_el, "image:title", image.title)
    if image.license:
        _text(img_el, "image:license", image.license)


def _build_video(url_el: ET.Element, video: Mapping[str, Any]) -> None:
    if not (video.get("thumbnail_loc") and video.get("title") and video.get("description")):
        raise InvalidVideoFormat()
    description = str(video["description"])
    if len(description) > VIDEO_DESCRIPTION_MAX:
        raise InvalidVideoDescription(len(description))

    v = ET.SubElement(url_el, "video:video")
    _text(v, "video:thumbnail_loc", video["thumbnail_loc"])
    _text(v, "video:title", video["title"])
    _text(v, "video:description", description)

    if video.get("content_loc"):
        _text(v, "video:content_loc", video["content_loc"])
    if video.get("player_loc"):
        autoplay = _get(video, "player_loc:autoplay", "player_loc_autoplay")
        allow_embed = _get(video, "player_loc:allow_embed", "player_loc_allow_embed")
        _text(
            v,
            "video:player_loc",
            video["player_loc"],
            autoplay=None if autoplay is None else str(autoplay),
            allow_embed=None if allow_embed is None else _yes_no("player_loc:allow_embed", allow_embed),
        )
    if video.get("duration") is not None:
        duration = video["duration"]
        if isinstance(duration, bool) or not isinstance(duration, int) or not 0 <= duration <= VIDEO_DURATION_MAX:
            raise InvalidVideoDuration(duration)
        _text(v, "video:duration", duration)
    if video.get("expiration_date"):
        _text(v, "video:expiration_date", _format_date(video["expiration_date"]))
    if video.get("rating") is not None:
        rating = video["rating"]
        try:
            ok = 0.0 <= float(rating) <= 5.0
        except (TypeError, ValueError):
            ok = False
        if not ok:
            raise InvalidVideoRating(rating)
        _text(v, "video:rating", rating)
    if video.get("view_count") is not None:
        _text(v, "video:view_count", video["view_count"])
    if video.get("publication_date"):
        _text(v, "video:publication_date", _format_date(video["publication_date"]))
    if video.get("family_friendly") is not None:
        _text(v, "video:family_friendly", _yes_no("family_friendly", video["family_friendly"]))

    tags = video.get("tag")
    if tags:
        if isinstance(tags, str):
            tags = [tags]
        for tag in tags:
            _text(v, "video:tag", tag)
    if video.get("category"):
        _text(v, "video:category", video["category"])
    if video.get("restriction"):
        relationship = _get(video, "restriction:relationship", "restriction_relationship")
        _text(v, "video:restriction", video["restriction"], relationship=relationship)
    if video.get("gallery_loc"):
        _text(
            v,
            "video:gallery_loc",
            video["gallery_loc"],
            title=_get(video, "gallery_loc:title", "gallery_loc_title"),
        )
    if video.get("price") is not None:
        _text(
            v,
            "video:price",
            video["price"],
            resolution=_get(video, "price:resolution", "price_resolution"),
            currency=_get(video, "price:currency", "price_currency"),
            type=_get(video, "price:type", "price_type"),
        )
    if video.get("requires_subscription") is not None:
        _text(v, "video:requires_subscription", _yes_no("requires_subscription", video["requires_subscription"]))
    if video.get("uploader"):
        _text(v, "video:uploader", video["uploader"], info=_get(video, "uploader:info", "uploader_info"))
    if video.get("platform"):
        relationship = _get(video, "platform:relationship", "platform_relationship")
        _text(v, "video:platform", video["platform"], relationship=relationship)
    if video.get("live") is not None:
        _text(v, "video:live", _yes_no("live", video["live"]))


def _build_news(url_el: ET.Element, news: Mapping[str, Any]) -> None:
    publication = news.get("publication") or {}
    if not (
        publication.get("name")
        and publication.get("language")
        and news.get("publication_date")
        and news.get("title")
    ):
        raise InvalidNewsFormat()

    n = ET.SubElement(url_el, "news:news")
    pub_el = ET.SubElement(n, "news:publication")
    _text(pub_el, "news:name", publication["name"])
    _text(pub_el, "news:language", publication["language"])

    if news.get("access"):
        if news["access"] not in NEWS_ACCESS:
            raise InvalidNewsAccessValue(news["access"])
        _text(n, "news:access", news["access"])
    if news.get("genres"):
        _text(n, "news:genres", news["genres"])
    _text(n, "news:publication_date", _format_date(news["publication_date"]))
    _text(n, "news:title", news["title"])
    if news.get("keywords"):
        _text(n, "news:keywords", news["keywords"])
    if news.get("stock_tickers"):
        _text(n, "news:stock_tickers", news["stock_tickers"])


def build_url_element(
    parent: ET.Element, entry: UrlEntry, now: Optional[datetime] = None
) -> ET.Element:
    """Append one <url> block for `entry` to `parent` and return it."""
    if not entry.url:
        raise InvalidEntry()

    url_el = ET.SubElement(parent, "url")
    _text(url_el, "loc", entry.url)

    lastmod = resolve_lastmod(entry, now)
    if lastmod:
        _text(url_el, "lastmod", lastmod)
    if entry.changefreq:
        if entry.changefreq not in CHANGEFREQ:
            raise ChangeFreqInvalid(entry.changefreq)
        _text(url_el, "changefreq", entry.changefreq)
    if entry.priority is not None:
        _text(url_el, "priority", _format_priority(entry.priority))

    for image in entry.images:
        _build_image(url_el, image)
    for video in entry.video:
        _build_video(url_el, video)
    for link in entry.links:
        ET.SubElement(
            url_el,
            "xhtml:link",
            {k: v for k, v in (("rel", "alternate"), ("hreflang", link.lang), ("href", link.url)) if v},
        )

    if entry.expires:
        _text(url_el, "expires", _format_date(entry.expires))
    if entry.android_link:
        ET.SubElement(url_el, "xhtml:link", {"rel": "alternate", "href": entry.android_link})
    if entry.mobile:
        mobile_el = ET.SubElement(url_el, "mobile:mobile")
        if isinstance(entry.mobile, str):
            mobile_el.set("type", entry.mobile)
    if entry.news:
        _build_news(url_el, entry.news)
    if entry.amp_link:
        ET.SubElement(url_el, "xhtml:link", {"rel": "amphtml", "href": entry.amp_link})

    return url_el
