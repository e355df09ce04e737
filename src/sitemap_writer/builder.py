"""
Thin layer over xml.etree.ElementTree shared by <urlset> and <sitemapindex>
rendering: namespaces, the xmlNs override parser and document assembly.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple, Union

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
NEWS_NS = "http://www.google.com/schemas/sitemap-news/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"
MOBILE_NS = "http://www.google.com/schemas/sitemap-mobile/1.0"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"
VIDEO_NS = "http://www.google.com/schemas/sitemap-video/1.1"

URLSET_NAMESPACES: List[Tuple[str, str]] = [
    ("xmlns", SITEMAP_NS),
    ("xmlns:news", NEWS_NS),
    ("xmlns:xhtml", XHTML_NS),
    ("xmlns:mobile", MOBILE_NS),
    ("xmlns:image", IMAGE_NS),
    ("xmlns:video", VIDEO_NS),
]

SITEMAPINDEX_NAMESPACES: List[Tuple[str, str]] = [
    ("xmlns", SITEMAP_NS),
    ("xmlns:mobile", MOBILE_NS),
    ("xmlns:image", IMAGE_NS),
    ("xmlns:video", VIDEO_NS),
]

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_NS_PAIR = re.compile(r"""([^\s=]+)=("[^"]*"|'[^']*'|\S+)""")


def parse_xml_ns(raw: Optional[str]) -> List[Tuple[str, str]]:
    """
    Parse an xmlNs override such as
    'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" xmlns:image=...'
    into ordered (attribute, value) pairs. Surrounding quotes are stripped.
    """
    if not raw:
        return []
    pairs: List[Tuple[str, str]] = []
    for key, value in _NS_PAIR.findall(raw):
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        pairs.append((key, value))
    return pairs


def new_root(tag: str, namespaces: List[Tuple[str, str]]) -> ET.Element:
    root = ET.Element(tag)
    for key, value in namespaces:
        root.set(key, value)
    return root


def stylesheet_instruction(xsl_url: str) -> str:
    # ElementTree cannot place a PI before the root element, so it is rendered by hand
    href = xsl_url.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;")
    return f'<?xml-stylesheet type="text/xsl" href="{href}"?>'


def render_document(root: ET.Element, xsl_url: Optional[str] = None) -> str:
    parts = [XML_DECLARATION]
    if xsl_url:
        parts.append(stylesheet_instruction(xsl_url))
    parts.append(ET.tostring(root, encoding="unicode"))
    return "".join(parts)


def to_iso(value: Union[datetime, date]) -> str:
    """
    Format as ISO 8601 in UTC with millisecond precision, e.g.
    2024-01-31T10:20:30.000Z. Naive datetimes are taken as UTC.
    Plain dates are returned as YYYY-MM-DD.
    """
    if not isinstance(value, datetime):
        return value.isoformat()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
