"""
Sitemap 文档（<urlset>）生成测试
Run with: pytest tests/test_sitemap.py -v
"""

import asyncio
import gzip
import re
import sys
import xml.etree.ElementTree as ET
from datetime import date, datetime
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from sitemap_writer.errors import (
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
    SitemapTooLarge,
)
from sitemap_writer.sitemap import Sitemap, create_sitemap

SM_NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _locs(xml: str):
    return re.findall(r"<loc>(.*?)</loc>", xml)


class TestRender:
    def test_add_and_render_in_order(self):
        sm = Sitemap(hostname="https://example.com")
        assert sm.add("page1") == 1
        assert sm.add("page2") == 2
        xml = sm.to_string()
        assert _locs(xml) == ["https://example.com/page1", "https://example.com/page2"]
        assert xml.count("<url>") == 2

    def test_declaration_and_default_namespaces(self):
        xml = Sitemap(["/a"], hostname="https://example.com").to_xml()
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?><urlset ')
        for ns in (
            'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"',
            'xmlns:news="http://www.google.com/schemas/sitemap-news/0.9"',
            'xmlns:xhtml="http://www.w3.org/1999/xhtml"',
            'xmlns:mobile="http://www.google.com/schemas/sitemap-mobile/1.0"',
            'xmlns:image="http://www.google.com/schemas/sitemap-image/1.1"',
            'xmlns:video="http://www.google.com/schemas/sitemap-video/1.1"',
        ):
            assert ns in xml

    def test_output_is_well_formed(self):
        sm = Sitemap(
            ["/a", {"url": "/b", "images": "/i.png", "links": [{"lang": "de", "url": "/de/b"}]}],
            hostname="https://example.com",
        )
        root = ET.fromstring(sm.to_string().encode("utf-8"))
        assert root.tag == f"{SM_NS}urlset"
        assert [el.text for el in root.iter(f"{SM_NS}loc")] == [
            "https://example.com/a",
            "https://example.com/b",
        ]

    def test_namespace_override(self):
        sm = Sitemap(
            ["/a"],
            xml_ns="xmlns=\"http://www.sitemaps.org/schemas/sitemap/0.9\" "
            "xmlns:image='http://www.google.com/schemas/sitemap-image/1.1'",
        )
        xml = sm.to_string()
        assert (
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" '
            'xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">'
        ) in xml
        assert "xmlns:news" not in xml

    def test_stylesheet_before_root(self):
        xml = Sitemap(["/a"], xsl_url="https://example.com/style.xsl").to_string()
        pi = '<?xml-stylesheet type="text/xsl" href="https://example.com/style.xsl"?>'
        assert xml.index(pi) < xml.index("<urlset")

    def test_no_double_slashes(self):
        sm = Sitemap(["/a", "b", "//c"], hostname="https://example.com/")
        for loc in _locs(sm.to_string()):
            assert loc.startswith("https://example.com/")
            assert "//" not in loc[len("https://"):]

    def test_special_characters_escaped(self):
        xml = Sitemap(["/search?a=1&b=2"], hostname="https://example.com").to_string()
        assert "<loc>https://example.com/search?a=1&amp;b=2</loc>" in xml

    def test_repeated_renders_identical(self):
        sm = Sitemap(["/a", "/b"], hostname="https://example.com")
        assert sm.to_string() == sm.to_string()

    def test_constructor_copies_url_list(self):
        urls = ["/a"]
        sm = Sitemap(urls)
        sm.add("/b")
        assert urls == ["/a"]

    def test_single_string_urls(self):
        assert len(Sitemap("/a")) == 1

    def test_missing_url_fails(self):
        sm = Sitemap([{"changefreq": "daily"}])
        with pytest.raises(InvalidEntry):
            sm.to_string()

    def test_too_many_urls_rejected(self):
        sm = Sitemap(["/a", "/b", "/c"])
        sm.limit = 2
        with pytest.raises(SitemapTooLarge):
            sm.to_string()

    def test_create_sitemap_camel_case(self):
        sm = create_sitemap(urls=["/a"], hostname="https://example.com", cacheTime=600000, xslUrl="/s.xsl")
        assert sm.cache_time == 600000
        assert sm.xsl_url == "/s.xsl"


class TestRemove:
    def test_remove_all_occurrences(self):
        sm = Sitemap(hostname="https://example.com")
        sm.add("page1")
        sm.add("page1")
        assert sm.remove("page1") == 2
        assert len(sm) == 0

    def test_remove_matches_records_and_keeps_order(self):
        sm = Sitemap(["/a", {"url": "/b", "priority": 0.5}, "/c", "/b"])
        assert sm.delete({"url": "/b"}) == 2
        assert sm.urls == ["/a", "/c"]

    def test_remove_missing(self):
        sm = Sitemap(["/a"])
        assert sm.remove("/zzz") == 0
        assert sm.urls == ["/a"]


class TestCache:
    def test_cache_disabled_by_default(self):
        sm = Sitemap(["/a"])
        sm.to_string()
        assert sm.is_cache_valid() is False

    def test_cached_within_ttl(self):
        clock = FakeClock()
        sm = Sitemap(["/a"], cache_time=10_000, clock=clock)
        first = sm.to_string()
        assert sm.is_cache_valid() is True
        # bypass add() so the cache is not invalidated
        sm.urls.append("/b")
        clock.now += 10
        assert sm.to_string() == first

    def test_expires_after_ttl(self):
        clock = FakeClock()
        sm = Sitemap(["/a"], cache_time=10_000, clock=clock)
        sm.to_string()
        sm.urls.append("/b")
        clock.now += 10.001
        assert sm.is_cache_valid() is False
        assert _locs(sm.to_string()) == ["/a", "/b"]

    def test_ttl_boundary_is_inclusive(self):
        clock = FakeClock()
        sm = Sitemap(["/a"], cache_time=10_000, clock=clock)
        sm.to_string()
        clock.now += 10.0
        assert sm.is_cache_valid() is True
        clock.now += 0.001
        assert sm.is_cache_valid() is False

    def test_clear_cache(self):
        sm = Sitemap(["/a"], cache_time=60_000)
        sm.to_string()
        sm.urls.append("/b")
        sm.clear_cache()
        assert _locs(sm.to_string()) == ["/a", "/b"]

    def test_add_and_remove_invalidate(self):
        sm = Sitemap(["/a"], cache_time=60_000)
        sm.to_string()
        sm.add("/b")
        assert sm.is_cache_valid() is False
        assert _locs(sm.to_string()) == ["/a", "/b"]
        sm.remove("/a")
        assert _locs(sm.to_string()) == ["/b"]


class TestItemFields:
    def test_basic_fields(self):
        sm = Sitemap(
            [{"url": "/a", "lastmod": "2024-01-02", "changefreq": "daily", "priority": 0.8}],
            hostname="https://example.com",
        )
        assert (
            "<url><loc>https://example.com/a</loc><lastmod>2024-01-02</lastmod>"
            "<changefreq>daily</changefreq><priority>0.8</priority></url>"
        ) in sm.to_string()

    def test_lastmod_date_objects(self):
        xml = Sitemap(
            [{"url": "/a", "lastmod": date(2024, 1, 2)}, {"url": "/b", "lastmod": datetime(2024, 1, 2, 3, 4, 5)}]
        ).to_string()
        assert "<lastmod>2024-01-02</lastmod>" in xml
        assert "<lastmod>2024-01-02T03:04:05.000Z</lastmod>" in xml

    def test_lastmod_realtime(self):
        xml = Sitemap([{"url": "/a", "lastmod_realtime": True}]).to_string()
        assert re.search(r"<lastmod>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z</lastmod>", xml)

    def test_lastmod_file(self, tmp_path):
        page = tmp_path / "page.html"
        page.write_text("<html></html>", encoding="utf-8")
        xml = Sitemap([{"url": "/a", "lastmod_file": str(page), "lastmod": "2000-01-01"}]).to_string()
        assert "2000-01-01" not in xml
        assert "<lastmod>" in xml

    def test_priority_formatting_and_validation(self):
        assert "<priority>1.0</priority>" in Sitemap([{"url": "/a", "priority": 1}]).to_string()
        with pytest.raises(PriorityInvalid):
            Sitemap([{"url": "/a", "priority": 1.5}]).to_string()
        with pytest.raises(PriorityInvalid):
            Sitemap([{"url": "/a", "priority": "high"}]).to_string()

    def test_invalid_changefreq(self):
        with pytest.raises(ChangeFreqInvalid):
            Sitemap([{"url": "/a", "changefreq": "sometimes"}]).to_string()

    def test_images(self):
        sm = Sitemap(
            [{"url": "/a", "images": {"url": "/i.png", "caption": "Cap", "title": "T", "license": "/lic"}}],
            hostname="https://example.com",
        )
        assert (
            "<image:image><image:loc>https://example.com/i.png</image:loc>"
            "<image:caption>Cap</image:caption><image:title>T</image:title>"
            "<image:license>/lic</image:license></image:image>"
        ) in sm.to_string()

    def test_alternate_links(self):
        sm = Sitemap(
            [{"url": "/p", "links": [{"lang": "de", "url": "/de/p"}]}],
            hostname="https://example.com",
        )
        assert '<xhtml:link rel="alternate" hreflang="de" href="https://example.com/de/p" />' in sm.to_string()

    def test_android_amp_mobile_expires(self):
        xml = Sitemap(
            [
                {
                    "url": "/p",
                    "androidLink": "android-app://com.example/p",
                    "ampLink": "https://example.com/amp/p",
                    "mobile": True,
                    "expires": "2030-01-01",
                }
            ]
        ).to_string()
        assert '<xhtml:link rel="alternate" href="android-app://com.example/p" />' in xml
        assert '<xhtml:link rel="amphtml" href="https://example.com/amp/p" />' in xml
        assert "<mobile:mobile />" in xml
        assert "<expires>2030-01-01</expires>" in xml

    def test_video(self):
        video = {
            "thumbnail_loc": "https://example.com/thumb.jpg",
            "title": "Title",
            "description": "Description",
            "player_loc": "https://example.com/player",
            "player_loc:autoplay": "ap=1",
            "player_loc:allow_embed": True,
            "duration": 120,
            "rating": 4.5,
            "family_friendly": "yes",
            "tag": ["a", "b"],
            "price": "1.99",
            "price:currency": "EUR",
            "live": False,
        }
        xml = Sitemap([{"url": "/v", "video": video}]).to_string()
        assert "<video:thumbnail_loc>https://example.com/thumb.jpg</video:thumbnail_loc>" in xml
        assert '<video:player_loc autoplay="ap=1" allow_embed="yes">https://example.com/player</video:player_loc>' in xml
        assert "<video:duration>120</video:duration>" in xml
        assert "<video:tag>a</video:tag><video:tag>b</video:tag>" in xml
        assert '<video:price currency="EUR">1.99</video:price>' in xml
        assert "<video:live>no</video:live>" in xml

    @pytest.mark.parametrize(
        "video, error",
        [
            ({"title": "T", "description": "D"}, InvalidVideoFormat),
            ({"thumbnail_loc": "t", "title": "T", "description": "x" * 2049}, InvalidVideoDescription),
            ({"thumbnail_loc": "t", "title": "T", "description": "D", "duration": 30000}, InvalidVideoDuration),
            ({"thumbnail_loc": "t", "title": "T", "description": "D", "duration": "long"}, InvalidVideoDuration),
            ({"thumbnail_loc": "t", "title": "T", "description": "D", "rating": 6}, InvalidVideoRating),
            ({"thumbnail_loc": "t", "title": "T", "description": "D", "family_friendly": "maybe"}, InvalidAttrValue),
        ],
    )
    def test_video_validation(self, video, error):
        with pytest.raises(error):
            Sitemap([{"url": "/v", "video": video}]).to_string()

    def test_news(self):
        news = {
            "publication": {"name": "The Example Times", "language": "en"},
            "genres": "PressRelease, Blog",
            "publication_date": "2024-01-02",
            "title": "Headline",
            "keywords": "a, b",
        }
        xml = Sitemap([{"url": "/n", "news": news}]).to_string()
        assert (
            "<news:news><news:publication><news:name>The Example Times</news:name>"
            "<news:language>en</news:language></news:publication>"
            "<news:genres>PressRelease, Blog</news:genres>"
            "<news:publication_date>2024-01-02</news:publication_date>"
            "<news:title>Headline</news:title><news:keywords>a, b</news:keywords></news:news>"
        ) in xml

    def test_news_validation(self):
        with pytest.raises(InvalidNewsFormat):
            Sitemap([{"url": "/n", "news": {"title": "T"}}]).to_string()
        with pytest.raises(InvalidNewsAccessValue):
            Sitemap(
                [
                    {
                        "url": "/n",
                        "news": {
                            "publication": {"name": "N", "language": "en"},
                            "publication_date": "2024-01-02",
                            "title": "T",
                            "access": "Free",
                        },
                    }
                ]
            ).to_string()


class TestCompressionAndAsync:
    def test_to_gzip(self):
        sm = Sitemap(["/a"], hostname="https://example.com")
        assert gzip.decompress(sm.to_gzip()).decode("utf-8") == sm.to_string()

    def test_to_xml_async(self):
        sm = Sitemap(["/a"], hostname="https://example.com")
        assert asyncio.run(sm.to_xml_async()) == sm.to_string()

    def test_to_gzip_async(self):
        sm = Sitemap(["/a"], hostname="https://example.com")
        data = asyncio.run(sm.to_gzip_async())
        assert gzip.decompress(data).decode("utf-8") == sm.to_string()

    def test_async_error_raised_on_await(self):
        sm = Sitemap([{"url": "/a", "changefreq": "sometimes"}])
        coro = sm.to_xml_async()
        with pytest.raises(ChangeFreqInvalid):
            asyncio.run(coro)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
