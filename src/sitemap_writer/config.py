from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .sitemap import MAX_URLS_PER_SITEMAP

# camelCase option names accepted next to the snake_case ones
_ALIASES = {
    "cacheTime": "cache_time",
    "xslUrl": "xsl_url",
    "xmlNs": "xml_ns",
    "targetFolder": "target_folder",
    "sitemapName": "sitemap_name",
    "sitemapSize": "sitemap_size",
    "urlsFile": "urls_file",
}


@dataclass
class SiteConfig:
    hostname: Optional[str] = None
    cache_time: int = 0  # milliseconds, 0 disables the render cache
    xsl_url: Optional[str] = None
    xml_ns: Optional[str] = None


@dataclass
class OutputConfig:
    # single <urlset> document
    sitemap_xml: str = "sitemap.xml"
    gzip: bool = False


@dataclass
class IndexConfig:
    target_folder: str = "."
    sitemap_name: str = "sitemap"
    sitemap_size: int = MAX_URLS_PER_SITEMAP
    gzip: bool = False


@dataclass
class AppConfig:
    site: SiteConfig
    output: OutputConfig
    index: IndexConfig
    # str or mapping entries, see UrlEntry.from_raw
    urls: List[Any] = field(default_factory=list)


def _canonical_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_ALIASES.get(str(k), str(k)): v for k, v in data.items()}


def _load_raw_config(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def read_urls_file(path: Path) -> List[str]:
    """One URL per line; blank lines and lines starting with '#' are skipped."""
    urls: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


def config_from_mapping(raw: Dict[str, Any], base_dir: Optional[Path] = None) -> AppConfig:
    raw = _canonical_keys(raw)
    site_raw = _canonical_keys(raw.get("site") or {})
    output_raw = _canonical_keys(raw.get("output") or {})
    index_raw = _canonical_keys(raw.get("index") or {})

    hostname = site_raw.get("hostname")
    site = SiteConfig(
        hostname=str(hostname).rstrip("/") if hostname else None,
        cache_time=int(site_raw.get("cache_time") or 0),
        xsl_url=site_raw.get("xsl_url"),
        xml_ns=site_raw.get("xml_ns"),
    )

    output = OutputConfig(
        sitemap_xml=str(output_raw.get("sitemap_xml", "sitemap.xml")),
        gzip=bool(output_raw.get("gzip", False)),
    )

    index = IndexConfig(
        target_folder=str(index_raw.get("target_folder", ".")),
        sitemap_name=str(index_raw.get("sitemap_name") or "sitemap"),
        sitemap_size=int(index_raw.get("sitemap_size", MAX_URLS_PER_SITEMAP)),
        gzip=bool(index_raw.get("gzip", False)),
    )

    urls: List[Any] = list(raw.get("urls") or [])
    urls_file = raw.get("urls_file")
    if urls_file:
        urls_path = Path(urls_file)
        # Relative paths are resolved next to the config file
        if not urls_path.is_absolute() and base_dir is not None:
            urls_path = base_dir / urls_path
        urls.extend(read_urls_file(urls_path))

    return AppConfig(site=site, output=output, index=index, urls=urls)


def load_config(path: Path, validate: bool = True) -> AppConfig:
    raw = _load_raw_config(path)

    if validate:
        from .validators import validate_config_basic

        errors = validate_config_basic(raw)
        if errors:
            raise ValueError("Invalid config:\n" + "\n".join(f"  - {e}" for e in errors))

    return config_from_mapping(raw, base_dir=path.parent)
