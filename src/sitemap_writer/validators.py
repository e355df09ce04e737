"""
配置验证工具
Checks a raw (YAML-loaded) config mapping before it is turned into AppConfig.
"""
from __future__ import annotations

from typing import Any, List, Tuple
from urllib.parse import urlparse

from .builder import parse_xml_ns
from .item import CHANGEFREQ
from .sitemap import MAX_URLS_PER_SITEMAP


def validate_url(url: str) -> Tuple[bool, str]:
    """
    验证 URL 是否有效（必须是带域名的 http/https 地址）

    Returns:
        (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL must not be empty"

    url = url.strip()
    if not url:
        return False, "URL must not be empty"

    parsed = urlparse(url)
    if not parsed.scheme:
        return False, f"URL is missing a scheme: {url}"
    if parsed.scheme not in ("http", "https"):
        return False, f"URL scheme must be http or https: {url}"
    if not parsed.netloc:
        return False, f"URL is missing a host: {url}"
    return True, ""


def validate_hostname(hostname: str) -> Tuple[bool, str]:
    """验证 hostname（可以带路径前缀，但不能带 query / fragment）"""
    is_valid, msg = validate_url(hostname)
    if not is_valid:
        return False, f"hostname is invalid: {msg}"

    parsed = urlparse(hostname)
    if parsed.query or parsed.fragment:
        return False, f"hostname must not contain a query or fragment: {hostname}"
    return True, ""


def validate_xml_ns(xml_ns: str) -> Tuple[bool, str]:
    if not isinstance(xml_ns, str) or not xml_ns.strip():
        return False, "xml_ns must be a non-empty string"
    pairs = parse_xml_ns(xml_ns)
    if not pairs:
        return False, f"xml_ns has no key=value pairs: {xml_ns}"
    for key, _ in pairs:
        if key != "xmlns" and not key.startswith("xmlns:"):
            return False, f"xml_ns attribute must be xmlns or xmlns:<prefix>: {key}"
    return True, ""


def validate_sitemap_size(size: Any) -> Tuple[bool, str]:
    if isinstance(size, bool) or not isinstance(size, int):
        return False, f"must be an integer: {size!r}"
    if not 0 < size <= MAX_URLS_PER_SITEMAP:
        return False, f"must be between 1 and {MAX_URLS_PER_SITEMAP}: {size}"
    return True, ""


def _get(section: dict, snake: str, camel: str) -> Any:
    if snake in section:
        return section[snake]
    return section.get(camel)


def _validate_url_entry(i: int, entry: Any) -> List[str]:
    errors: List[str] = []
    if isinstance(entry, str):
        if not entry.strip():
            errors.append(f"'urls[{i}]' must not be empty")
        return errors
    if not isinstance(entry, dict):
        errors.append(f"'urls[{i}]' must be a string or a mapping")
        return errors
    if not entry.get("url"):
        errors.append(f"'urls[{i}].url' is required")
    changefreq = entry.get("changefreq")
    if changefreq is not None and changefreq not in CHANGEFREQ:
        errors.append(f"'urls[{i}].changefreq' must be one of {', '.join(CHANGEFREQ)}: {changefreq}")
    priority = entry.get("priority")
    if priority is not None:
        try:
            ok = 0.0 <= float(priority) <= 1.0
        except (TypeError, ValueError):
            ok = False
        if not ok:
            errors.append(f"'urls[{i}].priority' must be a number between 0.0 and 1.0: {priority}")
    return errors


def validate_config_basic(config_dict: dict) -> List[str]:
    """
    验证配置的基本结构

    Returns:
        错误消息列表（空列表表示无错误）
    """
    errors: List[str] = []

    if not isinstance(config_dict, dict):
        errors.append("Config must be a YAML mapping")
        return errors

    # site 部分（可选）
    site = config_dict.get("site") or {}
    if not isinstance(site, dict):
        errors.append("'site' must be a mapping")
    else:
        hostname = site.get("hostname")
        if hostname:
            is_valid, msg = validate_hostname(hostname)
            if not is_valid:
                errors.append(f"'site.hostname' {msg}")
        cache_time = _get(site, "cache_time", "cacheTime")
        if cache_time is not None and (
            isinstance(cache_time, bool) or not isinstance(cache_time, int) or cache_time < 0
        ):
            errors.append(f"'site.cache_time' must be a non-negative integer (milliseconds): {cache_time!r}")
        xml_ns = _get(site, "xml_ns", "xmlNs")
        if xml_ns is not None:
            is_valid, msg = validate_xml_ns(xml_ns)
            if not is_valid:
                errors.append(f"'site.xml_ns' {msg}")

    # index 部分（可选）
    index = config_dict.get("index") or {}
    if not isinstance(index, dict):
        errors.append("'index' must be a mapping")
    else:
        size = _get(index, "sitemap_size", "sitemapSize")
        if size is not None:
            is_valid, msg = validate_sitemap_size(size)
            if not is_valid:
                errors.append(f"'index.sitemap_size' {msg}")
        name = _get(index, "sitemap_name", "sitemapName")
        if name is not None and (not isinstance(name, str) or "/" in name or not name.strip()):
            errors.append(f"'index.sitemap_name' must be a plain file name prefix: {name!r}")

    # urls 部分
    urls = config_dict.get("urls")
    urls_file = _get(config_dict, "urls_file", "urlsFile")
    if urls is None and not urls_file:
        errors.append("Config needs 'urls' or 'urls_file'")
        return errors
    if urls is not None:
        if not isinstance(urls, list):
            errors.append("'urls' must be a list")
        else:
            for i, entry in enumerate(urls):
                errors.extend(_validate_url_entry(i, entry))

    return errors
