import argparse
import sys
from pathlib import Path

from .config import load_config
from .errors import SitemapError
from .index import SitemapIndex
from .logger import get_logger, set_log_level
from .sitemap import Sitemap

logger = get_logger(__name__)

DEFAULT_CONFIG_NAME = "sitemap.config.yml"

CONFIG_TEMPLATE = """# sitemap-writer config
#
# 通常只需要改这几个地方：
# 1）site.hostname  —— 相对 URL 会拼接到这个地址上
# 2）urls / urls_file —— 要写进 sitemap 的页面
# 3）index          —— 超过 sitemap_size 时拆分输出的位置和文件名前缀

site:
  hostname: "https://example.com"
  # Optional XSL stylesheet referenced from every generated file
  # xsl_url: "https://example.com/sitemap.xsl"

urls:
  - "/"
  - url: "/about"
    changefreq: "monthly"
    priority: 0.8
  - url: "/gallery"
    images:
      - url: "/img/cover.jpg"
        caption: "Cover"
    links:
      - lang: "de"
        url: "/de/gallery"

# Alternatively keep URLs in a text file, one per line
# urls_file: "urls.txt"

output:
  sitemap_xml: "sitemap.xml"
  gzip: false

index:
  target_folder: "public"
  sitemap_name: "sitemap"
  sitemap_size: 50000
  gzip: false
"""


def cmd_init(args):
    """Create a starter config file in the current directory."""
    target = Path(args.path or DEFAULT_CONFIG_NAME)
    if target.exists() and not args.force:
        print(f"[WARN] Config file already exists: {target}", file=sys.stderr)
        return 1

    target.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    print(f"[OK] Created config file: {target}")
    return 0


def _load(args):
    config_path = Path(args.config or DEFAULT_CONFIG_NAME)
    if not config_path.exists():
        print(
            f"[ERROR] Config file not found: {config_path}. "
            f"Run `sitemap-writer init` first.",
            file=sys.stderr,
        )
        return None
    try:
        return load_config(config_path, validate=not getattr(args, "no_validate", False))
    except ValueError as e:
        print("[ERROR] Config validation failed:", file=sys.stderr)
        print(f"{e}", file=sys.stderr)
        print("\nHint: --no-validate skips validation (not recommended)", file=sys.stderr)
        return None
    except Exception as e:  # noqa: BLE001
        print(f"[ERROR] Failed to load config: {e}", file=sys.stderr)
        return None


def cmd_generate(args):
    """Write all configured URLs into a single sitemap document."""
    config = _load(args)
    if config is None:
        return 1

    output_path = Path(args.output or config.output.sitemap_xml)
    use_gzip = bool(args.gzip or config.output.gzip)
    if use_gzip and output_path.suffix != ".gz":
        output_path = output_path.with_name(output_path.name + ".gz")

    sitemap = Sitemap(
        config.urls,
        hostname=config.site.hostname,
        cache_time=config.site.cache_time,
        xsl_url=config.site.xsl_url,
        xml_ns=config.site.xml_ns,
    )
    try:
        if use_gzip:
            data = sitemap.to_gzip()
        else:
            data = sitemap.to_string().encode("utf-8")
    except SitemapError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    logger.info(f"Wrote sitemap with {len(sitemap)} URLs to {output_path}")
    return 0


def cmd_index(args):
    """Split configured URLs into several sitemap files plus an index file."""
    config = _load(args)
    if config is None:
        return 1

    target = Path(args.target or config.index.target_folder)
    if args.mkdir:
        target.mkdir(parents=True, exist_ok=True)

    try:
        index = SitemapIndex(
            config.urls,
            target,
            hostname=config.site.hostname,
            cache_time=config.site.cache_time,
            sitemap_name=config.index.sitemap_name,
            sitemap_size=args.size if args.size is not None else config.index.sitemap_size,
            xsl_url=config.site.xsl_url,
            xml_ns=config.site.xml_ns,
            gzip=bool(args.gzip or config.index.gzip),
        )
        written = index.write()
    except SitemapError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print(f"[OK] Wrote {len(index.sitemaps)} sitemap file(s) and {index.index_filename} ({len(written)} files) to {target}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="sitemap-writer",
        description="Generate sitemap.xml files and sitemap indexes from a URL list.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # init
    p_init = subparsers.add_parser(
        "init", help=f"Create a starter {DEFAULT_CONFIG_NAME} in current directory."
    )
    p_init.add_argument(
        "-p",
        "--path",
        help=f"Config file path (default: {DEFAULT_CONFIG_NAME})",
    )
    p_init.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing config file.",
    )
    p_init.set_defaults(func=cmd_init)

    # generate
    p_gen = subparsers.add_parser("generate", help="Write a single sitemap.xml.")
    p_gen.add_argument(
        "-c",
        "--config",
        help=f"Config file path (default: {DEFAULT_CONFIG_NAME})",
    )
    p_gen.add_argument(
        "-o",
        "--output",
        help="Output path (default: output.sitemap_xml from config).",
    )
    p_gen.add_argument(
        "--gzip",
        action="store_true",
        help="Write gzip-compressed output (.gz is appended to the file name).",
    )
    p_gen.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip configuration validation (not recommended).",
    )
    p_gen.set_defaults(func=cmd_generate)

    # index
    p_index = subparsers.add_parser(
        "index", help="Split URLs into several sitemaps and write a sitemap index."
    )
    p_index.add_argument(
        "-c",
        "--config",
        help=f"Config file path (default: {DEFAULT_CONFIG_NAME})",
    )
    p_index.add_argument(
        "-t",
        "--target",
        help="Target folder (default: index.target_folder from config).",
    )
    p_index.add_argument(
        "--size",
        type=int,
        help="Maximum URLs per sitemap file (overrides index.sitemap_size).",
    )
    p_index.add_argument(
        "--gzip",
        action="store_true",
        help="Write gzip-compressed sitemap files.",
    )
    p_index.add_argument(
        "--mkdir",
        action="store_true",
        help="Create the target folder if it does not exist.",
    )
    p_index.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip configuration validation (not recommended).",
    )
    p_index.set_defaults(func=cmd_index)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_log_level(args.log_level)

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1

    return int(func(args)) or 0


if __name__ == "__main__":
    raise SystemExit(main())
