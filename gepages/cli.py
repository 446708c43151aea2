"""Command line entrypoints for the item page generator."""
from __future__ import annotations

import argparse
import asyncio
import logging
import re
from pathlib import Path

from .config import load_settings
from .errors import ParseError, TransportError
from .pipeline import PageBuilder
from .utils import slugify

LOGGER = logging.getLogger(__name__)

_LOC_PATTERN = re.compile(r"<loc>([^<]+)</loc>")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grand Exchange item page generator")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser_ = subparsers.add_parser(
        "build", help="Fetch prices and regenerate every item page plus the sitemap"
    )
    build_parser_.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Site root that receives items/ and sitemap.xml",
    )
    build_parser_.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of pages rendered between rate-limit pauses",
    )
    build_parser_.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to pause between batches",
    )
    build_parser_.add_argument(
        "--base-url",
        default=None,
        help="Public site URL used for canonical links and the sitemap",
    )
    build_parser_.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when any item page failed",
    )
    build_parser_.set_defaults(func=handle_build)

    check_parser = subparsers.add_parser(
        "check", help="Verify that every sitemap item entry has a generated page"
    )
    check_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Site root that should contain the generated pages",
    )
    check_parser.set_defaults(func=handle_check)

    slug_parser = subparsers.add_parser("slug", help="Print the page slug for item names")
    slug_parser.add_argument("names", nargs="+", help="Item names to convert")
    slug_parser.set_defaults(func=handle_slug)

    return parser


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def handle_build(args: argparse.Namespace) -> None:
    if args.batch_size is not None and args.batch_size < 1:
        raise SystemExit("--batch-size must be at least 1")
    if args.delay is not None and args.delay < 0:
        raise SystemExit("--delay cannot be negative")
    settings = load_settings().with_overrides(
        output_dir=args.output,
        batch_size=args.batch_size,
        rate_limit_seconds=args.delay,
        base_url=args.base_url,
    )
    builder = PageBuilder(settings)
    try:
        summary = asyncio.run(builder.run())
    except (TransportError, ParseError) as exc:
        LOGGER.error("Build failed: %s", exc)
        raise SystemExit(1) from exc
    if getattr(args, "strict", False) and summary.errors:
        LOGGER.error("%s item pages failed", summary.failed)
        raise SystemExit(2)


def handle_check(args: argparse.Namespace) -> None:
    settings = load_settings().with_overrides(output_dir=args.output)
    errors: list[str] = []
    sitemap_path = settings.sitemap_path
    if not sitemap_path.exists():
        errors.append(f"Missing {settings.sitemap_filename} in {settings.output_dir}")
        locations: list[str] = []
    else:
        locations = _LOC_PATTERN.findall(sitemap_path.read_text(encoding="utf-8"))
    marker = "/items/"
    pages = 0
    for loc in locations:
        if marker not in loc:
            continue
        pages += 1
        filename = loc.rsplit(marker, 1)[1]
        if not (settings.items_dir / filename).exists():
            errors.append(f"Sitemap lists {loc} but {filename} was not generated")
    if errors:
        for error in errors:
            LOGGER.error(error)
        raise SystemExit(1)
    LOGGER.info("Check passed: %s item pages listed in %s", pages, sitemap_path)


def handle_slug(args: argparse.Namespace) -> None:
    for name in args.names:
        print(slugify(name))


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
