"""Sitemap rendering."""
from __future__ import annotations

from html import escape as html_escape
from typing import Iterable, List, Sequence

from .config import SiteSettings
from .models import Item
from .utils import abs_url, item_path, utc_today


def _url_entry(loc: str, lastmod: str) -> List[str]:
    return [
        "    <url>",
        f"        <loc>{html_escape(loc, quote=False)}</loc>",
        f"        <lastmod>{lastmod}</lastmod>",
        "        <changefreq>daily</changefreq>",
        "    </url>",
    ]


def sitemap_locations(items: Iterable[Item], settings: SiteSettings) -> List[str]:
    """Absolute URLs in sitemap order: home first, then one per item."""

    locations = [abs_url(settings.base_url, "/")]
    locations.extend(abs_url(settings.base_url, item_path(item.slug)) for item in items)
    return locations


def render_sitemap(items: Sequence[Item], settings: SiteSettings, *, today: str | None = None) -> str:
    lastmod = today or utc_today()
    home, *pages = sitemap_locations(items, settings)
    entries = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"',
        '        xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">',
    ]
    entries.extend(_url_entry(home, lastmod))
    for loc in pages:
        entries.extend(_url_entry(loc, lastmod))
    entries.append("</urlset>")
    return "\n".join(entries)

