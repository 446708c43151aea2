"""Item page rendering."""
from __future__ import annotations

import json
from html import escape as html_escape
from typing import Iterable

from .config import SiteSettings
from .models import Item, PageMetrics, Price, page_metrics
from .utils import abs_url, format_number, format_percent, item_path, utc_today

_STYLE = """
        :root {
            --bg-dark: #211e1c;
            --bg-main: #3a3532;
            --bg-contrast: #2a2725;
            --border-color: #504a45;
            --text-primary: #e5e0db;
            --text-secondary: #a8a29e;
            --accent-gold: #e7bc1c;
            --accent-green: #22c55e;
            --accent-red: #ef4444;
        }
        body {
            background-color: var(--bg-dark);
            color: var(--text-primary);
            font-family: 'Inter', sans-serif;
        }
        .bg-main { background-color: var(--bg-main); }
        .bg-dark-contrast { background-color: var(--bg-contrast); }
        .border-custom { border-color: var(--border-color); }
        .text-accent { color: var(--accent-gold); }
        .text-profit { color: var(--accent-green); }
        .text-loss { color: var(--accent-red); }
        .text-secondary { color: var(--text-secondary); }
        .text-volume { color: #3b82f6; }
"""


def _json_ld(payload: dict) -> str:
    encoded = json.dumps(payload, ensure_ascii=False, indent=2).replace("</", "<\\/")
    return f'<script type="application/ld+json">\n{encoded}\n</script>'


def product_json_ld(item: Item, price: Price, volume: int, url: str, settings: SiteSettings) -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "Product",
        "name": item.name,
        "description": f"OSRS Grand Exchange item: {item.name}",
        "brand": {"@type": "Organization", "name": settings.site_name},
        "offers": {
            "@type": "AggregateOffer",
            "priceCurrency": "OSRS GP",
            "lowPrice": str(price.low),
            "highPrice": str(price.high),
            "offerCount": str(volume),
        },
        "url": url,
        "itemId": str(item.id),
    }


def breadcrumb_json_ld(item: Item, url: str, settings: SiteSettings) -> dict:
    crumbs = [
        ("Home", abs_url(settings.base_url, "/")),
        ("Items", abs_url(settings.base_url, "/items/")),
        (item.name, url),
    ]
    return {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": position, "name": name, "item": target}
            for position, (name, target) in enumerate(crumbs, start=1)
        ],
    }


def _meta(name: str, content: str, *, attribute: str = "name") -> str:
    return f'<meta {attribute}="{name}" content="{html_escape(content)}">'


def _head(
    item: Item,
    price: Price,
    volume: int,
    metrics: PageMetrics,
    url: str,
    settings: SiteSettings,
) -> Iterable[str]:
    name = item.name
    icon = html_escape(settings.icon_url)
    percent = format_percent(metrics.profit_percent)
    yield '<meta charset="UTF-8">'
    yield '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
    yield f"<title>{html_escape(name)} - OSRS Grand Exchange Price &amp; Flipping Analysis</title>"
    yield _meta(
        "description",
        f"Real-time {name} price data, trading volume, and profit analysis for OSRS Grand Exchange. "
        f"Current price: {price.high} GP. High volume flipping opportunity.",
    )
    yield _meta(
        "keywords",
        f"{name}, OSRS, Grand Exchange, price, flipping, "
        f"{'profit' if metrics.price_up else 'loss'}, trading, RuneScape",
    )
    yield _meta("author", settings.site_name)
    yield _meta("robots", "index, follow, max-snippet:-1, max-image-preview:large, max-video-preview:-1")
    yield _meta("theme-color", "#e7bc1c")
    yield _meta("og:title", f"{name} - OSRS Price & Trading Analysis", attribute="property")
    yield _meta(
        "og:description",
        f"Live Grand Exchange price data for {name}. High: {price.high} GP, Low: {price.low} GP. "
        f"Volume: {format_number(volume)} items/4h.",
        attribute="property",
    )
    yield _meta("og:url", url, attribute="property")
    yield _meta("og:type", "website", attribute="property")
    yield _meta("og:image", settings.icon_url, attribute="property")
    yield _meta("twitter:card", "summary_large_image")
    yield _meta("twitter:title", f"{name} - OSRS GE Price")
    yield _meta(
        "twitter:description",
        f"High: {price.high} GP | Low: {price.low} GP | Spread: {metrics.spread} GP ({percent}%)",
    )
    yield _meta("twitter:image", settings.icon_url)
    yield f'<link rel="canonical" href="{html_escape(url)}">'
    yield f'<link rel="icon" type="image/png" href="{icon}">'
    yield f'<link rel="apple-touch-icon" href="{icon}">'
    yield _json_ld(product_json_ld(item, price, volume, url, settings))
    yield _json_ld(breadcrumb_json_ld(item, url, settings))
    yield '<script src="https://cdn.tailwindcss.com"></script>'
    yield '<link rel="preconnect" href="https://fonts.googleapis.com">'
    yield '<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>'
    yield (
        '<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;700&amp;display=swap" '
        'rel="stylesheet">'
    )
    yield f"<style>{_STYLE}</style>"


def _stat_card(label: str, value: str, footnote: str, *, value_class: str = "") -> str:
    classes = "text-2xl font-bold" + (f" {value_class}" if value_class else "")
    return (
        '<div class="bg-dark-contrast p-4 rounded">'
        f'<p class="text-secondary text-sm mb-1">{label}</p>'
        f'<p class="{classes}">{value}</p>'
        f'<p class="text-xs text-secondary mt-2">{footnote}</p>'
        "</div>"
    )


def _body(item: Item, price: Price, volume: int, metrics: PageMetrics, today: str, settings: SiteSettings) -> str:
    name = html_escape(item.name)
    icon = html_escape(settings.icon_url)
    spread_class = "text-profit" if metrics.price_up else "text-loss"
    cards = "\n".join(
        [
            _stat_card("High Price", format_number(price.high), "GP"),
            _stat_card("Low Price", format_number(price.low), "GP"),
            _stat_card(
                "Spread / Profit Potential",
                format_number(metrics.spread),
                f"{format_percent(metrics.profit_percent)}% margin",
                value_class=spread_class,
            ),
        ]
    )
    volume_card = _stat_card(
        "Trading Volume (4 hour)",
        format_number(volume),
        "Items traded per 4 hours",
        value_class="text-volume",
    )
    return f"""<div class="container mx-auto max-w-6xl p-4 md:p-8">
<header class="text-center mb-8">
<div class="flex justify-center items-center space-x-4 mb-4">
<img src="{icon}" alt="OSRS Coins" class="h-12">
<div>
<h1 class="text-4xl font-bold mb-2"><a href="/" class="text-accent no-underline hover:opacity-80">{name}</a></h1>
<p class="text-lg text-secondary">OSRS Grand Exchange Price Analysis</p>
</div>
<img src="{icon}" alt="OSRS Coins" class="h-12 transform -scale-x-100">
</div>
<nav class="mb-6"><a href="/" class="text-accent hover:opacity-80 mr-4">&larr; Back to Tool</a></nav>
</header>
<main>
<section class="bg-main border border-custom rounded-lg p-6 mb-6">
<h2 class="text-2xl font-bold text-accent mb-4">Current Market Data</h2>
<div class="grid grid-cols-1 md:grid-cols-3 gap-4 mb-6">
{cards}
</div>
{volume_card}
</section>
<section class="bg-main border border-custom rounded-lg p-6">
<h2 class="text-2xl font-bold text-accent mb-4">About {name}</h2>
<p class="text-secondary mb-4">This page provides real-time Grand Exchange price data for <strong>{name}</strong> in Old School RuneScape.
The high-low price spread and trading volume are updated regularly to help you make informed trading decisions.</p>
<p class="text-secondary mb-4"><strong>Item ID:</strong> {item.id}</p>
<p class="text-secondary">For a complete analysis tool with advanced flipping strategies and budget-based recommendations,
<a href="/" class="text-accent hover:underline">return to the main OSRS flipping tool</a>.</p>
</section>
</main>
<footer class="text-center text-secondary text-sm mt-12 py-6 border-t border-custom">
<p>Data provided by <a href="https://prices.runescape.wiki/" class="text-accent hover:underline">RuneScape Wiki</a></p>
<p class="mt-2">Last updated: {today}</p>
</footer>
</div>"""


def render_item_page(
    item: Item,
    price: Price,
    volume: int,
    settings: SiteSettings,
    *,
    today: str | None = None,
) -> str:
    """Return the complete HTML document for one item."""

    metrics = page_metrics(price)
    url = abs_url(settings.base_url, item_path(item.slug))
    head = "\n".join(f"  {part}" for part in _head(item, price, volume, metrics, url, settings))
    body = _body(item, price, volume, metrics, today or utc_today(), settings)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en" data-theme="dark">\n'
        f"<head>\n{head}\n</head>\n"
        f'<body class="font-sans">\n{body}\n</body>\n'
        "</html>\n"
    )
