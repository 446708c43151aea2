"""General utility helpers."""
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")

_DISALLOWED_PATTERN = re.compile(r"[^\w\s-]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_HYPHEN_PATTERN = re.compile(r"-+")


def slugify(value: str) -> str:
    """Return the URL and filename token for an item name.

    Used for both the page filename and the canonical URL, so the two always
    agree. The result may be empty.
    """

    value = value.lower().strip()
    value = _DISALLOWED_PATTERN.sub("", value)
    value = _WHITESPACE_PATTERN.sub("-", value)
    return _HYPHEN_PATTERN.sub("-", value)


def item_path(slug: str) -> str:
    return f"/items/{slug}.html"


def abs_url(base_url: str, path: str) -> str:
    base = base_url.rstrip("/")
    if path.startswith("/"):
        return f"{base}{path}"
    return f"{base}/{path}"


def format_number(value: int | float) -> str:
    """Format with thousands separators, e.g. ``1234567`` -> ``1,234,567``."""

    if isinstance(value, float):
        if not math.isfinite(value):
            return str(value)
        if value.is_integer():
            return f"{int(value):,}"
        text = f"{value:,.3f}"
        return text.rstrip("0").rstrip(".")
    return f"{value:,}"


def format_percent(value: float) -> str:
    """Two fixed decimals; non-finite values keep their plain repr."""

    if not math.isfinite(value):
        return str(value)
    return f"{value:.2f}"


def utc_today(now: datetime | None = None) -> str:
    """Return the UTC calendar date as ``YYYY-MM-DD``."""

    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` entries."""

    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]
