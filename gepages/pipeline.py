"""Fetch, render and write one static page per Grand Exchange item."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import SiteSettings
from .errors import RenderError
from .models import Item, MarketData
from .render import render_item_page
from .sitemap import render_sitemap
from .utils import chunked, utc_today
from .wiki import WikiPricesClient

LOGGER = logging.getLogger(__name__)

Renderer = Callable[..., str]
Sleeper = Callable[[float], Awaitable[object]]


@dataclass(frozen=True)
class ItemOutcome:
    """Result of building a single page: a written path or a recorded error."""

    item: Item
    path: Optional[Path] = None
    error: Optional[RenderError] = None

    @classmethod
    def written(cls, item: Item, path: Path) -> "ItemOutcome":
        return cls(item=item, path=path)

    @classmethod
    def failed(cls, item: Item, error: RenderError) -> "ItemOutcome":
        return cls(item=item, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.error is None:
            return f"{self.item.name}: ok"
        return f"{self.error.item_name}: {self.error}"


@dataclass
class BuildSummary:
    processed: int = 0
    errors: List[str] = field(default_factory=list)
    batches: int = 0
    pauses: int = 0
    sitemap_path: Optional[Path] = None

    @classmethod
    def from_outcomes(
        cls, outcomes: Iterable[ItemOutcome], *, batches: int = 0, pauses: int = 0
    ) -> "BuildSummary":
        summary = cls(batches=batches, pauses=pauses)
        for outcome in outcomes:
            if outcome.ok:
                summary.processed += 1
            else:
                summary.errors.append(outcome.describe())
        return summary

    @property
    def failed(self) -> int:
        return len(self.errors)

    def headline_errors(self, limit: int) -> Tuple[List[str], int]:
        """Return the first ``limit`` errors and how many were left out."""

        shown = self.errors[: max(0, limit)]
        return shown, len(self.errors) - len(shown)


class PageBuilder:
    """Runs the fetch, render and write steps for a full catalog."""

    def __init__(
        self,
        settings: SiteSettings,
        client: Optional[WikiPricesClient] = None,
        *,
        sleep: Sleeper = asyncio.sleep,
        renderer: Renderer = render_item_page,
    ) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client or WikiPricesClient(settings)
        self._sleep = sleep
        self._renderer = renderer
        self._today = utc_today()
        self._written = 0
        self._seen_slugs: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Public API

    async def run(self) -> BuildSummary:
        """Fetch the market data and build every page.

        ``TransportError`` and ``ParseError`` from the fetch phase propagate
        before anything is written.
        """

        try:
            data = await self.client.fetch_all()
        finally:
            if self._owns_client:
                self.client.close()
        return await self.build(data)

    async def build(self, data: MarketData) -> BuildSummary:
        self._today = utc_today()
        self._written = 0
        self._seen_slugs = {}
        self.settings.items_dir.mkdir(parents=True, exist_ok=True)
        LOGGER.info("Rendering %s item pages to %s", len(data.catalog), self.settings.items_dir)

        batches = list(chunked(data.catalog, self.settings.batch_size))
        outcomes: List[ItemOutcome] = []
        pauses = 0
        for index, batch in enumerate(batches):
            outcomes.extend(self.build_batch(batch, data))
            if index < len(batches) - 1:
                pauses += 1
                await self._sleep(self.settings.rate_limit_seconds)

        summary = BuildSummary.from_outcomes(outcomes, batches=len(batches), pauses=pauses)
        summary.sitemap_path = self.write_sitemap(data.catalog)
        self._log_summary(summary)
        LOGGER.info("Build complete")
        return summary

    def build_batch(self, batch: Sequence[Item], data: MarketData) -> List[ItemOutcome]:
        outcomes: List[ItemOutcome] = []
        for item in batch:
            outcome = self.build_item(item, data)
            outcomes.append(outcome)
            if outcome.ok:
                self._written += 1
                if self.settings.progress_every and self._written % self.settings.progress_every == 0:
                    LOGGER.info("Processed %s items...", self._written)
        return outcomes

    def build_item(self, item: Item, data: MarketData) -> ItemOutcome:
        price = data.prices.price_for(item.id)
        volume = data.volumes.volume_for(item.id)
        try:
            html = self._renderer(item, price, volume, self.settings, today=self._today)
            path = self.page_path(item)
            path.write_text(html, encoding="utf-8")
            self._note_slug(item)
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or exc.__class__.__name__
            LOGGER.debug("Failed to build page for %s", item.name, exc_info=True)
            return ItemOutcome.failed(item, RenderError(item.name, message))
        return ItemOutcome.written(item, path)

    def page_path(self, item: Item) -> Path:
        return self.settings.items_dir / f"{item.slug}.html"

    def write_sitemap(self, items: Sequence[Item]) -> Path:
        LOGGER.info("Generating sitemap")
        path = self.settings.sitemap_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_sitemap(items, self.settings, today=self._today), encoding="utf-8")
        return path

    # ------------------------------------------------------------------
    # Helpers

    def _note_slug(self, item: Item) -> None:
        slug = item.slug
        previous = self._seen_slugs.get(slug)
        if previous is not None and previous != item.name:
            LOGGER.warning(
                "Slug %r for %s overwrites the page written for %s", slug, item.name, previous
            )
        self._seen_slugs[slug] = item.name

    def _log_summary(self, summary: BuildSummary) -> None:
        LOGGER.info(
            "Successfully generated %s item pages in %s", summary.processed, self.settings.items_dir
        )
        if not summary.errors:
            return
        LOGGER.warning("Encountered %s errors:", summary.failed)
        shown, remaining = summary.headline_errors(self.settings.max_reported_errors)
        for error in shown:
            LOGGER.warning("  - %s", error)
        if remaining:
            LOGGER.warning("  ... and %s more", remaining)
