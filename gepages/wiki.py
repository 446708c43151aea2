"""RuneScape Wiki real-time prices API client."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from .config import SiteSettings
from .errors import ParseError, TransportError
from .models import Item, MarketData, Price, PriceSnapshot, VolumeSnapshot, coerce_int

LOGGER = logging.getLogger(__name__)


def _unwrap(payload: Any) -> Any:
    """Strip the ``{"data": ...}`` envelope the latest/volumes endpoints use."""

    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


def parse_catalog(payload: Any) -> List[Item]:
    if not isinstance(payload, list):
        LOGGER.warning("Catalog payload is not a list; treating it as empty")
        return []
    items: List[Item] = []
    skipped = 0
    for entry in payload:
        item = Item.from_dict(entry) if isinstance(entry, dict) else None
        if item is None:
            LOGGER.debug("Skipping malformed catalog entry: %r", entry)
            skipped += 1
            continue
        items.append(item)
    if skipped:
        LOGGER.warning("Skipped %s catalog entries without a usable id and name", skipped)
    return items


def parse_prices(payload: Any) -> PriceSnapshot:
    data = _unwrap(payload)
    prices: Dict[int, Price] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            item_id = coerce_int(key)
            if item_id is None:
                continue
            prices[item_id] = Price.from_dict(value)
    return PriceSnapshot(prices)


def parse_volumes(payload: Any) -> VolumeSnapshot:
    data = _unwrap(payload)
    volumes: Dict[int, int] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            item_id = coerce_int(key)
            count = coerce_int(value)
            if item_id is None:
                continue
            volumes[item_id] = count or 0
    return VolumeSnapshot(volumes)


class WikiPricesClient:
    """Fetches the catalog, latest prices and volumes, one request at a time."""

    def __init__(self, settings: SiteSettings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": settings.user_agent})

    def _get(self, url: str) -> requests.Response:
        return self._session.get(url, timeout=self.settings.request_timeout)

    async def fetch_json(self, url: str) -> Any:
        """GET ``url`` once and decode the body as JSON.

        Transport failures raise ``TransportError``. The status code is not
        checked: a body that is not JSON (an HTML error page, say) raises
        ``ParseError``.
        """

        try:
            response = await asyncio.to_thread(self._get, url)
        except requests.RequestException as exc:
            raise TransportError(url, exc) from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError(url, str(exc)) from exc
        if response.status_code >= 400:
            LOGGER.warning("%s answered with status %s", url, response.status_code)
        return payload

    async def fetch_catalog(self) -> List[Item]:
        return parse_catalog(await self.fetch_json(self.settings.mapping_url))

    async def fetch_prices(self) -> PriceSnapshot:
        return parse_prices(await self.fetch_json(self.settings.latest_url))

    async def fetch_volumes(self) -> VolumeSnapshot:
        return parse_volumes(await self.fetch_json(self.settings.volumes_url))

    async def fetch_all(self) -> MarketData:
        LOGGER.info("Fetching item data from %s", self.settings.mapping_url)
        catalog = await self.fetch_catalog()
        LOGGER.info("Found %s items", len(catalog))
        LOGGER.info("Fetching latest prices")
        prices = await self.fetch_prices()
        LOGGER.info("Fetching trading volumes")
        volumes = await self.fetch_volumes()
        LOGGER.info("Loaded %s prices and %s volumes", len(prices), len(volumes))
        return MarketData(catalog=catalog, prices=prices, volumes=volumes)

    def close(self) -> None:
        self._session.close()
