"""Data models for the Grand Exchange catalog and market snapshots."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Mapping, Optional

from .utils import slugify


def coerce_int(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_number(value: object) -> int | float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                return 0
    return 0


@dataclass(frozen=True)
class Item:
    """A tradeable item from the catalog mapping."""

    id: int
    name: str
    examine: Optional[str] = None
    members: Optional[bool] = None
    limit: Optional[int] = None

    @property
    def slug(self) -> str:
        return slugify(self.name)

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> Optional["Item"]:
        item_id = coerce_int(payload.get("id"))
        name = payload.get("name")
        if item_id is None or not isinstance(name, str):
            return None
        examine = payload.get("examine")
        members = payload.get("members")
        return cls(
            id=item_id,
            name=name,
            examine=examine if isinstance(examine, str) else None,
            members=members if isinstance(members, bool) else None,
            limit=coerce_int(payload.get("limit")),
        )


@dataclass(frozen=True)
class Price:
    """Latest instant-buy (high) and instant-sell (low) prices."""

    high: int | float = 0
    low: int | float = 0

    EMPTY: ClassVar["Price"]

    @classmethod
    def from_dict(cls, payload: object) -> "Price":
        if not isinstance(payload, Mapping):
            return cls.EMPTY
        return cls(high=_as_number(payload.get("high")), low=_as_number(payload.get("low")))


Price.EMPTY = Price(0, 0)


@dataclass
class PriceSnapshot:
    prices: Dict[int, Price] = field(default_factory=dict)

    def price_for(self, item_id: int) -> Price:
        return self.prices.get(item_id, Price.EMPTY)

    def __len__(self) -> int:
        return len(self.prices)


@dataclass
class VolumeSnapshot:
    volumes: Dict[int, int] = field(default_factory=dict)

    def volume_for(self, item_id: int) -> int:
        return self.volumes.get(item_id, 0)

    def __len__(self) -> int:
        return len(self.volumes)


@dataclass
class MarketData:
    """The three upstream collections one run works from."""

    catalog: List[Item]
    prices: PriceSnapshot
    volumes: VolumeSnapshot


@dataclass(frozen=True)
class PageMetrics:
    price_up: bool
    spread: int | float
    profit_percent: float


def page_metrics(price: Price) -> PageMetrics:
    """Derive the spread figures shown on an item page.

    A zero low price gives a non-finite margin (``inf``, ``-inf`` or ``nan``)
    rather than an error.
    """

    spread = price.high - price.low
    if price.low == 0:
        percent = math.nan if spread == 0 else math.copysign(math.inf, spread)
    else:
        percent = spread / price.low * 100
    return PageMetrics(
        price_up=price.high > price.low,
        spread=spread,
        profit_percent=percent,
    )
