import math

from gepages.models import Item, Price, PriceSnapshot, VolumeSnapshot, page_metrics


def test_page_metrics_for_rising_price():
    metrics = page_metrics(Price(high=100, low=80))
    assert metrics.spread == 20
    assert f"{metrics.profit_percent:.2f}" == "25.00"
    assert metrics.price_up is True


def test_page_metrics_for_flat_price():
    metrics = page_metrics(Price(high=50, low=50))
    assert metrics.spread == 0
    assert f"{metrics.profit_percent:.2f}" == "0.00"
    assert metrics.price_up is False


def test_page_metrics_keeps_negative_spread():
    metrics = page_metrics(Price(high=90, low=100))
    assert metrics.spread == -10
    assert metrics.profit_percent == -10.0
    assert metrics.price_up is False


def test_page_metrics_with_zero_low_is_non_finite():
    assert math.isnan(page_metrics(Price.EMPTY).profit_percent)
    assert page_metrics(Price(high=10, low=0)).profit_percent == math.inf


def test_snapshots_default_missing_entries():
    prices = PriceSnapshot({4151: Price(high=1_500_000, low=1_450_000)})
    volumes = VolumeSnapshot({4151: 12000})
    assert prices.price_for(4151).high == 1_500_000
    assert prices.price_for(1) == Price(0, 0)
    assert volumes.volume_for(4151) == 12000
    assert volumes.volume_for(1) == 0


def test_item_from_dict_coerces_and_rejects():
    item = Item.from_dict({"id": "4151", "name": "Abyssal whip", "members": True, "limit": 70})
    assert item is not None
    assert item.id == 4151
    assert item.slug == "abyssal-whip"
    assert item.members is True
    assert Item.from_dict({"name": "No id"}) is None
    assert Item.from_dict({"id": 5, "name": None}) is None


def test_price_from_dict_treats_nulls_as_zero():
    assert Price.from_dict({"high": None, "low": 12}) == Price(high=0, low=12)
    assert Price.from_dict("garbage") == Price.EMPTY
