import asyncio
import json

import pytest
import requests

from gepages.config import SiteSettings
from gepages.errors import ParseError, TransportError
from gepages.models import Price
from gepages.wiki import WikiPricesClient, parse_catalog, parse_prices, parse_volumes


class DummyResponse:
    def __init__(self, body: str, status_code: int = 200):
        self._body = body
        self.status_code = status_code

    def json(self):
        return json.loads(self._body)


class DummySession:
    def __init__(self, responses: dict):
        self.headers: dict = {}
        self.responses = responses
        self.calls: list[str] = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


SETTINGS = SiteSettings(api_base="https://prices.example.test/api/v1/osrs")


def test_client_sends_identifying_user_agent():
    session = DummySession({})
    WikiPricesClient(SETTINGS, session=session)
    assert session.headers["User-Agent"] == "osrs.lol bot"


def test_fetch_json_decodes_body():
    url = SETTINGS.mapping_url
    session = DummySession({url: DummyResponse('[{"id": 4151, "name": "Abyssal whip"}]')})
    client = WikiPricesClient(SETTINGS, session=session)
    payload = asyncio.run(client.fetch_json(url))
    assert payload == [{"id": 4151, "name": "Abyssal whip"}]


def test_fetch_json_raises_parse_error_with_url():
    url = SETTINGS.latest_url
    session = DummySession({url: DummyResponse("<html>502 Bad Gateway</html>")})
    client = WikiPricesClient(SETTINGS, session=session)
    with pytest.raises(ParseError) as excinfo:
        asyncio.run(client.fetch_json(url))
    assert url in str(excinfo.value)
    assert excinfo.value.url == url


def test_fetch_json_wraps_transport_failures():
    url = SETTINGS.volumes_url
    failure = requests.ConnectionError("connection refused")
    session = DummySession({url: failure})
    client = WikiPricesClient(SETTINGS, session=session)
    with pytest.raises(TransportError) as excinfo:
        asyncio.run(client.fetch_json(url))
    assert excinfo.value.cause is failure
    assert excinfo.value.url == url


def test_fetch_json_reports_html_error_pages_as_parse_errors():
    url = SETTINGS.mapping_url
    body = "<html><body>503 Service Unavailable</body></html>"
    session = DummySession({url: DummyResponse(body, status_code=503)})
    client = WikiPricesClient(SETTINGS, session=session)
    with pytest.raises(ParseError) as excinfo:
        asyncio.run(client.fetch_json(url))
    assert url in str(excinfo.value)


def test_fetch_json_returns_json_bodies_regardless_of_status(caplog):
    url = SETTINGS.latest_url
    session = DummySession({url: DummyResponse('{"data": {}}', status_code=500)})
    client = WikiPricesClient(SETTINGS, session=session)
    with caplog.at_level("WARNING", logger="gepages.wiki"):
        payload = asyncio.run(client.fetch_json(url))
    assert payload == {"data": {}}
    assert "status 500" in caplog.text


def test_parse_catalog_warns_about_skipped_entries(caplog):
    with caplog.at_level("WARNING", logger="gepages.wiki"):
        catalog = parse_catalog([{"id": 1, "name": "Ok"}, {"name": "No id"}, {"id": 3}])
    assert [item.id for item in catalog] == [1]
    assert "Skipped 2 catalog entries" in caplog.text


def test_fetch_all_requests_endpoints_in_order():
    session = DummySession(
        {
            SETTINGS.mapping_url: DummyResponse(
                json.dumps([{"id": 4151, "name": "Abyssal whip"}, {"id": 2, "name": "Cannonball"}])
            ),
            SETTINGS.latest_url: DummyResponse(
                json.dumps({"data": {"4151": {"high": 1500000, "highTime": 1, "low": 1450000}}})
            ),
            SETTINGS.volumes_url: DummyResponse(
                json.dumps({"timestamp": 1700000000, "data": {"4151": 8000, "2": 900000}})
            ),
        }
    )
    client = WikiPricesClient(SETTINGS, session=session)
    data = asyncio.run(client.fetch_all())
    assert session.calls == [SETTINGS.mapping_url, SETTINGS.latest_url, SETTINGS.volumes_url]
    assert [item.name for item in data.catalog] == ["Abyssal whip", "Cannonball"]
    assert data.prices.price_for(4151) == Price(high=1500000, low=1450000)
    assert data.prices.price_for(2) == Price.EMPTY
    assert data.volumes.volume_for(2) == 900000


def test_fetch_all_stops_at_first_failure():
    session = DummySession({SETTINGS.mapping_url: DummyResponse("not json")})
    client = WikiPricesClient(SETTINGS, session=session)
    with pytest.raises(ParseError):
        asyncio.run(client.fetch_all())
    assert session.calls == [SETTINGS.mapping_url]


def test_parsers_apply_defensive_defaults():
    assert parse_catalog({"unexpected": True}) == []
    catalog = parse_catalog([{"id": 1, "name": "Ok"}, {"name": "Missing id"}, "junk"])
    assert [item.id for item in catalog] == [1]
    prices = parse_prices({"10": {"high": 5, "low": None}, "bogus": {"high": 1}})
    assert prices.price_for(10) == Price(high=5, low=0)
    assert len(prices) == 1
    volumes = parse_volumes({"10": None, "11": "42"})
    assert volumes.volume_for(10) == 0
    assert volumes.volume_for(11) == 42
