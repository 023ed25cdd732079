import json
import random
import urllib.error
import urllib.request

import pytest

from radiomap.config import RadioMapConfig
from radiomap.directory import DirectoryClient, popular_countries, request_json
from radiomap.exceptions import FetchError


class FakeResponse:
    def __init__(self, body=b"", status=200):
        self.body = body
        self.status = status

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def urlopen_queue(monkeypatch):
    """Record requests made through urlopen and answer from a queue."""
    sent = []
    replies = []

    def fake_urlopen(req, timeout=None):
        sent.append(req)
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    return sent, replies


def test_request_json_decodes_body(urlopen_queue):
    sent, replies = urlopen_queue
    replies.append(FakeResponse(json.dumps([{"name": "x"}]).encode()))
    assert request_json("http://x/json") == [{"name": "x"}]
    assert sent[0].get_header("Accept") == "application/json"


def test_request_json_http_error(urlopen_queue):
    _, replies = urlopen_queue
    replies.append(urllib.error.HTTPError("http://x", 503, "down", {}, None))
    with pytest.raises(FetchError) as exc:
        request_json("http://x")
    assert exc.value.status == 503


def test_request_json_network_error(urlopen_queue):
    _, replies = urlopen_queue
    replies.append(urllib.error.URLError("no route"))
    with pytest.raises(FetchError):
        request_json("http://x")


def test_request_json_bad_status(urlopen_queue):
    _, replies = urlopen_queue
    replies.append(FakeResponse(b"[]", status=302))
    with pytest.raises(FetchError):
        request_json("http://x")


def test_request_json_bad_body(urlopen_queue):
    _, replies = urlopen_queue
    replies.append(FakeResponse(b"<html>"))
    with pytest.raises(FetchError):
        request_json("http://x")


@pytest.mark.asyncio
async def test_fetch_stations_url(urlopen_queue):
    sent, replies = urlopen_queue
    replies.append(FakeResponse(b"[]"))
    client = DirectoryClient(RadioMapConfig(mirrors=("fr1",)))
    assert await client.fetch_stations() == []
    assert sent[0].full_url == (
        "https://fr1.api.radio-browser.info/json/stations/search"
        "?limit=1000&hidebroken=true&has_geo_info=true"
    )


@pytest.mark.asyncio
async def test_fetch_stations_rejects_non_list(urlopen_queue):
    _, replies = urlopen_queue
    replies.append(FakeResponse(b'{"error": 1}'))
    client = DirectoryClient(RadioMapConfig())
    with pytest.raises(FetchError):
        await client.fetch_stations()


@pytest.mark.asyncio
async def test_fetch_is_not_retried(urlopen_queue):
    sent, replies = urlopen_queue
    replies.append(urllib.error.URLError("down"))
    client = DirectoryClient(RadioMapConfig())
    with pytest.raises(FetchError):
        await client.fetch_stations()
    assert len(sent) == 1


@pytest.mark.asyncio
async def test_report_click_ignores_failures(urlopen_queue):
    sent, replies = urlopen_queue
    replies.append(urllib.error.HTTPError("http://x", 500, "oops", {}, None))
    client = DirectoryClient(RadioMapConfig(mirrors=("de1",)))
    await client.report_click("abc-123")
    assert sent[0].get_method() == "POST"
    assert sent[0].full_url == "https://de1.api.radio-browser.info/json/url/abc-123"


@pytest.mark.asyncio
async def test_fetch_popular_countries(urlopen_queue):
    _, replies = urlopen_queue
    countries = [
        {"name": "Germany", "stationcount": 3000},
        {"name": "Turkey", "stationcount": 900},
        {"name": "Tiny", "stationcount": 4},
    ]
    replies.append(FakeResponse(json.dumps(countries).encode()))
    client = DirectoryClient(RadioMapConfig())
    assert await client.fetch_popular_countries() == ("Germany", "Turkey")


def test_choose_base_uses_mirror_pool():
    client = DirectoryClient(RadioMapConfig(), rng=random.Random(1))
    bases = {client.choose_base() for _ in range(50)}
    assert bases <= {
        "https://de1.api.radio-browser.info/json",
        "https://fr1.api.radio-browser.info/json",
        "https://nl1.api.radio-browser.info/json",
    }
    assert len(bases) > 1


def test_popular_countries_filters_and_ranks():
    countries = [{"name": f"C{i}", "stationcount": i * 10} for i in range(15)]
    countries += [{"name": "", "stationcount": 999}, {"stationcount": 999}, "junk"]
    result = popular_countries(countries)
    assert result == tuple(f"C{i}" for i in range(14, 4, -1))


def test_popular_countries_needs_more_than_ten():
    assert popular_countries([{"name": "Ten", "stationcount": 10}]) == ()
    assert popular_countries([{"name": "Eleven", "stationcount": 11}]) == ("Eleven",)


def test_popular_countries_skips_overflowing_counts():
    countries = json.loads('[{"name": "Inf", "stationcount": 1e400}, {"name": "Ok", "stationcount": 50}]')
    assert popular_countries(countries) == ("Ok",)
