import pytest

from radiomap.exceptions import FetchError, PlaybackError
from radiomap.interfaces import RadioMapTransport, Station


class FakeTransport(RadioMapTransport):
    def __init__(self, fail_play=False):
        super().__init__()
        self.fail_play = fail_play
        self.calls = []
        self.playing = False

    async def play(self):
        self.calls.append(("play", self.source))
        if self.fail_play:
            raise PlaybackError("boom")
        self.playing = True

    async def pause(self):
        self.calls.append(("pause", self.source))
        self.playing = False

    async def stop(self):
        self.calls.append(("stop", self.source))
        self.playing = False


class FakeDirectory:
    def __init__(self, records=None, countries=None, fail=False, fail_countries=False):
        self.records = records or []
        self.countries = countries or ()
        self.fail = fail
        self.fail_countries = fail_countries
        self.clicks = []

    async def fetch_stations(self, limit=None):
        if self.fail:
            raise FetchError("API responded with status: 503", 503)
        return self.records

    async def fetch_popular_countries(self):
        if self.fail_countries:
            raise FetchError("countries down")
        return tuple(self.countries)

    async def report_click(self, station_id):
        self.clicks.append(station_id)


def make_station(id, name="Radio", position=(54.0, 10.0), **kwargs):
    kwargs.setdefault("url", f"http://stream.example/{id}")
    return Station(id=id, name=name, position=position, **kwargs)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def station_records():
    return [
        {
            "stationuuid": "a1",
            "name": "Radio Ankara Pop",
            "url_resolved": "http://ankara.example/stream",
            "country": "Turkey",
            "state": "Ankara",
            "tags": "pop,hits",
            "language": "turkish",
            "clickcount": 1200,
            "geo_lat": 39.93,
            "geo_long": 32.85,
        },
        {
            "stationuuid": "b2",
            "name": "Berlin Jazz",
            "url_resolved": "http://berlin.example/stream",
            "country": "Germany",
            "city": "Berlin",
            "tags": "jazz",
        },
        {
            "stationuuid": "c3",
            "name": "Nowhere FM",
            "url_resolved": "http://nowhere.example/stream",
        },
        {"stationuuid": "d4", "name": "No Stream"},
    ]
