# This file is part of the radio-map project.
#
# Copyright (c) 2025 radio-map contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

import asyncio
import json
import logging
import random
import urllib.error
import urllib.request
from urllib.parse import quote, urlencode

from radiomap.config import (
    HTTP_TIMEOUT,
    POPULAR_COUNTRY_COUNT,
    POPULAR_COUNTRY_MIN_STATIONS,
    USER_AGENT,
    RadioMapConfig,
)
from radiomap.exceptions import FetchError

logger = logging.getLogger("DIRECTORY")


def request_json(url, method="GET", timeout=HTTP_TIMEOUT):
    """Perform one HTTP request and decode the JSON body. No retries."""
    req = urllib.request.Request(
        url,
        method=method,
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                raise FetchError(
                    f"API responded with status: {response.status}", response.status
                )
            body = response.read()
    except urllib.error.HTTPError as e:
        raise FetchError(f"API responded with status: {e.code}", e.code)
    except (urllib.error.URLError, OSError) as e:
        raise FetchError(f"failed to reach {url}: {e}")

    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        raise FetchError(f"invalid JSON from {url}: {e}")


def popular_countries(countries, count=POPULAR_COUNTRY_COUNT,
                      min_stations=POPULAR_COUNTRY_MIN_STATIONS) -> tuple[str, ...]:
    """Top `count` country names having more than `min_stations` stations."""
    eligible = []
    for country in countries or []:
        if not isinstance(country, dict) or not country.get("name"):
            continue
        try:
            station_count = int(country.get("stationcount") or 0)
        except (TypeError, ValueError, OverflowError):
            continue
        if station_count > min_stations:
            eligible.append((station_count, country["name"]))
    eligible.sort(key=lambda c: c[0], reverse=True)
    return tuple(name for _, name in eligible[:count])


class DirectoryClient:
    """Client for the radio-browser directory service."""

    def __init__(self, config: RadioMapConfig, rng=None):
        self.config = config
        self._rng = rng or random.Random()

    def choose_base(self) -> str:
        return self._rng.choice(self.config.mirror_urls)

    async def _request(self, url, method="GET"):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, lambda: request_json(url, method, self.config.http_timeout)
        )

    async def fetch_stations(self, limit=None) -> list:
        params = urlencode({
            "limit": limit or self.config.station_limit,
            "hidebroken": "true",
            "has_geo_info": "true",
        })
        url = f"{self.choose_base()}/stations/search?{params}"
        logger.info("fetching stations from %s", url)
        data = await self._request(url)
        if not isinstance(data, list):
            raise FetchError("expected a list of stations")
        logger.info("fetched %s stations", len(data))
        return data

    async def fetch_countries(self) -> list:
        url = f"{self.choose_base()}/countries"
        data = await self._request(url)
        if not isinstance(data, list):
            raise FetchError("expected a list of countries")
        return data

    async def fetch_popular_countries(self) -> tuple[str, ...]:
        return popular_countries(await self.fetch_countries())

    async def report_click(self, station_id: str):
        """Tell the directory a station was played. Failures are only logged."""
        url = f"{self.choose_base()}/url/{quote(station_id, safe='')}"
        try:
            await self._request(url, method="POST")
        except FetchError as e:
            logger.warning("error reporting station click: %s", e)
