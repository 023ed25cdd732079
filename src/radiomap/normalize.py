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

"""
Turns raw radio-browser records into Station objects.
"""
import logging
import uuid
from typing import Iterable, Optional
from urllib.parse import quote

from radiomap.geo import GeoResolver, parse_coordinate
from radiomap.interfaces import Station

logger = logging.getLogger("NORMALIZE")

FAVICON_PLACEHOLDER = (
    "https://ui-avatars.com/api/?name={name}&background=random&color=fff&size=50"
)


def placeholder_favicon(name: str) -> str:
    return FAVICON_PLACEHOLDER.format(name=quote(name, safe=""))


def coerce_tags(tags) -> frozenset[str]:
    """Accept "a, b,c" or an iterable of strings."""
    if not tags:
        return frozenset()
    if isinstance(tags, str):
        items = tags.split(",")
    elif isinstance(tags, (list, tuple, set, frozenset)):
        items = [t for t in tags if isinstance(t, str)]
    else:
        return frozenset()
    return frozenset(t.strip() for t in items if t.strip())


def coerce_count(value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_record(record, resolver: GeoResolver) -> Optional[Station]:
    """Build a Station from one record, or None when it cannot be shown."""
    if not isinstance(record, dict):
        return None

    name = _text(record.get("name"))
    url = _text(record.get("url_resolved")) or _text(record.get("url"))
    if not (name and url):
        return None

    station_id = _text(record.get("stationuuid")) or uuid.uuid4().hex[:9]
    country = _text(record.get("country"))
    raw_latitude = parse_coordinate(record.get("geo_lat"))
    raw_longitude = parse_coordinate(record.get("geo_long"))

    return Station(
        id=station_id,
        name=name,
        url=url,
        position=resolver.resolve(raw_latitude, raw_longitude, country, seed=station_id),
        country=country,
        city=_text(record.get("state")) or _text(record.get("city")),
        language=_text(record.get("language")),
        favicon=_text(record.get("favicon")) or placeholder_favicon(name),
        tags=coerce_tags(record.get("tags")),
        votes=coerce_count(record.get("votes")),
        click_count=coerce_count(record.get("clickcount")),
        raw_latitude=raw_latitude,
        raw_longitude=raw_longitude,
    )


def normalize(records: Iterable, resolver: Optional[GeoResolver] = None) -> list[Station]:
    resolver = resolver or GeoResolver()
    stations = []
    dropped = 0
    for record in records:
        station = normalize_record(record, resolver)
        if station is None:
            dropped += 1
            continue
        stations.append(station)
    if dropped:
        logger.debug("dropped %s records without a name or stream url", dropped)
    return stations
