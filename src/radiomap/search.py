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

from typing import Iterable, Optional

from radiomap.interfaces import Station


def parse_query(query: Optional[str]) -> list[str]:
    return (query or "").strip().lower().split()


def _fields(station: Station):
    yield station.name
    yield station.country
    yield station.city
    yield station.language
    yield from station.tags


def matches(station: Station, terms: list[str]) -> bool:
    """Every term must be a substring of at least one searchable field."""
    fields = [f.lower() for f in _fields(station) if f]
    return all(any(term in f for f in fields) for term in terms)


def filter_stations(stations: Iterable[Station], query: Optional[str]) -> list[Station]:
    stations = list(stations)
    terms = parse_query(query)
    if not terms:
        return stations
    return [s for s in stations if matches(s, terms)]


def find_location_match(stations: Iterable[Station], query: Optional[str]) -> Optional[Station]:
    """First station whose city or country contains the whole query."""
    needle = (query or "").strip().lower()
    if not needle:
        return None
    return next(
        (
            s
            for s in stations
            if needle in s.city.lower() or needle in s.country.lower()
        ),
        None,
    )
