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
Best-effort map positions for stations.

Resolution order: explicit coordinates, then the country centroid table, then
a scatter around the default center. The scatter is not a location estimate;
it only keeps stations without location data from stacking on one point.
"""
import math
import random
from typing import Optional

from radiomap.config import DEFAULT_CENTER
from radiomap.interfaces import Position

SCATTER_SPREAD = 2.5

COUNTRY_CENTROIDS: dict[str, Position] = {
    "turkey": (39.0, 35.0),
    "united states": (37.0, -95.0),
    "united kingdom": (54.0, -2.0),
    "germany": (51.0, 10.0),
    "france": (46.0, 2.0),
    "italy": (42.0, 12.0),
    "spain": (40.0, -4.0),
    "russia": (60.0, 100.0),
    "china": (35.0, 105.0),
    "japan": (36.0, 138.0),
    "india": (20.0, 77.0),
    "brazil": (-10.0, -55.0),
    "canada": (60.0, -95.0),
    "australia": (-25.0, 135.0),
    "netherlands": (52.1326, 5.2913),
    "sweden": (62.0, 15.0),
    "norway": (62.0, 10.0),
    "finland": (64.0, 26.0),
    "poland": (52.0, 20.0),
    "mexico": (23.0, -102.0),
    "argentina": (-34.0, -64.0),
    "austria": (47.5162, 14.5501),
    "belgium": (50.8333, 4.0),
    "greece": (39.0, 22.0),
    "switzerland": (47.0, 8.0),
    "portugal": (39.5, -8.0),
    "denmark": (56.0, 10.0),
    "ireland": (53.0, -8.0),
    "new zealand": (-40.9006, 174.886),
}


def parse_coordinate(value) -> Optional[float]:
    """Return value as a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def country_centroid(country) -> Optional[Position]:
    """Look up a country name (case-insensitive, exact) in the centroid table."""
    if not isinstance(country, str):
        return None
    return COUNTRY_CENTROIDS.get(country.strip().lower())


def scatter_near_default(seed=None, center: Position = DEFAULT_CENTER,
                         spread: float = SCATTER_SPREAD) -> Position:
    """
    Approximate position for a station with no usable location.

    A single offset in [-spread, spread] is added to both latitude and
    longitude of `center`. The same seed always gives the same position.
    """
    rng = random.Random(seed) if seed is not None else random
    offset = rng.uniform(-spread, spread)
    return (center[0] + offset, center[1] + offset)


class GeoResolver:
    def __init__(self, centroids=None, center: Position = DEFAULT_CENTER,
                 spread: float = SCATTER_SPREAD):
        self.centroids = COUNTRY_CENTROIDS if centroids is None else centroids
        self.center = center
        self.spread = spread

    def resolve(self, latitude=None, longitude=None, country=None, seed=None) -> Position:
        """Map location hints to a position. Never fails."""
        lat = parse_coordinate(latitude)
        lon = parse_coordinate(longitude)
        if lat is not None and lon is not None:
            return (lat, lon)

        if isinstance(country, str):
            centroid = self.centroids.get(country.strip().lower())
            if centroid:
                return centroid

        return scatter_near_default(seed, self.center, self.spread)


_default_resolver = GeoResolver()


def resolve(latitude=None, longitude=None, country=None, seed=None) -> Position:
    return _default_resolver.resolve(latitude, longitude, country, seed)
