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
Screen offsets for map overlays.

Offsets are relative to the center of the map element. The same pixels per
degree factor is used on both axes, with no correction for latitude, so
markers stay aligned with how the front-end pans the map.
"""
from typing import Iterable, Optional

from radiomap.config import MAX_MARKERS, UNKNOWN_LOCATION
from radiomap.interfaces import Position, Station, Viewport
from radiomap.normalize import placeholder_favicon

ACTIVE_COLOR = "#059669"
ACTIVE_SIZE = 24
MARKER_SIZE = 16


def scale_for_zoom(zoom: float) -> float:
    """Pixels per degree at a zoom level."""
    return 100 * 2 ** (zoom - 1)


def project(position: Position, viewport: Viewport) -> tuple[float, float]:
    scale = scale_for_zoom(viewport.zoom)
    dx = (position[1] - viewport.center[1]) * scale
    dy = -(position[0] - viewport.center[0]) * scale
    return (dx, dy)


def marker_color(click_count: int) -> str:
    if click_count > 1000:
        return "#ef4444"
    if click_count > 500:
        return "#f87171"
    if click_count > 100:
        return "#fca5a5"
    return "#fecaca"


def layout_markers(stations: Iterable[Station], viewport: Viewport,
                   current: Optional[Station] = None,
                   limit: int = MAX_MARKERS) -> list[dict]:
    markers = []
    for station in stations:
        if len(markers) >= limit:
            break
        x, y = project(station.position, viewport)
        active = current is not None and station.id == current.id
        markers.append({
            "id": station.id,
            "name": station.name,
            "x": x,
            "y": y,
            "color": ACTIVE_COLOR if active else marker_color(station.click_count),
            "size": ACTIVE_SIZE if active else MARKER_SIZE,
            "z": 1000 if active else 1,
        })
    return markers


def location_label(station: Station) -> str:
    if station.city and station.country:
        return f"{station.city}, {station.country}"
    return station.country or station.city or UNKNOWN_LOCATION


def layout_popup(station: Station, viewport: Viewport) -> dict:
    x, y = project(station.position, viewport)
    return {
        "id": station.id,
        "name": station.name,
        "location": location_label(station),
        "favicon": station.favicon,
        "fallback_favicon": placeholder_favicon(station.name),
        "tags": sorted(station.tags),
        "x": x,
        "y": y,
    }
