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
The radio-map coordinator.

RadioMap owns every piece of mutable application state: the station
collection, the viewport, the search query and the marker/playback selection.
State only changes through the action methods below, each of which notifies
subscribers once.
"""
import logging
from typing import Callable, Optional

from radiomap import search
from radiomap.config import (
    COUNTRY_ZOOM,
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    ERROR_MESSAGE,
    MAX_MARKERS,
    SEARCH_ZOOM,
)
from radiomap.controller import PlaybackController
from radiomap.directory import DirectoryClient
from radiomap.exceptions import FetchError
from radiomap.geo import GeoResolver, country_centroid
from radiomap.interfaces import Position, RadioMapTransport, Station, Viewport
from radiomap.normalize import normalize
from radiomap.projection import layout_markers, layout_popup

logger = logging.getLogger("RADIOMAP")

DEFAULT_VIEWPORT = Viewport(DEFAULT_CENTER, DEFAULT_ZOOM)


class RadioMap:
    def __init__(self, directory: DirectoryClient, transport: RadioMapTransport,
                 resolver: Optional[GeoResolver] = None, max_markers: int = MAX_MARKERS):
        self.directory = directory
        self.resolver = resolver or GeoResolver()
        self.max_markers = max_markers

        self.stations: list[Station] = []
        self.popular_countries: tuple[str, ...] = ()
        self.viewport = DEFAULT_VIEWPORT
        self.query = ""
        self.selected_marker: Optional[Station] = None
        self.loading = False
        self.error: Optional[str] = None

        self._subscribers: list[Callable[["RadioMap"], None]] = []
        self.controller = PlaybackController(
            transport,
            recenter=self._recenter,
            report_click=directory.report_click,
            on_change=self._notify,
        )

    # observers

    def subscribe(self, callback: Callable[["RadioMap"], None]):
        self._subscribers.append(callback)

    def _notify(self):
        for callback in self._subscribers:
            try:
                callback(self)
            except Exception:
                logger.error("subscriber %s failed", callback, exc_info=True)

    def _recenter(self, center: Position, zoom: float):
        self.viewport = Viewport(tuple(center), zoom)

    # loading

    async def load(self):
        """Fetch the station list and popular countries."""
        await self.load_stations()
        await self.load_popular_countries()

    async def load_stations(self):
        self.loading = True
        self._notify()
        try:
            records = await self.directory.fetch_stations()
            stations = normalize(records, self.resolver)
        except FetchError as e:
            logger.error("error fetching stations: %s", e)
            self.stations = []
            self.selected_marker = None
            self.error = ERROR_MESSAGE
        else:
            logger.info("loaded %s stations", len(stations))
            self.stations = stations
            self.selected_marker = None
            self.error = None
        finally:
            self.loading = False
        self._notify()

    async def load_popular_countries(self):
        try:
            self.popular_countries = await self.directory.fetch_popular_countries()
        except FetchError as e:
            logger.warning("error fetching countries: %s", e)
            return
        self._notify()

    async def retry(self):
        await self.load_stations()

    # user actions

    def find_station(self, station_id) -> Optional[Station]:
        return next((s for s in self.stations if s.id == station_id), None)

    def search(self, query: str):
        self.query = query
        if query.strip():
            match = search.find_location_match(self.stations, query)
            if match:
                self._recenter(match.position, SEARCH_ZOOM)
        else:
            self.viewport = DEFAULT_VIEWPORT
        self._notify()

    def select_marker(self, station_id):
        if self.selected_marker is not None and self.selected_marker.id == station_id:
            self.selected_marker = None
        else:
            self.selected_marker = self.find_station(station_id)
        self._notify()

    async def play(self, station_id):
        station = self.find_station(station_id)
        if station is None:
            logger.warning("station '%s' not found.", station_id)
            return
        await self.controller.select_station(station)

    async def toggle_play_pause(self):
        await self.controller.toggle_play_pause()

    def choose_country(self, country: str):
        self.query = country
        centroid = country_centroid(country)
        if centroid:
            self._recenter(centroid, COUNTRY_ZOOM)
        self._notify()

    async def reset(self):
        self.query = ""
        if self.controller.current_station is not None:
            await self.controller.stop()
        self.viewport = DEFAULT_VIEWPORT
        self._notify()

    def bounds_changed(self, center: Position, zoom: float):
        self.viewport = Viewport(tuple(center), zoom)
        self._notify()

    # views

    def visible_stations(self) -> list[Station]:
        return search.filter_stations(self.stations, self.query)

    def overlay(self) -> dict:
        markers = layout_markers(
            self.visible_stations(),
            self.viewport,
            current=self.controller.current_station,
            limit=self.max_markers,
        )
        popup = None
        if self.selected_marker is not None:
            popup = layout_popup(self.selected_marker, self.viewport)
        return {"markers": markers, "popup": popup}

    def snapshot(self) -> dict:
        current = self.controller.current_station
        visible = self.visible_stations()
        return {
            "loading": self.loading,
            "error": self.error,
            "query": self.query,
            "viewport": self.viewport.to_dict(),
            "station_count": len(self.stations),
            "match_count": len(visible),
            "popular_countries": list(self.popular_countries),
            "current_station": current.to_dict() if current else None,
            "is_playing": self.controller.is_playing,
            "playback": self.controller.state.value,
            "selected_marker": self.selected_marker.id if self.selected_marker else None,
            "overlay": self.overlay(),
        }

    async def close(self):
        await self.controller.close()
