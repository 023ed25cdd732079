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
import logging
from typing import Awaitable, Callable, Optional

from radiomap.config import STATION_ZOOM
from radiomap.interfaces import (
    PlaybackState,
    Position,
    RadioMapTransport,
    Station,
)

logger = logging.getLogger("PLAYBACK")


class PlaybackController:
    """
    Coordinates station selection with the transport it owns.

    `recenter(position, zoom)` is called after every successful selection.
    `report_click(station_id)` is scheduled as a background task and its
    failures never reach the controller.
    """

    def __init__(
        self,
        transport: RadioMapTransport,
        recenter: Optional[Callable[[Position, float], None]] = None,
        report_click: Optional[Callable[[str], Awaitable[None]]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._transport = transport
        self._recenter = recenter
        self._report_click = report_click
        self._on_change = on_change
        self._click_tasks: set[asyncio.Task] = set()
        self.current_station: Optional[Station] = None
        self.state = PlaybackState.IDLE

        transport.on_error = self.on_error
        transport.on_ended = self.on_ended

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def _changed(self):
        if self._on_change:
            self._on_change()

    async def select_station(self, station: Station):
        if self.current_station is not None and self.current_station.id == station.id:
            await self.toggle_play_pause()
            return

        logger.info("selecting station %s (%s)", station.name, station.url)
        await self._transport.stop()
        self._transport.source = station.url
        self._schedule_click_report(station.id)
        self.current_station = station
        try:
            await self._transport.play()
        except Exception as e:
            logger.error("playback error: %s", e)
            self.state = PlaybackState.ERROR
            await self._transport.stop()
            self._changed()
            return

        self.state = PlaybackState.PLAYING
        if self._recenter:
            self._recenter(station.position, STATION_ZOOM)
        self._changed()

    async def toggle_play_pause(self):
        if self.current_station is None:
            return

        if self.state is PlaybackState.PLAYING:
            await self._transport.pause()
            self.state = PlaybackState.PAUSED
        else:
            try:
                await self._transport.play()
                self.state = PlaybackState.PLAYING
            except Exception as e:
                logger.error("playback error: %s", e)
                self.state = PlaybackState.ERROR
        self._changed()

    def on_ended(self):
        logger.info("stream ended")
        if self.current_station is None:
            return
        self.state = PlaybackState.IDLE
        self._changed()

    def on_error(self, reason: str):
        logger.error("transport error: %s", reason)
        if self.current_station is None:
            return
        self.state = PlaybackState.PAUSED
        self._changed()

    async def stop(self):
        """Stop playback and clear the current station."""
        await self._transport.stop()
        self.current_station = None
        self.state = PlaybackState.IDLE
        self._changed()

    async def close(self):
        for task in list(self._click_tasks):
            await asyncio.gather(task, return_exceptions=True)
        await self._transport.close()

    def _schedule_click_report(self, station_id: str):
        if not self._report_click:
            return
        task = asyncio.create_task(self._report_click(station_id))
        self._click_tasks.add(task)
        task.add_done_callback(self._click_done)

    def _click_done(self, task: asyncio.Task):
        self._click_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("error reporting station click: %s", task.exception())
