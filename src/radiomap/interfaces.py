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

import abc
import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, TypedDict

logger = logging.getLogger(__name__)

Position = tuple[float, float]


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    url: str
    position: Position
    country: str = ""
    city: str = ""
    language: str = ""
    favicon: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    votes: int = 0
    click_count: int = 0
    raw_latitude: Optional[float] = None
    raw_longitude: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "country": self.country,
            "city": self.city,
            "language": self.language,
            "favicon": self.favicon,
            "tags": sorted(self.tags),
            "votes": self.votes,
            "clickcount": self.click_count,
            "position": list(self.position),
        }


@dataclass(frozen=True)
class Viewport:
    center: Position
    zoom: float

    def to_dict(self) -> dict:
        return {"center": list(self.center), "zoom": self.zoom}


class PlaybackState(enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class RadioMapEvent(TypedDict, total=False):
    event: str
    data: Optional[
        object
    ]  # Any JSON serializable data, including strings, numbers, lists, or dictionaries


class RadioMapTransport(abc.ABC):
    """
    Interface for audio transports (e.g. MpvTransport).

    A transport plays one source at a time. Owners register `on_error` and
    `on_ended` callbacks; implementations must invoke them on the event loop.
    """

    def __init__(self):
        self._source: Optional[str] = None
        self.on_error: Optional[Callable[[str], None]] = None
        self.on_ended: Optional[Callable[[], None]] = None

    @property
    def source(self) -> Optional[str]:
        """Get or set the stream URL the next play() will use."""
        return self._source

    @source.setter
    def source(self, value: Optional[str]):
        self._source = value

    def emit_error(self, reason: str):
        if self.on_error:
            self.on_error(reason)

    def emit_ended(self):
        if self.on_ended:
            self.on_ended()

    @abc.abstractmethod
    async def play(self):
        """Start or resume playback of the current source."""

    @abc.abstractmethod
    async def pause(self):
        """Pause playback, keeping the source."""

    @abc.abstractmethod
    async def stop(self):
        """Stop playback."""

    async def close(self):
        """Release any resources held by the transport."""
        await self.stop()


class RadioMapClient(abc.ABC):
    """
    Interface for front-end clients (e.g. WebsocketBridge).

    Incoming messages are dispatched by event name to handlers which call
    the coordinator's actions.
    """

    def __init__(self, app):
        self._app = app
        self._event_handlers = {}
        self.register_event("search", self._handle_search)
        self.register_event("select_marker", self._handle_select_marker)
        self.register_event("play", self._handle_play)
        self.register_event("toggle_play_pause", self._handle_toggle_play_pause)
        self.register_event("country", self._handle_country)
        self.register_event("reset", self._handle_reset)
        self.register_event("retry", self._handle_retry)
        self.register_event("bounds_changed", self._handle_bounds_changed)
        self.register_event("state_request", self._handle_state_request)
        # Ignored events
        for ignored in ("state", "ping"):
            self.register_event(ignored, self._handle_ignored)

    @property
    def app(self):
        """Get the coordinator instance."""
        return self._app

    def register_event(self, event_name: str, handler):
        """Register or override a handler for a specific event."""
        self._event_handlers[event_name] = handler

    async def broadcast(self, event, data=None):
        """Send an event to the front-end."""
        if event == "state":
            data = self.app.snapshot()
        message = json.dumps({"event": event, "data": data})
        try:
            await self._send(message)
        except Exception as e:
            logger.error("Broadcast error for %s: %s", self, e)

    async def handle_message(self, message: str):
        """Handle incoming messages."""
        try:
            event = json.loads(message)
            await self.handle_event(event)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Invalid message received: %s", message)
        except Exception:
            logger.error("Error handling message: %s", message, exc_info=True)

    async def handle_event(self, event: RadioMapEvent):
        """Dispatch event to registered handler, fallback to unknown."""
        if not (isinstance(event, dict) and "event" in event):
            raise ValueError("Invalid event structure")
        event_name = event.get("event")
        handler = self._event_handlers.get(event_name, self._handle_unknown)
        await handler(event)

    async def _handle_search(self, event):
        self.app.search(str(event.get("data") or ""))

    async def _handle_select_marker(self, event):
        self.app.select_marker(event.get("data"))

    async def _handle_play(self, event):
        station_id = event.get("data")
        if station_id:
            await self.app.play(station_id)
        else:
            await self.app.toggle_play_pause()

    async def _handle_toggle_play_pause(self, event):
        await self.app.toggle_play_pause()

    async def _handle_country(self, event):
        country = event.get("data")
        if country:
            self.app.choose_country(country)
        else:
            logger.warning("country event without a country name.")

    async def _handle_reset(self, event):
        await self.app.reset()

    async def _handle_retry(self, event):
        await self.app.retry()

    async def _handle_bounds_changed(self, event):
        data = event.get("data") or {}
        try:
            center = data["center"]
            self.app.bounds_changed((float(center[0]), float(center[1])), float(data["zoom"]))
        except (KeyError, IndexError, TypeError, ValueError):
            raise ValueError("bounds_changed requires {center: [lat, lon], zoom}")

    async def _handle_state_request(self, event):
        await self.broadcast("state")

    async def _handle_ignored(self, event):
        pass  # Ignore these events

    async def _handle_unknown(self, event):
        logger.warning("%s: unknown event: %s", self.__class__.__name__, event["event"])

    @abc.abstractmethod
    async def run(self):
        """Serve front-end connections until cancelled."""

    @abc.abstractmethod
    async def _send(self, message: str):
        """Send a message to the front-end."""

    @abc.abstractmethod
    async def close(self):
        """Close the client connection(s)."""
