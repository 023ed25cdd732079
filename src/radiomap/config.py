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
Configuration for radio-map.
Map constants are fixed; network and player settings come from the environment.
"""
import logging
import os
from dataclasses import dataclass

from radiomap.exceptions import ConfigError

logger = logging.getLogger("CONFIG")

# Map view (Europe)
DEFAULT_CENTER = (54.0, 10.0)
DEFAULT_ZOOM = 4
STATION_ZOOM = 5
SEARCH_ZOOM = 6
COUNTRY_ZOOM = 4

# Rendering
MAX_MARKERS = 500

# Directory
DEFAULT_MIRRORS = ("de1", "fr1", "nl1")
MIRROR_URL_TEMPLATE = "https://{mirror}.api.radio-browser.info/json"
STATION_LIMIT = 1000
HTTP_TIMEOUT = 12
USER_AGENT = "RadioMap/1.0"
POPULAR_COUNTRY_COUNT = 10
POPULAR_COUNTRY_MIN_STATIONS = 10

# Display
ERROR_MESSAGE = "Radyo istasyonları yüklenirken bir hata oluştu."
UNKNOWN_LOCATION = "Bilinmeyen Konum"


@dataclass
class RadioMapConfig:
    mirrors: tuple[str, ...] = DEFAULT_MIRRORS
    station_limit: int = STATION_LIMIT
    http_timeout: float = HTTP_TIMEOUT
    bridge_host: str = "localhost"
    bridge_port: int = 1981
    audio_channels: str = "stereo"
    mpv_socket_path: str = "/tmp/radio-map-mpv.sock"

    @property
    def mirror_urls(self) -> list[str]:
        return [MIRROR_URL_TEMPLATE.format(mirror=m) for m in self.mirrors]


def _int_env(environ, name, default):
    value = environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def make(environ=None) -> RadioMapConfig:
    """
    Create a RadioMapConfig from environment variables, falling back to defaults.
    """
    environ = os.environ if environ is None else environ

    mirrors = tuple(
        m.strip()
        for m in environ.get("RADIOMAP_MIRRORS", ",".join(DEFAULT_MIRRORS)).split(",")
        if m.strip()
    )
    if not mirrors:
        raise ConfigError("RADIOMAP_MIRRORS must name at least one mirror.")

    station_limit = _int_env(environ, "RADIOMAP_STATION_LIMIT", STATION_LIMIT)
    if station_limit <= 0:
        raise ConfigError("RADIOMAP_STATION_LIMIT must be positive.")

    http_timeout = _int_env(environ, "RADIOMAP_HTTP_TIMEOUT", HTTP_TIMEOUT)
    bridge_port = _int_env(environ, "RADIOMAP_BRIDGE_PORT", 1981)
    if not 0 < bridge_port < 65536:
        raise ConfigError(f"RADIOMAP_BRIDGE_PORT out of range: {bridge_port}")

    config = RadioMapConfig(
        mirrors=mirrors,
        station_limit=station_limit,
        http_timeout=http_timeout,
        bridge_host=environ.get("RADIOMAP_BRIDGE_HOST", "localhost"),
        bridge_port=bridge_port,
        audio_channels=environ.get("RADIOMAP_AUDIO_CHANNELS", "stereo"),
        mpv_socket_path=environ.get(
            "RADIOMAP_MPV_SOCKET_PATH", "/tmp/radio-map-mpv.sock"
        ),
    )
    logger.info("Using mirrors: %s", ", ".join(config.mirrors))
    logger.info("Using bridge: %s:%s", config.bridge_host, config.bridge_port)
    return config
