#!/usr/bin/env python3

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
import sys

import radiomap.config as config
from radiomap.app import RadioMap
from radiomap.client_websocket import WebsocketBridge
from radiomap.directory import DirectoryClient
from radiomap.exceptions import ConfigError
from radiomap.transport_mpv import MpvTransport

logger = logging.getLogger(__name__)


async def cleanup(app, bridge):
    logger.info("Cleaning up before exit...")
    try:
        await bridge.close()
    except Exception as e:
        logger.error("Error closing bridge: %s", e)
    await app.close()


async def main(app, bridge):
    """Runs the main event loop for radio-map."""
    try:
        # Serve while the first fetch runs so front-ends see the loading state.
        loader = asyncio.create_task(app.load())
        await bridge.run()
        await loader

    except asyncio.CancelledError:
        logger.info("exiting...")
        await cleanup(app, bridge)
        raise
    except Exception as e:
        logger.critical("Unexpected error in main: %s", e, exc_info=True)
        await cleanup(app, bridge)
        raise


def run():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)-8s - %(name)-12s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        app_config = config.make()

        app = RadioMap(
            DirectoryClient(app_config),
            MpvTransport(
                audio_channels=app_config.audio_channels,
                socket_path=app_config.mpv_socket_path,
            ),
        )
        bridge = WebsocketBridge(app, app_config.bridge_host, app_config.bridge_port)

        asyncio.run(main(app, bridge))

    except ConfigError as e:
        logger.critical("Configuration error: %s", e)
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        # KeyboardInterrupt handles SIGINT (Ctrl+C) and SIGTERM
        logger.info("Application terminated gracefully.")
    except Exception as e:
        logger.critical("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
