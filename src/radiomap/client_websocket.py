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
from http import HTTPStatus

import websockets
from websockets.asyncio.server import ServerConnection, broadcast, serve

from radiomap.interfaces import RadioMapClient

logger = logging.getLogger("BRIDGE")


class WebsocketBridge(RadioMapClient):
    """Serves the map front-end over websockets."""

    def __init__(self, app, host: str = "localhost", port: int = 1981):
        super().__init__(app)
        self.host = host
        self.port = port
        self.connections: set = set()
        self._server = None
        self._state_pending = False
        app.subscribe(self._state_changed)

    async def run(self):
        # Suppress websocket healthcheck, connection logs.
        logging.getLogger("websockets.server").setLevel(logging.WARNING)

        async with serve(
            self._serve_connection,
            self.host,
            self.port,
            process_request=self._process_request,
        ) as server:
            self._server = server
            logger.info("listening on %s:%s", self.host, self.port)
            await server.serve_forever()

    async def _process_request(
        self,
        connection: ServerConnection,
        request: websockets.http11.Request,
    ) -> None | websockets.http11.Response:
        if request.path == "/healthz":
            return connection.respond(HTTPStatus.OK, "OK\n")

        # Require a WebSocket upgrade to proceed with handshake
        if not (
            request.headers.get("Upgrade", "").lower() == "websocket"
            and "upgrade" in request.headers.get("Connection", "").lower()
        ):
            return connection.respond(
                HTTPStatus.UPGRADE_REQUIRED,
                "WebSocket upgrade required for this endpoint.\n",
            )
        return None

    async def _serve_connection(self, websocket):
        self.connections.add(websocket)
        logger.info("front-end connected (%s open)", len(self.connections))
        try:
            await websocket.send(self._state_message())
            async for msg in websocket:
                await self.handle_message(msg)
        except websockets.exceptions.ConnectionClosedError:
            # Suppress expected disconnect errors
            pass
        finally:
            self.connections.discard(websocket)
            logger.info("front-end disconnected (%s open)", len(self.connections))

    def _state_message(self) -> str:
        return json.dumps({"event": "state", "data": self.app.snapshot()})

    def _state_changed(self, app):
        # Actions may notify several times; send one state message per loop turn.
        if self._state_pending or not self.connections:
            return
        self._state_pending = True
        asyncio.get_running_loop().call_soon(self._flush_state)

    def _flush_state(self):
        self._state_pending = False
        if self.connections:
            broadcast(self.connections, self._state_message())

    async def _send(self, message: str):
        if self.connections:
            broadcast(self.connections, message)

    async def close(self):
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
