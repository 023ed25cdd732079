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
import os
import subprocess

from python_mpv_jsonipc import MPV

from radiomap.exceptions import PlaybackError
from radiomap.interfaces import RadioMapTransport

logger = logging.getLogger("PLAYER")

IPC_RETRIES = 20
IPC_RETRY_DELAY = 0.2


class MpvTransport(RadioMapTransport):
    def __init__(self, audio_channels: str = "stereo",
                 socket_path: str = "/tmp/radio-map-mpv.sock"):
        super().__init__()
        self.audio_channels = audio_channels
        self.socket_path = socket_path
        self.mpv_process = None
        self.mpv_sock = None
        self.mpv_sock_lock = asyncio.Lock()
        self._loaded_source = None
        self._loop = None

    async def play(self):
        """Load the current source if it changed, then unpause."""
        if not self.source:
            raise PlaybackError("no source set")

        sock = await self._ensure_mpv()
        try:
            if self._loaded_source != self.source:
                logger.info("loading %s", self.source)
                sock.command("loadfile", self.source, "replace")
                self._loaded_source = self.source
            sock.pause = False
        except Exception as e:
            raise PlaybackError(f"mpv refused playback: {e}")

    async def pause(self):
        if self.mpv_sock is None:
            return
        try:
            self.mpv_sock.pause = True
        except Exception as e:
            logger.warning("failed to pause mpv: %s", e)

    async def stop(self):
        """Stop playback, keeping the mpv process for the next source."""
        self._loaded_source = None
        if self.mpv_sock:
            try:
                self.mpv_sock.stop()
            except Exception as e:
                logger.warning("failed to stop mpv: %s", e)

    async def close(self):
        self._loaded_source = None
        if self.mpv_sock:
            try:
                self.mpv_sock.terminate()
            except Exception as e:
                logger.warning("error closing mpv IPC socket: %s", e)
            finally:
                self.mpv_sock = None

        if self.mpv_process:
            try:
                self.mpv_process.terminate()
                if os.path.exists(self.socket_path):
                    os.remove(self.socket_path)
            except OSError as e:
                logger.warning("error terminating mpv: %s", e)
            finally:
                self.mpv_process = None

    def _start_process(self):
        self.mpv_process = subprocess.Popen(
            [
                "mpv",
                "--idle=yes",
                "--no-osc",
                "--no-osd-bar",
                "--no-input-default-bindings",
                "--no-input-cursor",
                "--no-input-vo-keyboard",
                "--no-input-terminal",
                "--no-audio-display",
                f"--input-ipc-server={self.socket_path}",
                "--no-video",
                "--no-cache",
                "--stream-lavf-o=reconnect_streamed=1",
                "--profile=low-latency",
                f"--audio-channels={self.audio_channels}",
            ],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        if self.mpv_process.poll() is not None:
            self.mpv_process = None
            raise PlaybackError("failed to start mpv process.")
        logger.info("mpv process started with PID %s", self.mpv_process.pid)

    async def _ensure_mpv(self):
        if self.mpv_process is None or self.mpv_process.poll() is not None:
            self.mpv_sock = None
            try:
                self._start_process()
            except OSError as e:
                raise PlaybackError(f"failed to start mpv: {e}")
        sock = await self._establish_ipc_socket()
        if sock is None:
            raise PlaybackError("failed to establish mpv IPC socket.")
        return sock

    async def _establish_ipc_socket(self):
        async with self.mpv_sock_lock:
            if self.mpv_sock is not None:
                return self.mpv_sock
            self._loop = asyncio.get_running_loop()
            for i in range(IPC_RETRIES):
                try:
                    sock = await self._loop.run_in_executor(
                        None, lambda: MPV(start_mpv=False, ipc_socket=self.socket_path)
                    )
                    sock.bind_event("end-file", self._handle_end_file)
                    self.mpv_sock = sock
                    return sock
                except Exception as e:
                    logger.debug("mpv IPC attempt %s failed: %s", i + 1, e)
                    await asyncio.sleep(IPC_RETRY_DELAY)
            logger.error("failed to establish mpv IPC socket.")
            return None

    def _handle_end_file(self, event):
        # Runs on the mpv reader thread.
        reason = (event or {}).get("reason")
        if reason == "eof":
            self._loop.call_soon_threadsafe(self._ended)
        elif reason == "error":
            detail = event.get("file_error") or "unknown error"
            self._loop.call_soon_threadsafe(self._errored, detail)

    def _ended(self):
        self._loaded_source = None
        self.emit_ended()

    def _errored(self, detail):
        self._loaded_source = None
        self.emit_error(detail)
