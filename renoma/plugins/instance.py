"""
Connection to a single plugin process.

A PluginInstance owns one subprocess. Requests are written to its stdin one
line at a time; a single background reader task decodes its stdout and
resolves the future registered under each response id.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from renoma.domains.plugins import PluginManifest
from renoma.interfaces.plugins.plugins import PluginTransport
from renoma.plugins.errors import (
    PluginProtocolError,
    PluginTimeoutError,
    PluginTransportError,
)
from renoma.plugins.protocol import (
    Notification,
    Request,
    RequestId,
    Response,
    decode_message,
    encode_message,
)

logger = logging.getLogger(__name__)

# Maximum length of a single protocol line
STREAM_LIMIT = 16 * 1024 * 1024


class PluginInstance(PluginTransport):
    """Host-side runtime for one plugin subprocess."""

    def __init__(
        self,
        path: str,
        process: asyncio.subprocess.Process,
        request_timeout: Optional[float] = None,
    ):
        """Internal constructor - use start() instead"""
        self.path = path
        self.process = process
        self.request_timeout = request_timeout
        self.manifest: Optional[PluginManifest] = None
        self._pending: Dict[RequestId, asyncio.Future] = {}
        self._write_lock = asyncio.Lock()
        self._closed = False
        self._reader_task: Optional[asyncio.Task] = None

    @classmethod
    async def start(
        cls,
        path: Union[str, Path],
        request_timeout: Optional[float] = None,
    ) -> "PluginInstance":
        """Spawn the plugin executable and start its reader task.

        Args:
            path: Path to the plugin executable
            request_timeout: Seconds to wait for each response, None waits forever

        Returns:
            Running PluginInstance

        Raises:
            PluginTransportError: If the process cannot be spawned
        """
        path = str(path)
        try:
            process = await asyncio.create_subprocess_exec(
                path,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise PluginTransportError(f"Failed to spawn plugin {path}: {e}") from e

        instance = cls(path, process, request_timeout=request_timeout)
        instance._reader_task = asyncio.create_task(instance._reader_loop())
        logger.debug(f"Spawned plugin process {path} (pid {process.pid})")
        return instance

    @property
    def name(self) -> str:
        if self.manifest is not None:
            return self.manifest.name
        return self.path

    @property
    def is_running(self) -> bool:
        return not self._closed and self.process.returncode is None

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def _reader_loop(self) -> None:
        """Read lines from the plugin and dispatch them until EOF"""
        stdout = self.process.stdout
        try:
            while True:
                line = await stdout.readline()
                if not line:
                    logger.info(f"Plugin process exited: {self.name}")
                    break
                self._dispatch(line)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error reading from plugin {self.name} stdout: {e}")
        finally:
            self._close_pending(
                PluginTransportError(
                    f"Plugin {self.name} exited before responding"
                )
            )

    def _dispatch(self, line: bytes) -> None:
        message = decode_message(line)
        if message is None:
            return

        if isinstance(message, Response):
            if message.id is None:
                return
            future = self._pending.pop(message.id, None)
            if future is not None and not future.done():
                future.set_result(message)
        elif isinstance(message, Notification):
            logger.debug(f"Received notification from plugin {self.name}: {message}")
        else:
            logger.warning(
                f"Received request from plugin {self.name} (not supported): {message}"
            )

    def _close_pending(self, error: Exception) -> None:
        self._closed = True
        pending = self._pending
        self._pending = {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    async def send_request(self, request: Request) -> Response:
        """Send a request and wait for the response with the same id.

        The pending entry is removed however the wait ends, including when
        the caller is cancelled.

        Raises:
            PluginProtocolError: If the request has no id or its id is in flight
            PluginTransportError: If the channel is closed or breaks
            PluginTimeoutError: If the response does not arrive in time
        """
        if request.id is None:
            raise PluginProtocolError("Request must have an ID")
        if self._closed:
            raise PluginTransportError(f"Plugin {self.name} is not running")
        if request.id in self._pending:
            raise PluginProtocolError(
                f"Request id {request.id!r} is already in flight"
            )

        future = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future

        data = encode_message(request)
        try:
            try:
                async with self._write_lock:
                    self.process.stdin.write(data)
                    await self.process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                raise PluginTransportError(
                    f"Failed to write to plugin {self.name}: {e}"
                ) from e

            if self.request_timeout is None:
                return await future

            try:
                return await asyncio.wait_for(future, timeout=self.request_timeout)
            except asyncio.TimeoutError:
                raise PluginTimeoutError(request.method, self.request_timeout)
        finally:
            if self._pending.get(request.id) is future:
                del self._pending[request.id]

    async def kill(self) -> None:
        """Terminate the plugin process and stop the reader"""
        if self.process.returncode is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass
            await self.process.wait()

        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass

        self._close_pending(PluginTransportError(f"Plugin {self.name} was killed"))
        logger.debug(f"Killed plugin process {self.path}")
