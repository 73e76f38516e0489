"""
Eos Connection

SLIP-framed OSC over a single TCP stream. Incoming bytes are deframed,
decoded and run through the list argument joiner, so consumers only ever
see whole messages without the `/list/<index>/<count>` suffix.

Backpressure: decoded messages go into a bounded queue. When it is full the
read loop waits for space and stops reading from the socket.

Example:
    async with EosConnection("10.101.100.101") as connection:
        await connection.send(OscMessage("/eos/ping"))
        async for message in connection.messages():
            print(message)
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Callable, Optional

from .codec import SlipDecoder, decode_message, encode_frame, is_bundle
from .errors import EosConnectionError, ListJoinError, OscDecodeError
from .list_joiner import ArgumentListJoiner
from .osc import OscMessage

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3037
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_QUEUE_SIZE = 1024
READ_SIZE = 8192

# Wakes a reader blocked on an empty queue when the connection goes away
_CLOSED = object()

DisconnectHandler = Callable[[Optional[Exception]], None]


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class EosConnection:
    """
    One TCP connection to a console.

    Attributes:
        host: Console host name or IP address
        port: Console OSC TCP port
        on_disconnect: Called once when the connection ends, with the
            socket error or None for a clean close
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.host = host
        self.port = port
        self.on_disconnect: Optional[DisconnectHandler] = None

        self._queue_size = queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._read_task: Optional[asyncio.Task] = None
        self._decoder = SlipDecoder()
        self._joiner = ArgumentListJoiner()
        self._state = ConnectionState.DISCONNECTED
        self._closed_locally = False
        self._close_error: Optional[Exception] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._writer is not None

    @property
    def queued(self) -> int:
        """Decoded messages waiting to be received."""
        return self._queue.qsize() if self._queue is not None else 0

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self, timeout: float = DEFAULT_CONNECT_TIMEOUT):
        """
        Open the TCP connection and start reading.

        Raises:
            EosConnectionError: if the connection is already in use, is
                refused, or does not open within timeout seconds
        """
        if self._state != ConnectionState.DISCONNECTED:
            raise EosConnectionError("transport already in use")

        self._state = ConnectionState.CONNECTING
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=timeout,
            )
        except (OSError, asyncio.TimeoutError) as e:
            self._state = ConnectionState.DISCONNECTED
            logger.error(f"Failed to connect to {self.host}:{self.port}: {e!r}")
            raise EosConnectionError(f"failed to connect to {self.host}:{self.port}") from e

        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._decoder.reset()
        self._joiner.reset()
        self._closed_locally = False
        self._close_error = None
        self._state = ConnectionState.CONNECTED
        self._read_task = asyncio.ensure_future(self._read_loop())

        logger.info(f"Connected to {self.host}:{self.port}")

    async def disconnect(self):
        """
        Close the connection and wait for the socket to shut down.

        Raises:
            EosConnectionError: if not connected
        """
        if self._writer is None:
            raise EosConnectionError("not connected")

        self._state = ConnectionState.DISCONNECTING
        self._closed_locally = True
        writer = self._writer

        await self._stop_read_loop()

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing socket: {e!r}")

        self._connection_lost(None)

    def destroy(self):
        """
        Tear the connection down immediately.

        Buffered messages are discarded and any further send or receive
        fails.
        """
        if self._read_task is not None and not self._read_task.done():
            self._read_task.cancel()
        self._read_task = None

        if self._writer is not None:
            self._writer.close()

        if self._queue is not None:
            while not self._queue.empty():
                self._queue.get_nowait()

        self._closed_locally = True
        self._connection_lost(None)

    async def _stop_read_loop(self):
        task = self._read_task
        self._read_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _connection_lost(self, error: Optional[Exception]):
        if self._state == ConnectionState.DISCONNECTED and self._writer is None:
            return

        if self._writer is not None and not self._writer.is_closing():
            self._writer.close()

        self._reader = None
        self._writer = None
        self._state = ConnectionState.DISCONNECTED
        self._close_error = error

        if self._queue is not None and not self._queue.full():
            self._queue.put_nowait(_CLOSED)

        if error is None:
            logger.info(f"Disconnected from {self.host}:{self.port}")
        else:
            logger.warning(f"Connection to {self.host}:{self.port} lost: {error!r}")

        if self.on_disconnect is not None:
            try:
                self.on_disconnect(error)
            except Exception as e:
                logger.error(f"Error in disconnect callback: {e}")

    async def __aenter__(self) -> "EosConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._writer is not None:
            await self.disconnect()

    # =========================================================================
    # WRITE
    # =========================================================================

    async def send(self, message: OscMessage, frame: Optional[bytes] = None):
        """
        Encode, frame and write one message.

        Resolves once the data has been handed to the OS send buffer.

        Args:
            message: Message to send
            frame: SLIP frame already produced by encode_frame(message)

        Raises:
            EosConnectionError: if not connected or the write fails
            OscEncodeError: if the message cannot be encoded
        """
        if not self.is_connected:
            raise EosConnectionError("transport is not connected")

        if frame is None:
            frame = encode_frame(message)
        logger.debug(f"Write: {message}")

        try:
            self._writer.write(frame)
            await self._writer.drain()
        except OSError as e:
            raise EosConnectionError(f"write to {self.host}:{self.port} failed") from e

    # =========================================================================
    # READ
    # =========================================================================

    async def receive(self) -> OscMessage:
        """
        Wait for the next complete message.

        Messages already buffered when the connection ends are still
        delivered.

        Raises:
            EosConnectionError: once the connection has ended and the
                buffer is drained
        """
        queue = self._queue
        if queue is None:
            raise EosConnectionError("transport is not connected")

        if queue.empty() and self._state != ConnectionState.CONNECTED:
            raise self._end_of_stream_error()

        item = await queue.get()
        if item is _CLOSED:
            raise self._end_of_stream_error()
        return item

    async def messages(self) -> AsyncIterator[OscMessage]:
        """
        Iterate over incoming messages.

        Stops when the connection is closed locally; raises
        EosConnectionError when the console or the network ends it.
        """
        while True:
            try:
                message = await self.receive()
            except EosConnectionError:
                if self._closed_locally:
                    return
                raise
            yield message

    def _end_of_stream_error(self) -> EosConnectionError:
        if self._close_error is not None:
            return EosConnectionError(f"connection lost: {self._close_error!r}")
        return EosConnectionError("connection closed")

    async def _read_loop(self):
        """Read from the socket until EOF or error."""
        reader = self._reader
        error: Optional[Exception] = None

        try:
            while True:
                data = await reader.read(READ_SIZE)
                if not data:
                    if not self._closed_locally:
                        logger.warning(f"Connection closed by {self.host}:{self.port}")
                    break

                for frame in self._decoder.feed(data):
                    message = self._process_frame(frame)
                    if message is not None:
                        await self._queue.put(message)

        except asyncio.CancelledError:
            raise
        except OSError as e:
            error = e
        except Exception as e:
            logger.exception(f"Error in read loop: {e}")
            error = e

        self._read_task = None
        self._connection_lost(error)

    def _process_frame(self, frame: bytes) -> Optional[OscMessage]:
        """Decode one SLIP frame and feed it through the list joiner."""
        if is_bundle(frame):
            logger.warning("Ignoring OSC bundle")
            return None

        try:
            message = decode_message(frame)
        except OscDecodeError as e:
            logger.error(f"Malformed OSC packet: {e}")
            return None

        logger.debug(f"Read: {message}")

        try:
            return self._joiner.process(message)
        except ListJoinError as e:
            logger.error(f"Argument list error: {e}")
            self._joiner.reset()
            return None
