"""
Pytest configuration and fixtures for eos_osc_lib tests.
"""

import asyncio
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from eos_osc_lib.connection import ConnectionState
from eos_osc_lib.errors import EosConnectionError
from eos_osc_lib.osc import OscMessage


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


# =============================================================================
# FAKE CONNECTION
# =============================================================================

Responder = Callable[[OscMessage], Sequence[OscMessage]]


class FakeConnection:
    """
    In-memory stand-in for EosConnection.

    Messages sent to it are recorded; replies registered for an address are
    queued for the reader as if the console had answered.
    """

    def __init__(self, host: str = "localhost", port: int = 3037):
        self.host = host
        self.port = port
        self.on_disconnect = None
        self.state = ConnectionState.DISCONNECTED
        self.sent: List[OscMessage] = []
        self.frames: List[Optional[bytes]] = []
        self.replies: Dict[str, Responder] = {
            "/eos/get/version": lambda m: [OscMessage("/eos/out/get/version", ("3.2.5.13",))],
        }
        self.fail_connect = False
        self._queue: asyncio.Queue = asyncio.Queue()

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    async def connect(self, timeout: float = 5.0):
        if self.fail_connect:
            raise EosConnectionError("connection refused")
        self.state = ConnectionState.CONNECTED

    async def send(self, message: OscMessage, frame: Optional[bytes] = None):
        if not self.is_connected:
            raise EosConnectionError("transport is not connected")
        self.sent.append(message)
        self.frames.append(frame)
        responder = self.replies.get(message.address)
        if responder is not None:
            for reply in responder(message):
                self.push(reply)

    def push(self, message: OscMessage):
        """Deliver a message as if it had been read from the socket."""
        self._queue.put_nowait(message)

    async def messages(self):
        while True:
            message = await self._queue.get()
            if message is None:
                return
            yield message

    async def disconnect(self):
        self._close(None)

    def destroy(self):
        self._close(None)

    def drop(self, error: Optional[Exception] = None):
        """Simulate the console closing the connection."""
        self._close(error)

    def _close(self, error: Optional[Exception]):
        if self.state == ConnectionState.DISCONNECTED:
            return
        self.state = ConnectionState.DISCONNECTED
        self._queue.put_nowait(None)
        if self.on_disconnect is not None:
            self.on_disconnect(error)

    def sent_addresses(self) -> List[str]:
        return [message.address for message in self.sent]


class FakeConnectionFactory:
    """Connection factory that remembers the connections it created."""

    def __init__(self):
        self.created: List[FakeConnection] = []

    def __call__(self, host: str, port: int) -> FakeConnection:
        connection = FakeConnection(host, port)
        self.created.append(connection)
        return connection

    @property
    def last(self) -> FakeConnection:
        return self.created[-1]


@pytest.fixture
def connection_factory():
    """Factory producing FakeConnection instances."""
    return FakeConnectionFactory()
