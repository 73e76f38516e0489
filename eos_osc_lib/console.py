"""
Eos Console

High-level session with an Eos-family console: connects, subscribes to
implicit output, issues requests and delivers console events to listeners.

Example:
    console = EosConsole("10.101.100.101")
    console.add_listener(print)
    await console.connect()
    cues = await console.cues.get_all(cue_list=1)
    await console.execute_command("Chan 1 At Full#")
    await console.disconnect()
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type

from .codec import encode_frame
from .config import ConsoleConfig
from .connection import DEFAULT_CONNECT_TIMEOUT, DEFAULT_PORT, ConnectionState, EosConnection
from .errors import EosConnectionError, EosError, UnsolicitedResponseError
from .implicit_output import (
    IMPLICIT_OUTPUT,
    ConnectionStateChanged,
    ConsoleEvent,
    ImplicitOutputParser,
    OscReceived,
    RecordTargetChanged,
)
from .modules import (
    ChannelsModule,
    CueListBanksModule,
    CuesModule,
    DirectSelectsBanksModule,
    FaderBanksModule,
    RecordTargetModule,
    SessionHandle,
)
from .osc import OscArgument, OscMessage, expand_target_number_arguments
from .record_targets import PALETTE_TYPES
from .request_manager import RequestManager
from .requests import Request, VersionRequest
from .router import OscRouter, RouteParams
from .target_number import parse_target_number

logger = logging.getLogger(__name__)

EventListener = Callable[[ConsoleEvent], None]
ConnectionFactory = Callable[[str, int], EosConnection]


class EosConsole:
    """
    A session with one console.

    Attributes:
        host: Console host name or IP address
        port: Console OSC TCP port
        request_timeout: Default per-request timeout in seconds (None waits
            forever)
        version: Console software version, set once connected
        router: Routes incoming messages
        request_manager: Matches responses to requests
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = DEFAULT_PORT,
        request_timeout: Optional[float] = None,
        connection_factory: ConnectionFactory = EosConnection,
    ):
        self.host = host
        self.port = port
        self.request_timeout = request_timeout
        self.version: Optional[str] = None

        self.router = OscRouter()
        self.request_manager = RequestManager()

        self._connection_factory = connection_factory
        self._connection: Optional[EosConnection] = None
        self._dispatch_task: Optional[asyncio.Task] = None
        self._listeners: List[Tuple[EventListener, Optional[Type[ConsoleEvent]]]] = []

        session = SessionHandle(request=self.request, send_message=self.send_message)
        self.cues = CuesModule(session)
        self.cue_lists = RecordTargetModule(session, "cuelist")
        self.groups = RecordTargetModule(session, "group")
        self.macros = RecordTargetModule(session, "macro")
        self.subs = RecordTargetModule(session, "sub")
        self.presets = RecordTargetModule(session, "preset")
        self.curves = RecordTargetModule(session, "curve")
        self.effects = RecordTargetModule(session, "fx")
        self.snapshots = RecordTargetModule(session, "snap")
        self.magic_sheets = RecordTargetModule(session, "ms")
        self.pixel_maps = RecordTargetModule(session, "pixmap")
        self.palettes = {
            palette_type: RecordTargetModule(session, palette_type)
            for palette_type in PALETTE_TYPES
        }
        self.patch = RecordTargetModule(session, "patch")
        self.channels = ChannelsModule(session)
        self.fader_banks = FaderBanksModule(session)
        self.cue_list_banks = CueListBanksModule(session)
        self.direct_selects_banks = DirectSelectsBanksModule(session)

        self._init_routes()

    @classmethod
    def from_config(cls, config: ConsoleConfig, **kwargs: Any) -> "EosConsole":
        return cls(
            host=config.host,
            port=config.port,
            request_timeout=config.request_timeout,
            **kwargs,
        )

    @property
    def connection_state(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    # =========================================================================
    # CONNECTION
    # =========================================================================

    async def connect(self, timeout: float = DEFAULT_CONNECT_TIMEOUT):
        """
        Connect, read the console version and subscribe to implicit output.

        Raises:
            EosConnectionError: if the connection fails
            asyncio.TimeoutError: if the console does not answer the
                version request within timeout seconds
        """
        if self.connection_state != ConnectionState.DISCONNECTED:
            raise EosError("already connected")

        logger.info(f"Connecting to Eos console at {self.host}:{self.port}")
        self._emit(ConnectionStateChanged(ConnectionState.CONNECTING))

        connection = self._connection_factory(self.host, self.port)
        connection.on_disconnect = self._on_disconnect
        try:
            await connection.connect(timeout=timeout)
        except EosConnectionError as e:
            self._emit(ConnectionStateChanged(ConnectionState.DISCONNECTED, e))
            raise

        self._connection = connection
        self._dispatch_task = asyncio.ensure_future(self._dispatch(connection))
        self._emit(ConnectionStateChanged(ConnectionState.CONNECTED))

        try:
            self.version = await self.request(VersionRequest(), timeout=timeout)
            logger.info(f"Eos version {self.version}")
            await self.subscribe()
        except BaseException:
            connection.destroy()
            raise

    async def disconnect(self):
        """
        Close the connection.

        Pending requests fail with EosConnectionError.
        """
        logger.info("Disconnecting from Eos console")

        connection = self._connection
        if connection is not None and connection.state != ConnectionState.DISCONNECTED:
            await connection.disconnect()

        task = self._dispatch_task
        self._dispatch_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self.request_manager.cancel_all(EosConnectionError("connection closed"))

    async def __aenter__(self) -> "EosConsole":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    def _on_disconnect(self, error: Optional[Exception]):
        self.request_manager.cancel_all(EosConnectionError("connection closed"))
        self.version = None
        self._emit(ConnectionStateChanged(ConnectionState.DISCONNECTED, error))

    async def _dispatch(self, connection: EosConnection):
        try:
            async for message in connection.messages():
                self.handle_message(message)
        except EosConnectionError as e:
            logger.info(f"Eos connection ended: {e}")

    def _require_connection(self) -> EosConnection:
        if self._connection is None or not self._connection.is_connected:
            raise EosConnectionError("not connected to Eos")
        return self._connection

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def send_message(self, address: str, args: Sequence[Any] = ()):
        """
        Send an arbitrary message to the console.

        Raises:
            ValueError: if the address does not start with /eos/, or is an
                /eos/get/ request (use request() for those)
            EosConnectionError: if not connected
        """
        if not address.startswith("/eos/"):
            raise ValueError('message must start with "/eos/"')
        if address.startswith("/eos/get/"):
            raise ValueError('"/eos/get/" messages can only be sent with request()')

        await self._require_connection().send(OscMessage(address, tuple(args)))

    async def change_user(self, user_id: int):
        await self.send_message("/eos/user", [OscArgument(user_id, "i")])

    async def execute_command(
        self,
        command: str,
        substitutions: Sequence[str] = (),
        new_command: bool = True,
    ):
        """
        Run a command line instruction.

        Args:
            command: Command text; %1, %2, ... are replaced by substitutions
            substitutions: Values for the numbered placeholders
            new_command: Clear the command line first
        """
        address = "/eos/newcmd" if new_command else "/eos/cmd"
        await self.send_message(address, [command, *substitutions])

    async def subscribe(self, subscribe: bool = True):
        await self.send_message("/eos/subscribe", [OscArgument(int(subscribe), "i")])

    async def request(self, request: Request, timeout: Optional[float] = None) -> Any:
        """
        Send a request and wait for its result.

        Args:
            request: Request descriptor
            timeout: Seconds to wait; defaults to request_timeout

        Raises:
            EosConnectionError: if not connected, or the connection ends
                before the response arrives
            RequestError: if the responses do not have the expected shape
            asyncio.TimeoutError: if timeout expires
        """
        connection = self._require_connection()
        message = request.outbound_message
        # Encoded before registering so a bad message never takes a queue slot.
        frame = encode_frame(message)

        future = self.request_manager.register(request)
        try:
            await connection.send(message, frame)
        except EosConnectionError as e:
            self.request_manager.cancel_all(e)
            raise

        timeout = self.request_timeout if timeout is None else timeout
        if timeout is None:
            return await future
        return await asyncio.wait_for(future, timeout)

    def record_targets(self, target_type: str) -> RecordTargetModule:
        """Generic module for any supported record target type."""
        return RecordTargetModule(
            SessionHandle(request=self.request, send_message=self.send_message),
            target_type,
        )

    # =========================================================================
    # EVENTS
    # =========================================================================

    def add_listener(
        self,
        listener: EventListener,
        event_type: Optional[Type[ConsoleEvent]] = None,
    ):
        """
        Add a listener for console events.

        Args:
            listener: Called with each ConsoleEvent
            event_type: Only deliver events of this class
        """
        entry = (listener, event_type)
        if entry not in self._listeners:
            self._listeners.append(entry)

    def remove_listener(
        self,
        listener: EventListener,
        event_type: Optional[Type[ConsoleEvent]] = None,
    ):
        entry = (listener, event_type)
        if entry in self._listeners:
            self._listeners.remove(entry)

    def _emit(self, event: ConsoleEvent):
        logger.debug(f"Event: {event}")
        for listener, event_type in list(self._listeners):
            if event_type is not None and not isinstance(event, event_type):
                continue
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error in event listener: {e}")

    # =========================================================================
    # ROUTING
    # =========================================================================

    def handle_message(self, message: OscMessage):
        """Route one incoming message."""
        try:
            handled = self.router.route(message)
        except Exception as e:
            logger.error(f"Failed to handle {message.address}: {e}")
            return

        if not handled:
            logger.debug(f"Unrouted message: {message}")

    def _init_routes(self):
        logger.debug("Initialising OSC routes")

        for pattern, parser in IMPLICIT_OUTPUT.items():
            self.router.on(pattern, self._implicit_output_handler(parser))

        (
            self.router
            .on("/eos/out/get/*", self._on_response)
            .on("/eos/out/notify/cue/{cueList}", self._on_cue_notify)
            .on("/eos/out/notify/{targetType}", self._on_notify)
            .on("/eos/*", self._on_unhandled)
            .on("/*", self._on_osc)
        )

    def _implicit_output_handler(self, parser: ImplicitOutputParser):
        def handler(message: OscMessage, params: RouteParams):
            self._emit(parser(message, params))
        return handler

    def _on_response(self, message: OscMessage, params: RouteParams):
        try:
            self.request_manager.handle_response(message)
        except UnsolicitedResponseError as e:
            logger.error(str(e))

    def _on_cue_notify(self, message: OscMessage, params: RouteParams):
        self._emit(RecordTargetChanged(
            target_type="cue",
            target_numbers=tuple(expand_target_number_arguments(message.args[1:])),
            cue_list=parse_target_number(params["cueList"]),
        ))

    def _on_notify(self, message: OscMessage, params: RouteParams):
        self._emit(RecordTargetChanged(
            target_type=params["targetType"],
            target_numbers=tuple(expand_target_number_arguments(message.args[1:])),
        ))

    def _on_unhandled(self, message: OscMessage, params: RouteParams):
        logger.warning(f"Unhandled OSC message: {message}")

    def _on_osc(self, message: OscMessage, params: RouteParams):
        self._emit(OscReceived(message))
