"""
Eos OSC Library

Client library for ETC Eos family lighting consoles over OSC/TCP.

Features:
- SLIP-framed OSC transport with /list/<index>/<count> argument joining
- Address router with literal, {param} and trailing * segments
- FIFO request/response matching for /eos/get requests
- Record target lookups (cues, groups, palettes, patch, ...)
- Implicit output parsed into typed console events

Usage:
    import asyncio
    from eos_osc_lib import EosConsole, ActiveCue

    async def run():
        async with EosConsole("10.101.100.101") as console:
            console.add_listener(print, ActiveCue)
            print(console.version)
            print(await console.groups.get(1))
            await console.execute_command("Chan 1 At Full#")

    asyncio.run(run())
"""

from .errors import (
    EosError,
    EosConnectionError,
    ArgumentTypeError,
    ListJoinError,
    RouteError,
    UnsolicitedResponseError,
    RequestError,
    OscDecodeError,
    OscEncodeError,
)
from .target_number import (
    TargetNumber,
    parse_target_number,
    parse_target_number_range,
)
from .osc import (
    BANG,
    TimeTag,
    OscArgument,
    OscMessage,
    expand_target_number_arguments,
)
from .codec import (
    SlipDecoder,
    encode_message,
    encode_frame,
    decode_message,
)
from .list_joiner import ArgumentListJoiner
from .connection import (
    DEFAULT_PORT,
    ConnectionState,
    EosConnection,
)
from .router import OscRouter, RouteParams
from .request_manager import RequestManager
from .requests import (
    Request,
    VersionRequest,
    RecordTargetCountRequest,
    RecordTargetRequest,
    RawRequest,
)
from .record_targets import (
    FieldKind,
    FieldSpec,
    RecordTarget,
    RecordTargetLayout,
    LAYOUTS,
    get_layout,
)
from .implicit_output import (
    # Value types
    ConsoleState,
    WheelCategory,
    WheelMode,
    CueIdentifier,
    HueSat,
    PanTilt,
    XYZ,
    Wheel,
    CueListBankEntry,
    # Events
    ConsoleEvent,
    ConnectionStateChanged,
    CommandLine,
    UserCommandLine,
    UserChanged,
    ShowName,
    ActiveCue,
    PendingCue,
    PreviousCue,
    ActiveCuePercent,
    CueText,
    SoftKey,
    ConsoleStateChanged,
    LockedChanged,
    ColorChanged,
    FocusPanTiltChanged,
    FocusXYZChanged,
    ActiveWheel,
    ActiveChannels,
    WheelModeChanged,
    SwitchModeChanged,
    ShowCleared,
    ShowLoaded,
    ShowSaved,
    CueFired,
    CueStopped,
    MacroFired,
    SubBumped,
    RelayState,
    FaderBankLabel,
    FaderLabel,
    FaderRange,
    FaderLevel,
    CueListBank,
    CueListBankItem,
    CueListBankReset,
    RecordTargetChanged,
    OscReceived,
)
from .modules import (
    SessionHandle,
    RecordTargetModule,
    CuesModule,
    Channel,
    ChannelPart,
    ChannelsModule,
    FaderBanksModule,
    CueListBanksModule,
    DirectSelectsBanksModule,
)
from .console import EosConsole
from .config import ConsoleConfig, save_config, load_config, DEFAULT_CONFIG_PATH
from .cli import main as cli_main

__all__ = [
    # Errors
    "EosError",
    "EosConnectionError",
    "ArgumentTypeError",
    "ListJoinError",
    "RouteError",
    "UnsolicitedResponseError",
    "RequestError",
    "OscDecodeError",
    "OscEncodeError",
    # Message model
    "TargetNumber",
    "parse_target_number",
    "parse_target_number_range",
    "BANG",
    "TimeTag",
    "OscArgument",
    "OscMessage",
    "expand_target_number_arguments",
    # Wire
    "SlipDecoder",
    "encode_message",
    "encode_frame",
    "decode_message",
    "ArgumentListJoiner",
    "DEFAULT_PORT",
    "ConnectionState",
    "EosConnection",
    # Routing and requests
    "OscRouter",
    "RouteParams",
    "RequestManager",
    "Request",
    "VersionRequest",
    "RecordTargetCountRequest",
    "RecordTargetRequest",
    "RawRequest",
    # Record targets
    "FieldKind",
    "FieldSpec",
    "RecordTarget",
    "RecordTargetLayout",
    "LAYOUTS",
    "get_layout",
    # Events
    "ConsoleState",
    "WheelCategory",
    "WheelMode",
    "CueIdentifier",
    "HueSat",
    "PanTilt",
    "XYZ",
    "Wheel",
    "CueListBankEntry",
    "ConsoleEvent",
    "ConnectionStateChanged",
    "CommandLine",
    "UserCommandLine",
    "UserChanged",
    "ShowName",
    "ActiveCue",
    "PendingCue",
    "PreviousCue",
    "ActiveCuePercent",
    "CueText",
    "SoftKey",
    "ConsoleStateChanged",
    "LockedChanged",
    "ColorChanged",
    "FocusPanTiltChanged",
    "FocusXYZChanged",
    "ActiveWheel",
    "ActiveChannels",
    "WheelModeChanged",
    "SwitchModeChanged",
    "ShowCleared",
    "ShowLoaded",
    "ShowSaved",
    "CueFired",
    "CueStopped",
    "MacroFired",
    "SubBumped",
    "RelayState",
    "FaderBankLabel",
    "FaderLabel",
    "FaderRange",
    "FaderLevel",
    "CueListBank",
    "CueListBankItem",
    "CueListBankReset",
    "RecordTargetChanged",
    "OscReceived",
    # Modules
    "SessionHandle",
    "RecordTargetModule",
    "CuesModule",
    "Channel",
    "ChannelPart",
    "ChannelsModule",
    "FaderBanksModule",
    "CueListBanksModule",
    "DirectSelectsBanksModule",
    # Console
    "EosConsole",
    # Config persistence
    "ConsoleConfig",
    "save_config",
    "load_config",
    "DEFAULT_CONFIG_PATH",
    # CLI
    "cli_main",
]

__version__ = "0.1.0"
