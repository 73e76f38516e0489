"""
Implicit Output Events

The console pushes state changes (command line, active cue, wheels, show
control events, ...) without being asked. Each address shape is parsed into
one of the event dataclasses below; listeners receive the event objects.

IMPLICIT_OUTPUT maps router patterns to their parser.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .connection import ConnectionState
from .osc import OscMessage
from .router import RouteParams
from .target_number import TargetNumber, parse_target_number, parse_target_number_range


# =============================================================================
# VALUE TYPES
# =============================================================================

class ConsoleState(Enum):
    BLIND = 0
    LIVE = 1


class WheelCategory(Enum):
    UNASSIGNED = 0
    INTENSITY = 1
    FOCUS = 2
    COLOR = 3
    IMAGE = 4
    FORM = 5
    SHUTTER = 6


class WheelMode(Enum):
    COARSE = 0
    FINE = 1


@dataclass(frozen=True)
class CueIdentifier:
    cue_list: TargetNumber
    cue_number: TargetNumber

    def __str__(self) -> str:
        return f"{self.cue_list}/{self.cue_number}"


@dataclass(frozen=True)
class HueSat:
    hue: float
    saturation: float


@dataclass(frozen=True)
class PanTilt:
    pan: float
    tilt: float
    pan_range: Tuple[float, float]
    tilt_range: Tuple[float, float]


@dataclass(frozen=True)
class XYZ:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Wheel:
    category: WheelCategory
    parameter: str
    value: float


@dataclass(frozen=True)
class CueListBankEntry:
    cue_identifier: str
    label: str
    scene: str
    scene_end: bool
    duration_ms: int
    time_remaining_ms: Optional[int]


# =============================================================================
# EVENTS
# =============================================================================

class ConsoleEvent:
    """Base class of every event delivered to console listeners."""
    pass


@dataclass(frozen=True)
class ConnectionStateChanged(ConsoleEvent):
    state: ConnectionState
    error: Optional[Exception] = None


@dataclass(frozen=True)
class CommandLine(ConsoleEvent):
    command_line: str


@dataclass(frozen=True)
class UserCommandLine(ConsoleEvent):
    user_id: int
    command_line: str


@dataclass(frozen=True)
class UserChanged(ConsoleEvent):
    user_id: int


@dataclass(frozen=True)
class ShowName(ConsoleEvent):
    show_name: str


@dataclass(frozen=True)
class ActiveCue(ConsoleEvent):
    cue: CueIdentifier


@dataclass(frozen=True)
class PendingCue(ConsoleEvent):
    cue: Optional[CueIdentifier]


@dataclass(frozen=True)
class PreviousCue(ConsoleEvent):
    cue: Optional[CueIdentifier]


@dataclass(frozen=True)
class ActiveCuePercent(ConsoleEvent):
    percent_complete: int


@dataclass(frozen=True)
class CueText(ConsoleEvent):
    """Text of the active, pending or previous cue (`which`)."""
    which: str
    text: str


@dataclass(frozen=True)
class SoftKey(ConsoleEvent):
    index: int
    label: str


@dataclass(frozen=True)
class ConsoleStateChanged(ConsoleEvent):
    state: ConsoleState


@dataclass(frozen=True)
class LockedChanged(ConsoleEvent):
    locked: bool


@dataclass(frozen=True)
class ColorChanged(ConsoleEvent):
    color: Optional[HueSat]


@dataclass(frozen=True)
class FocusPanTiltChanged(ConsoleEvent):
    focus: Optional[PanTilt]


@dataclass(frozen=True)
class FocusXYZChanged(ConsoleEvent):
    focus: Optional[XYZ]


@dataclass(frozen=True)
class ActiveWheel(ConsoleEvent):
    index: int
    wheel: Optional[Wheel]


@dataclass(frozen=True)
class ActiveChannels(ConsoleEvent):
    channels: Tuple[TargetNumber, ...]


@dataclass(frozen=True)
class WheelModeChanged(ConsoleEvent):
    mode: WheelMode


@dataclass(frozen=True)
class SwitchModeChanged(ConsoleEvent):
    mode: WheelMode


@dataclass(frozen=True)
class ShowCleared(ConsoleEvent):
    pass


@dataclass(frozen=True)
class ShowLoaded(ConsoleEvent):
    file_path: str


@dataclass(frozen=True)
class ShowSaved(ConsoleEvent):
    file_path: str


@dataclass(frozen=True)
class CueFired(ConsoleEvent):
    cue: CueIdentifier
    label: str


@dataclass(frozen=True)
class CueStopped(ConsoleEvent):
    cue: CueIdentifier
    label: str


@dataclass(frozen=True)
class MacroFired(ConsoleEvent):
    macro: TargetNumber


@dataclass(frozen=True)
class SubBumped(ConsoleEvent):
    sub: TargetNumber
    bump: bool


@dataclass(frozen=True)
class RelayState(ConsoleEvent):
    relay: int
    group: int
    active: bool


@dataclass(frozen=True)
class FaderBankLabel(ConsoleEvent):
    fader_bank: int
    label: str


@dataclass(frozen=True)
class FaderLabel(ConsoleEvent):
    fader_bank: int
    fader: int
    label: str


@dataclass(frozen=True)
class FaderRange(ConsoleEvent):
    fader_bank: int
    fader: int
    min: int
    max: int


@dataclass(frozen=True)
class FaderLevel(ConsoleEvent):
    fader_bank: int
    fader: int
    percent: float


@dataclass(frozen=True)
class CueListBank(ConsoleEvent):
    cue_list_bank: int
    label: str
    item_count: int


@dataclass(frozen=True)
class CueListBankItem(ConsoleEvent):
    cue_list_bank: int
    item_index: int
    item: Optional[CueListBankEntry]


@dataclass(frozen=True)
class CueListBankReset(ConsoleEvent):
    cue_list_bank: int


@dataclass(frozen=True)
class RecordTargetChanged(ConsoleEvent):
    """
    Record targets were created, changed or deleted on the console.

    cue_list is set for cue notifications only.
    """
    target_type: str
    target_numbers: Tuple[TargetNumber, ...]
    cue_list: Optional[TargetNumber] = None


@dataclass(frozen=True)
class OscReceived(ConsoleEvent):
    """A message outside the /eos/ namespace."""
    message: OscMessage


# =============================================================================
# PARSERS
# =============================================================================

ImplicitOutputParser = Callable[[OscMessage, RouteParams], ConsoleEvent]


def _first(message: OscMessage):
    arg = message.arg(0)
    if arg is None:
        raise ValueError(f"{message.address} has no arguments")
    return arg


def _cue(params: RouteParams) -> CueIdentifier:
    return CueIdentifier(
        cue_list=parse_target_number(params["cueList"]),
        cue_number=parse_target_number(params["cueNumber"]),
    )


def _color_hs(message: OscMessage, params: RouteParams) -> ColorChanged:
    if len(message.args) != 2:
        return ColorChanged(None)
    return ColorChanged(HueSat(
        hue=message.args[0].get_float(),
        saturation=message.args[1].get_float(),
    ))


def _pan_tilt(message: OscMessage, params: RouteParams) -> FocusPanTiltChanged:
    if len(message.args) != 6:
        return FocusPanTiltChanged(None)
    values = [arg.get_float() for arg in message.args]
    return FocusPanTiltChanged(PanTilt(
        pan_range=(values[0], values[1]),
        tilt_range=(values[2], values[3]),
        pan=values[4],
        tilt=values[5],
    ))


def _xyz(message: OscMessage, params: RouteParams) -> FocusXYZChanged:
    if len(message.args) != 3:
        return FocusXYZChanged(None)
    x, y, z = (arg.get_float() for arg in message.args)
    return FocusXYZChanged(XYZ(x, y, z))


def _active_channels(message: OscMessage, params: RouteParams) -> ActiveChannels:
    # "1-3,5 [50]": channel list, then the current level
    raw = _first(message).get_string().split(" ", 1)[0]
    channels = []
    for part in raw.split(","):
        if part:
            channels.extend(parse_target_number_range(part))
    return ActiveChannels(tuple(channels))


def _active_wheel(message: OscMessage, params: RouteParams) -> ActiveWheel:
    index = int(params["wheelNumber"]) - 1
    category = message.arg(1)
    if category is None or not category.value:
        return ActiveWheel(index, None)

    # Drop the "[current value]" suffix
    parameter = _first(message).get_string()
    bracket = parameter.rfind("[")
    if bracket >= 0:
        parameter = parameter[:bracket]

    return ActiveWheel(index, Wheel(
        category=WheelCategory(category.get_integer()),
        parameter=parameter.rstrip(),
        value=message.args[2].get_float(),
    ))


def _cue_list_bank_item(message: OscMessage, params: RouteParams) -> CueListBankItem:
    bank = int(params["cueListBank"])
    index = int(params["cueIndex"])

    if not _first(message).get_string():
        return CueListBankItem(bank, index, None)

    args = message.args
    return CueListBankItem(bank, index, CueListBankEntry(
        cue_identifier=args[1].get_string(),
        label=args[2].get_string(),
        scene=args[4].get_string(),
        scene_end=args[5].get_boolean(),
        duration_ms=args[6].get_integer(),
        time_remaining_ms=args[7].get_optional_integer(),
    ))


IMPLICIT_OUTPUT: Dict[str, ImplicitOutputParser] = {
    "/eos/out/color/hs": _color_hs,
    "/eos/out/pantilt": _pan_tilt,
    "/eos/out/xyz": _xyz,
    "/eos/out/softkey/{softkey}": lambda m, p: SoftKey(
        index=int(p["softkey"]) - 1,
        label=_first(m).get_string(),
    ),

    # Command lines
    "/eos/out/cmd": lambda m, p: CommandLine(_first(m).get_string()),
    "/eos/out/user/{userId}/cmd": lambda m, p: UserCommandLine(
        user_id=int(p["userId"]),
        command_line=_first(m).get_string(),
    ),

    # Settings
    "/eos/out/switch": lambda m, p: SwitchModeChanged(WheelMode(_first(m).get_integer())),
    "/eos/out/user": lambda m, p: UserChanged(_first(m).get_integer()),
    "/eos/out/wheel": lambda m, p: WheelModeChanged(WheelMode(_first(m).get_integer())),

    # Active channels and parameters
    "/eos/out/active/chan": _active_channels,
    "/eos/out/active/wheel/{wheelNumber}": _active_wheel,

    # Cues
    "/eos/out/active/cue": lambda m, p: ActiveCuePercent(_first(m).get_integer()),
    "/eos/out/active/cue/{cueList}/{cueNumber}": lambda m, p: ActiveCue(_cue(p)),
    "/eos/out/active/cue/text": lambda m, p: CueText("active", _first(m).get_string()),
    "/eos/out/pending/cue": lambda m, p: PendingCue(None),
    "/eos/out/pending/cue/{cueList}/{cueNumber}": lambda m, p: PendingCue(_cue(p)),
    "/eos/out/pending/cue/text": lambda m, p: CueText("pending", _first(m).get_string()),
    "/eos/out/previous/cue": lambda m, p: PreviousCue(None),
    "/eos/out/previous/cue/{cueList}/{cueNumber}": lambda m, p: PreviousCue(_cue(p)),
    "/eos/out/previous/cue/text": lambda m, p: CueText("previous", _first(m).get_string()),

    # Cue list banks
    "/eos/cuelist/{cueListBank}/reset": lambda m, p: CueListBankReset(int(p["cueListBank"])),
    "/eos/out/cuelist/{cueListBank}": lambda m, p: CueListBank(
        cue_list_bank=int(p["cueListBank"]),
        label=_first(m).get_string(),
        item_count=m.args[1].get_integer(),
    ),
    "/eos/out/cuelist/{cueListBank}/{cueIndex}": _cue_list_bank_item,

    # Fader banks
    "/eos/fader/{faderBank}/{fader}": lambda m, p: FaderLevel(
        fader_bank=int(p["faderBank"]),
        fader=int(p["fader"]),
        percent=_first(m).get_float(),
    ),
    "/eos/out/fader/range/{faderBank}/{fader}": lambda m, p: FaderRange(
        fader_bank=int(p["faderBank"]),
        fader=int(p["fader"]),
        min=_first(m).get_integer(),
        max=m.args[1].get_integer(),
    ),
    "/eos/out/fader/{faderBank}": lambda m, p: FaderBankLabel(
        fader_bank=int(p["faderBank"]),
        label=_first(m).get_string(),
    ),
    "/eos/out/fader/{faderBank}/{fader}/name": lambda m, p: FaderLabel(
        fader_bank=int(p["faderBank"]),
        fader=int(p["fader"]),
        label=_first(m).get_string(),
    ),

    # Show control events
    "/eos/out/event/cue/{cueList}/{cueNumber}/fire": lambda m, p: CueFired(
        cue=_cue(p),
        label=_first(m).get_string(),
    ),
    "/eos/out/event/cue/{cueList}/{cueNumber}/stop": lambda m, p: CueStopped(
        cue=_cue(p),
        label=_first(m).get_string(),
    ),
    "/eos/out/event/macro/{macroNumber}": lambda m, p: MacroFired(
        parse_target_number(p["macroNumber"])
    ),
    "/eos/out/event/relay/{relayNumber}/{groupNumber}": lambda m, p: RelayState(
        relay=int(p["relayNumber"]),
        group=int(p["groupNumber"]),
        active=bool(_first(m).value),
    ),
    "/eos/out/event/sub/{subNumber}": lambda m, p: SubBumped(
        sub=parse_target_number(p["subNumber"]),
        bump=bool(_first(m).get_integer()),
    ),

    # Show file information
    "/eos/out/show/name": lambda m, p: ShowName(_first(m).get_string()),
    "/eos/out/event/show/loaded": lambda m, p: ShowLoaded(_first(m).get_string()),
    "/eos/out/event/show/saved": lambda m, p: ShowSaved(_first(m).get_string()),
    "/eos/out/event/show/cleared": lambda m, p: ShowCleared(),

    # Miscellaneous console events
    "/eos/out/event/locked": lambda m, p: LockedChanged(bool(_first(m).get_integer())),
    "/eos/out/event/state": lambda m, p: ConsoleStateChanged(ConsoleState(_first(m).get_integer())),
}
