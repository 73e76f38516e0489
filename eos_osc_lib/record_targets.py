"""
Record Target Layouts

Record targets (cues, groups, palettes, ...) are returned by the console as
one or more `/eos/out/get/...` messages whose arguments are positional. Each
target type is described here by a RecordTargetLayout: the request
addresses, how many responses to collect, and a FieldSpec table naming every
argument that is read.

Every response carries the same header:
    arg 0: index of the target in the console's list
    arg 1: unique id
    arg 2: label
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import RequestError
from .osc import OscMessage
from .target_number import TargetNumber, parse_target_number

RESPONSE_PREFIX = "/eos/out/get"


# =============================================================================
# FIELD SPECS
# =============================================================================

class FieldKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    OPTIONAL_INTEGER = "optional_integer"     # negative means "not set"
    BOOLEAN = "boolean"
    FLOAT = "float"
    TARGET_NUMBER = "target_number"
    OPTIONAL_TARGET_NUMBER = "optional_target_number"   # "" means "not set"
    OPTIONAL_STRING = "optional_string"       # missing argument means "not set"
    TARGET_NUMBER_LIST = "target_number_list"  # all args from arg_index on
    JOINED_STRING = "joined_string"           # all args from arg_index on


@dataclass(frozen=True)
class FieldSpec:
    """
    One named field of a record target.

    Attributes:
        name: Field name in the resulting RecordTarget
        message_index: Which response message holds the field
        arg_index: Argument position (first position for list kinds)
        kind: How the argument(s) are read
    """
    name: str
    message_index: int
    arg_index: int
    kind: FieldKind = FieldKind.STRING

    def read(self, messages: Sequence[OscMessage]) -> Any:
        try:
            message = messages[self.message_index]
        except IndexError:
            raise RequestError(
                f"field {self.name!r} expects response #{self.message_index}, "
                f"got {len(messages)} responses"
            ) from None

        kind = self.kind

        if kind == FieldKind.TARGET_NUMBER_LIST:
            numbers: List[TargetNumber] = []
            for arg in message.args[self.arg_index:]:
                numbers.extend(arg.get_target_number_range())
            return numbers

        if kind == FieldKind.JOINED_STRING:
            return "".join(arg.get_string() for arg in message.args[self.arg_index:])

        arg = message.arg(self.arg_index)
        if arg is None:
            if kind == FieldKind.OPTIONAL_STRING:
                return None
            raise RequestError(
                f"{message.address} is missing argument {self.arg_index} ({self.name})"
            )

        if kind == FieldKind.STRING or kind == FieldKind.OPTIONAL_STRING:
            return arg.get_string()
        if kind == FieldKind.INTEGER:
            return arg.get_integer()
        if kind == FieldKind.OPTIONAL_INTEGER:
            return arg.get_optional_integer()
        if kind == FieldKind.BOOLEAN:
            return arg.get_boolean()
        if kind == FieldKind.FLOAT:
            return arg.get_float()
        if kind == FieldKind.TARGET_NUMBER:
            return arg.get_target_number()
        if kind == FieldKind.OPTIONAL_TARGET_NUMBER:
            if arg.value == "":
                return None
            return arg.get_target_number()

        raise ValueError(f"unknown field kind: {kind}")


def _fields(message_index: int, *specs: Tuple[str, int, FieldKind]) -> Tuple[FieldSpec, ...]:
    return tuple(FieldSpec(name, message_index, arg_index, kind) for name, arg_index, kind in specs)


# =============================================================================
# RECORD TARGET
# =============================================================================

@dataclass(frozen=True)
class RecordTarget:
    """
    A record target as returned by the console.

    Attributes:
        target_type: Target type tag ("cue", "group", "ip", ...)
        target_number: Target number
        uid: Console-wide unique id
        label: Label, empty if not set
        fields: Type-specific fields, keyed by FieldSpec name (plus address
            fields such as cue_list or part_number)
    """
    target_type: str
    target_number: TargetNumber
    uid: str
    label: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


# =============================================================================
# LAYOUTS
# =============================================================================

@dataclass(frozen=True)
class RecordTargetLayout:
    """
    Wire layout of one record target type.

    Address templates are filled with `number`, `index` and any scope
    values the type needs (`cue_list` for cues, `part` for patch).

    Attributes:
        target_type: Target type tag
        response_count: Number of /eos/out/get responses per target
        fields: Argument fields beyond the common header
        number_segment: Position of the target number in the response
            address (split on "/")
        address_fields: Extra (name, segment) pairs read from the response
            address
        scope: Names of values that must be supplied to build addresses
    """
    target_type: str
    response_count: int = 1
    fields: Tuple[FieldSpec, ...] = ()
    number_segment: int = 5
    address_fields: Tuple[Tuple[str, int], ...] = ()
    scope: Tuple[str, ...] = ()
    get_template: str = "/eos/get/{target_type}/{number}"
    index_template: str = "/eos/get/{target_type}/index/{index}"
    count_template: str = "/eos/get/{target_type}/count"

    def _format(self, template: str, **values: Any) -> str:
        missing = [
            name for name in self.scope
            if "{" + name + "}" in template and values.get(name) is None
        ]
        if missing:
            raise ValueError(
                f"{self.target_type} requests require: {', '.join(missing)}"
            )
        return template.format(target_type=self.target_type, **values)

    def get_address(self, number: TargetNumber, **scope: Any) -> str:
        return self._format(self.get_template, number=number, **scope)

    def index_address(self, index: int, **scope: Any) -> str:
        return self._format(self.index_template, index=index, **scope)

    def count_address(self, **scope: Any) -> str:
        return self._format(self.count_template, **scope)

    def unpack(self, messages: Sequence[OscMessage]) -> RecordTarget:
        """
        Build a RecordTarget from the collected responses.

        Raises:
            RequestError: if the responses do not match this layout
            ArgumentTypeError: if an argument has the wrong type
        """
        if not messages:
            raise RequestError(f"no responses for {self.target_type}")

        first = messages[0]
        if not first.address.startswith(RESPONSE_PREFIX):
            raise RequestError(f"unexpected response address: {first.address}")

        segments = first.address.split("/")
        try:
            target_number = parse_target_number(segments[self.number_segment])
            address_values = {
                name: parse_target_number(segments[segment])
                for name, segment in self.address_fields
            }
        except (IndexError, ValueError) as e:
            raise RequestError(
                f"unexpected {self.target_type} response address: {first.address}"
            ) from e

        uid = first.arg(1)
        label = first.arg(2)
        if uid is None or label is None:
            raise RequestError(f"{first.address} is missing the uid or label")

        values: Dict[str, Any] = dict(address_values)
        for spec in self.fields:
            values[spec.name] = spec.read(messages)

        return RecordTarget(
            target_type=self.target_type,
            target_number=target_number,
            uid=uid.get_string(),
            label=label.get_string(),
            fields=values,
        )


_S = FieldKind.STRING
_I = FieldKind.INTEGER
_OI = FieldKind.OPTIONAL_INTEGER
_B = FieldKind.BOOLEAN
_TN = FieldKind.TARGET_NUMBER
_OTN = FieldKind.OPTIONAL_TARGET_NUMBER
_LIST = FieldKind.TARGET_NUMBER_LIST


CUE = RecordTargetLayout(
    target_type="cue",
    response_count=4,
    number_segment=6,
    address_fields=(("cue_list", 5), ("part_number", 7)),
    scope=("cue_list",),
    get_template="/eos/get/cue/{cue_list}/{number}/0",
    index_template="/eos/get/cue/{cue_list}/noparts/index/{index}",
    count_template="/eos/get/cue/{cue_list}/noparts/count",
    fields=_fields(
        0,
        ("up_time_duration_ms", 3, _I),
        ("up_time_delay_ms", 4, _I),
        ("down_time_duration_ms", 5, _OI),
        ("down_time_delay_ms", 6, _OI),
        ("focus_time_duration_ms", 7, _OI),
        ("focus_time_delay_ms", 8, _OI),
        ("color_time_duration_ms", 9, _OI),
        ("color_time_delay_ms", 10, _OI),
        ("beam_time_duration_ms", 11, _OI),
        ("beam_time_delay_ms", 12, _OI),
        ("preheat", 13, _B),
        ("curve", 14, _OTN),
        ("rate", 15, _I),
        ("mark", 16, _S),
        ("block", 17, _S),
        ("assert", 18, _S),
        ("link", 19, _OTN),
        ("follow_time_ms", 20, _OI),
        ("hang_time_ms", 21, _OI),
        ("all_fade", 22, _B),
        ("loop", 23, _OI),
        ("solo", 24, _B),
        ("timecode", 25, _S),
        ("part_count", 26, _I),
        ("notes", 27, _S),
        ("scene", 28, _S),
        ("scene_end", 29, _B),
        ("cue_part_index", 30, _OI),
    ) + (
        FieldSpec("effects", 1, 2, _LIST),
        FieldSpec("linked_cue_lists", 2, 2, _LIST),
        FieldSpec("external_link_action", 3, 2, FieldKind.OPTIONAL_STRING),
    ),
)

CUE_LIST = RecordTargetLayout(
    target_type="cuelist",
    response_count=2,
    fields=_fields(
        0,
        ("playback_mode", 3, _S),
        ("fader_mode", 4, _S),
        ("independent", 5, _B),
        ("htp", 6, _B),
        ("assert", 7, _B),
        ("block", 8, _B),
        ("background", 9, _B),
        ("solo", 10, _B),
        ("timecode_list", 11, _OI),
        ("oos_sync", 12, _B),
    ) + (FieldSpec("linked_cue_lists", 1, 2, _LIST),),
)

GROUP = RecordTargetLayout(
    target_type="group",
    response_count=2,
    fields=(FieldSpec("channels", 1, 2, _LIST),),
)

MACRO = RecordTargetLayout(
    target_type="macro",
    response_count=2,
    fields=(
        FieldSpec("mode", 0, 3, _S),
        FieldSpec("command", 1, 2, FieldKind.JOINED_STRING),
    ),
)


def _palette(target_type: str) -> RecordTargetLayout:
    return RecordTargetLayout(
        target_type=target_type,
        response_count=3,
        fields=(
            FieldSpec("absolute", 0, 3, _B),
            FieldSpec("locked", 0, 4, _B),
            FieldSpec("channels", 1, 2, _LIST),
            FieldSpec("by_type_channels", 2, 2, _LIST),
        ),
    )


INTENSITY_PALETTE = _palette("ip")
FOCUS_PALETTE = _palette("fp")
COLOR_PALETTE = _palette("cp")
BEAM_PALETTE = _palette("bp")

PRESET = RecordTargetLayout(
    target_type="preset",
    response_count=4,
    fields=(
        FieldSpec("absolute", 0, 3, _B),
        FieldSpec("locked", 0, 4, _B),
        FieldSpec("channels", 1, 2, _LIST),
        FieldSpec("by_type_channels", 2, 2, _LIST),
        FieldSpec("effects", 3, 2, _LIST),
    ),
)

SUB = RecordTargetLayout(
    target_type="sub",
    response_count=2,
    fields=_fields(
        0,
        ("mode", 3, _S),
        ("fader_mode", 4, _S),
        ("htp", 5, _B),
        ("exclusive", 6, _B),
        ("background", 7, _B),
        ("restore", 8, _B),
        ("priority", 9, _S),
        ("up_time", 10, _S),
        ("dwell_time", 11, _S),
        ("down_time", 12, _S),
    ) + (FieldSpec("effects", 1, 2, _LIST),),
)

CURVE = RecordTargetLayout(target_type="curve")

EFFECT = RecordTargetLayout(
    target_type="fx",
    fields=_fields(
        0,
        ("effect_type", 3, _S),
        ("entry", 4, _S),
        ("exit", 5, _S),
        ("duration", 6, _S),
        ("scale", 7, _I),
    ),
)

SNAPSHOT = RecordTargetLayout(target_type="snap")

MAGIC_SHEET = RecordTargetLayout(target_type="ms")

PIXEL_MAP = RecordTargetLayout(
    target_type="pixmap",
    response_count=2,
    fields=_fields(
        0,
        ("server_channel", 3, _I),
        ("interface", 4, _S),
        ("width", 5, _I),
        ("height", 6, _I),
        ("pixel_count", 7, _I),
        ("fixture_count", 8, _I),
    ) + (FieldSpec("layer_channels", 1, 2, _LIST),),
)

PATCH = RecordTargetLayout(
    target_type="patch",
    response_count=4,
    address_fields=(("part_number", 6),),
    scope=("part",),
    get_template="/eos/get/patch/{number}/{part}",
    fields=_fields(
        0,
        ("fixture_manufacturer", 3, _S),
        ("fixture_model", 4, _S),
        ("address", 5, _I),
        ("intensity_parameter_address", 6, _I),
        ("current_level", 7, _I),
        ("gel", 8, _S),
        ("text1", 9, _S),
        ("text2", 10, _S),
        ("text3", 11, _S),
        ("text4", 12, _S),
        ("text5", 13, _S),
        ("text6", 14, _S),
        ("text7", 15, _S),
        ("text8", 16, _S),
        ("text9", 17, _S),
        ("text10", 18, _S),
        ("part_count", 19, _I),
    ) + (FieldSpec("notes", 1, 2, FieldKind.OPTIONAL_STRING),),
)

LAYOUTS: Dict[str, RecordTargetLayout] = {
    layout.target_type: layout
    for layout in (
        CUE, CUE_LIST, GROUP, MACRO,
        INTENSITY_PALETTE, FOCUS_PALETTE, COLOR_PALETTE, BEAM_PALETTE,
        PRESET, SUB, CURVE, EFFECT, SNAPSHOT, MAGIC_SHEET, PIXEL_MAP, PATCH,
    )
}

PALETTE_TYPES = ("ip", "fp", "cp", "bp")


def get_layout(target_type: str) -> RecordTargetLayout:
    """
    Look up the layout for a target type.

    Raises:
        ValueError: for unknown target types
    """
    layout: Optional[RecordTargetLayout] = LAYOUTS.get(target_type)
    if layout is None:
        raise ValueError(
            f"unknown record target type {target_type!r}; "
            f"expected one of: {', '.join(sorted(LAYOUTS))}"
        )
    return layout
