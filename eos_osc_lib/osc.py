"""
OSC Message Model

Immutable representation of an OSC message: an address plus a positional,
typed argument list. Values are decoded lazily; type checking happens when
an accessor is called, never when a message is decoded.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import ArgumentTypeError
from .target_number import (
    TargetNumber,
    parse_target_number,
    parse_target_number_range,
)


# =============================================================================
# SPECIAL VALUES
# =============================================================================

class _Bang:
    """OSC impulse ('I'). Carries no data."""

    _instance: Optional["_Bang"] = None

    def __new__(cls) -> "_Bang":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BANG"

    def __reduce__(self):
        return (_Bang, ())


BANG = _Bang()


@dataclass(frozen=True)
class TimeTag:
    """
    OSC time tag (NTP format).

    Attributes:
        seconds: Seconds since 1900-01-01
        fraction: Fractional part in 1/2**32 units
    """
    seconds: int
    fraction: int = 0

    @property
    def is_immediate(self) -> bool:
        return self.seconds == 0 and self.fraction == 1

    def __str__(self) -> str:
        return f"{self.seconds}.{self.fraction}"


# =============================================================================
# OSC ARGUMENT
# =============================================================================

def _describe(value: Any) -> str:
    if isinstance(value, bytes):
        return f"<{len(value)} byte blob>"
    return repr(value)


@dataclass(frozen=True)
class OscArgument:
    """
    A single positional OSC argument.

    Attributes:
        value: Decoded Python value (bool, int, float, str, bytes, TimeTag,
            None for nil, BANG for impulse)
        type_tag: Wire type tag ('i', 'f', 's', ...) when known; only used
            for encoding hints and diagnostics
    """
    value: Any
    type_tag: Optional[str] = field(default=None, compare=False)

    def get_boolean(self) -> bool:
        if not isinstance(self.value, bool):
            raise ArgumentTypeError(f"argument is not a boolean: {_describe(self.value)}")
        return self.value

    def get_integer(self) -> int:
        """Return the integer value; whole floats are accepted as integers."""
        if isinstance(self.value, float) and self.value.is_integer():
            return int(self.value)
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ArgumentTypeError(f"argument is not an integer: {_describe(self.value)}")
        return self.value

    def get_float(self) -> float:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise ArgumentTypeError(f"argument is not a float: {_describe(self.value)}")
        return float(self.value)

    def get_optional_integer(self) -> Optional[int]:
        """Return the integer value, or None if it is negative."""
        value = self.get_integer()
        return value if value >= 0 else None

    def get_string(self) -> str:
        if not isinstance(self.value, str):
            raise ArgumentTypeError(f"argument is not a string: {_describe(self.value)}")
        return self.value

    def get_blob(self) -> bytes:
        if not isinstance(self.value, bytes):
            raise ArgumentTypeError(f"argument is not a blob: {_describe(self.value)}")
        return self.value

    def get_time_tag(self) -> TimeTag:
        if not isinstance(self.value, TimeTag):
            raise ArgumentTypeError(f"argument is not a time tag: {_describe(self.value)}")
        return self.value

    def get_target_number(self) -> TargetNumber:
        """
        Read a target number.

        Some consoles send numeric identifiers as strings, so numeric-looking
        strings are accepted and converted.
        """
        if isinstance(self.value, bool):
            raise ArgumentTypeError(f"argument is not a valid target number: {_describe(self.value)}")
        if isinstance(self.value, (int, float)):
            return self.value
        if isinstance(self.value, str):
            try:
                return parse_target_number(self.value)
            except ValueError as exc:
                raise ArgumentTypeError(str(exc)) from exc
        raise ArgumentTypeError(f"argument is not a valid target number: {_describe(self.value)}")

    def get_target_number_range(self) -> List[TargetNumber]:
        """
        Expand a target number or target number range argument.

        Examples:
            123    -> [123]
            "1.23" -> [1.23]
            "3-5"  -> [3, 4, 5]
        """
        if isinstance(self.value, bool):
            raise ArgumentTypeError(
                f"argument is not a valid target number or range: {_describe(self.value)}"
            )
        if isinstance(self.value, (int, float)):
            return [self.value]
        if isinstance(self.value, str):
            try:
                return parse_target_number_range(self.value)
            except ValueError as exc:
                raise ArgumentTypeError(str(exc)) from exc
        raise ArgumentTypeError(
            f"argument is not a valid target number or range: {_describe(self.value)}"
        )

    def __str__(self) -> str:
        return f"{self.value}({self.type_tag or '?'})"


def expand_target_number_arguments(
    args: Iterable[OscArgument],
    dedupe: bool = False,
) -> List[TargetNumber]:
    """
    Flatten target number and range arguments into a list of numbers.

    Order is preserved. Duplicates are kept unless dedupe is set, in which
    case the first occurrence wins.
    """
    numbers: List[TargetNumber] = []
    for arg in args:
        numbers.extend(arg.get_target_number_range())

    if not dedupe:
        return numbers

    seen = set()
    unique: List[TargetNumber] = []
    for number in numbers:
        if number not in seen:
            seen.add(number)
            unique.append(number)
    return unique


# =============================================================================
# OSC MESSAGE
# =============================================================================

@dataclass(frozen=True)
class OscMessage:
    """
    OSC message with an address and positional arguments.

    Plain values passed in args are wrapped into OscArgument.

    Attributes:
        address: OSC address (e.g., "/eos/out/get/version")
        args: Positional arguments
    """
    address: str
    args: Tuple[OscArgument, ...] = ()

    def __post_init__(self):
        args = tuple(
            arg if isinstance(arg, OscArgument) else OscArgument(arg)
            for arg in self.args
        )
        object.__setattr__(self, "args", args)

    @property
    def values(self) -> List[Any]:
        """Raw argument values without type tags."""
        return [arg.value for arg in self.args]

    def arg(self, index: int) -> Optional[OscArgument]:
        """Argument at index, or None if the message is shorter."""
        if 0 <= index < len(self.args):
            return self.args[index]
        return None

    def with_args(self, args: Sequence[Any]) -> "OscMessage":
        return OscMessage(self.address, tuple(args))

    def __str__(self) -> str:
        """
        Format used by the console's diagnostics output, for example
        `/eos/out/get/version, 3.2.5.13(s), 0(i)`.
        """
        return ", ".join([self.address] + [str(arg) for arg in self.args])
