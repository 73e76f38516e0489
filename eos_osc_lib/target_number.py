"""
Target Numbers

Record targets are identified by target numbers. The console sends them
either as numbers or as strings, and lists of targets may use hyphenated
ranges ("3-5" meaning 3, 4 and 5).
"""

import math
import re
from typing import List, Union

TargetNumber = Union[int, float]

_NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_target_number(text: str) -> TargetNumber:
    """
    Parse a numeric-looking string into a target number.

    Args:
        text: String such as "12" or "1.5"

    Returns:
        int for whole numbers without a decimal point, float otherwise

    Raises:
        ValueError: if the string is not a finite decimal number
    """
    text = text.strip()
    if not _NUMBER_PATTERN.fullmatch(text):
        raise ValueError(f"malformed target number: {text!r}")
    try:
        return int(text)
    except ValueError:
        pass
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"target number out of range: {text!r}")
    return value


def parse_target_number_range(text: str) -> List[TargetNumber]:
    """
    Expand a target number or a "lo-hi" range into individual numbers.

    Examples:
        "1.23" -> [1.23]
        "3-5"  -> [3, 4, 5]
        "5-3"  -> []

    Raises:
        ValueError: if the string has more than one hyphen, a bound is
            not numeric, or a range bound is not a whole number
    """
    parts = text.split("-")

    if len(parts) == 1:
        return [parse_target_number(parts[0])]

    if len(parts) != 2:
        raise ValueError(f"malformed target number range: {text!r}")

    lower = parse_target_number(parts[0])
    upper = parse_target_number(parts[1])
    if not isinstance(lower, int) or not isinstance(upper, int):
        raise ValueError(f"range bounds must be whole numbers: {text!r}")

    return list(range(lower, upper + 1))
