"""
Tests for the OSC message model and target numbers.
"""

import pytest

from eos_osc_lib.errors import ArgumentTypeError
from eos_osc_lib.osc import (
    BANG,
    OscArgument,
    OscMessage,
    TimeTag,
    expand_target_number_arguments,
)
from eos_osc_lib.target_number import parse_target_number, parse_target_number_range


class TestTargetNumbers:
    """Test target number parsing."""

    def test_integer(self):
        assert parse_target_number("12") == 12
        assert isinstance(parse_target_number("12"), int)

    def test_fractional(self):
        assert parse_target_number("1.5") == 1.5

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_target_number("abc")

    def test_range(self):
        """Hyphenated ranges expand inclusively."""
        assert parse_target_number_range("3-5") == [3, 4, 5]

    def test_single_number_range(self):
        assert parse_target_number_range("1.23") == [1.23]

    def test_reversed_range_is_empty(self):
        assert parse_target_number_range("5-3") == []

    def test_too_many_hyphens(self):
        with pytest.raises(ValueError):
            parse_target_number_range("1-2-3")

    @pytest.mark.parametrize("text", ["inf", "nan", "-inf", "1_0", "0x10", "1e999"])
    def test_non_decimal_rejected(self, text):
        with pytest.raises(ValueError):
            parse_target_number(text)

    @pytest.mark.parametrize("text", ["1-inf", "nan-3", "1.5-3", "1-2.5"])
    def test_range_needs_whole_bounds(self, text):
        """A range bound that is not a whole number cannot be expanded."""
        with pytest.raises(ValueError):
            parse_target_number_range(text)


class TestOscArgument:
    """Test typed argument accessors."""

    def test_integer(self):
        assert OscArgument(5, "i").get_integer() == 5

    def test_boolean_is_not_integer(self):
        """bool is an int subclass in Python but not an OSC integer."""
        with pytest.raises(ArgumentTypeError):
            OscArgument(True, "T").get_integer()

    def test_integer_accepts_whole_float(self):
        value = OscArgument(4.0, "f").get_integer()
        assert value == 4
        assert isinstance(value, int)
        assert OscArgument(-1.0, "f").get_optional_integer() is None

    def test_integer_rejects_fractional_float(self):
        with pytest.raises(ArgumentTypeError):
            OscArgument(4.5, "f").get_integer()

    def test_float_accepts_integer(self):
        assert OscArgument(3, "i").get_float() == 3.0

    def test_string_mismatch(self):
        with pytest.raises(ArgumentTypeError):
            OscArgument(1, "i").get_string()

    def test_mismatch_is_type_error(self):
        """Callers can catch accessor failures as TypeError."""
        with pytest.raises(TypeError):
            OscArgument("x", "s").get_blob()

    def test_optional_integer(self):
        """Negative integers mean "not set"."""
        assert OscArgument(-1, "i").get_optional_integer() is None
        assert OscArgument(0, "i").get_optional_integer() == 0

    def test_time_tag(self):
        tag = TimeTag(0, 1)
        assert OscArgument(tag, "t").get_time_tag().is_immediate

    def test_target_number_from_string(self):
        """Numeric-looking strings are accepted as target numbers."""
        assert OscArgument("2.5", "s").get_target_number() == 2.5

    def test_target_number_rejects_text(self):
        with pytest.raises(ArgumentTypeError):
            OscArgument("Cue", "s").get_target_number()

    def test_target_number_range(self):
        assert OscArgument("3-5", "s").get_target_number_range() == [3, 4, 5]
        assert OscArgument(7, "i").get_target_number_range() == [7]

    @pytest.mark.parametrize("text", ["inf", "nan", "1-inf"])
    def test_target_number_range_rejects_infinite(self, text):
        with pytest.raises(ArgumentTypeError):
            OscArgument(text, "s").get_target_number_range()

    def test_type_tag_ignored_for_equality(self):
        assert OscArgument(1, "i") == OscArgument(1)

    def test_str(self):
        assert str(OscArgument(0, "i")) == "0(i)"


class TestExpandTargetNumbers:
    """Test flattening of number and range arguments."""

    def test_expands_in_order(self):
        args = [OscArgument(1), OscArgument("3-4"), OscArgument(2)]
        assert expand_target_number_arguments(args) == [1, 3, 4, 2]

    def test_duplicates_kept_by_default(self):
        args = [OscArgument("1-2"), OscArgument(2)]
        assert expand_target_number_arguments(args) == [1, 2, 2]

    def test_dedupe(self):
        args = [OscArgument("1-2"), OscArgument(2), OscArgument(1)]
        assert expand_target_number_arguments(args, dedupe=True) == [1, 2]


class TestOscMessage:
    """Test the message value type."""

    def test_wraps_plain_values(self):
        message = OscMessage("/eos/cmd", ("Chan 1", 2))
        assert all(isinstance(arg, OscArgument) for arg in message.args)
        assert message.values == ["Chan 1", 2]

    def test_arg_out_of_range(self):
        assert OscMessage("/a").arg(0) is None

    def test_immutable(self):
        message = OscMessage("/a")
        with pytest.raises(AttributeError):
            message.address = "/b"

    def test_with_args_returns_new_message(self):
        message = OscMessage("/a", (1,))
        other = message.with_args([1, 2])
        assert message.values == [1]
        assert other.values == [1, 2]

    def test_str_matches_console_diagnostics(self):
        message = OscMessage(
            "/eos/out/get/version",
            (OscArgument("3.2.5.13", "s"), OscArgument(0, "i")),
        )
        assert str(message) == "/eos/out/get/version, 3.2.5.13(s), 0(i)"

    def test_bang_is_singleton(self):
        assert OscArgument(BANG).value is BANG
