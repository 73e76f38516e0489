"""
Tests for parsing implicit output into console events.
"""

import pytest

from eos_osc_lib.implicit_output import (
    IMPLICIT_OUTPUT,
    ActiveChannels,
    ActiveCue,
    ActiveCuePercent,
    ActiveWheel,
    ColorChanged,
    CommandLine,
    ConsoleState,
    ConsoleStateChanged,
    CueFired,
    CueIdentifier,
    CueListBankItem,
    CueText,
    FaderLevel,
    FocusPanTiltChanged,
    FocusXYZChanged,
    HueSat,
    LockedChanged,
    PendingCue,
    RelayState,
    ShowCleared,
    SoftKey,
    SubBumped,
    UserCommandLine,
    Wheel,
    WheelCategory,
    WheelMode,
    WheelModeChanged,
)
from eos_osc_lib.osc import OscMessage
from eos_osc_lib.router import OscRouter


@pytest.fixture
def parse():
    """Route a message through the implicit output table and return its event."""
    events = []
    router = OscRouter()
    for pattern, parser in IMPLICIT_OUTPUT.items():
        router.on(pattern, lambda m, p, parser=parser: events.append(parser(m, p)))

    def _parse(address, *args):
        events.clear()
        assert router.route(OscMessage(address, args)), f"no route for {address}"
        return events[0]

    return _parse


class TestCommandLine:
    """Test command line events."""

    def test_command_line(self, parse):
        assert parse("/eos/out/cmd", "LIVE: Chan 1 #") == CommandLine("LIVE: Chan 1 #")

    def test_user_command_line(self, parse):
        assert parse("/eos/out/user/2/cmd", "BLIND: Cue 1") == UserCommandLine(2, "BLIND: Cue 1")

    def test_softkey_index_is_zero_based(self, parse):
        assert parse("/eos/out/softkey/1", "Record") == SoftKey(0, "Record")


class TestCueEvents:
    """Test cue playback events."""

    def test_active_cue(self, parse):
        assert parse("/eos/out/active/cue/1/2.5") == ActiveCue(CueIdentifier(1, 2.5))

    def test_active_cue_percent(self, parse):
        assert parse("/eos/out/active/cue", 50) == ActiveCuePercent(50)

    def test_active_cue_text(self, parse):
        assert parse("/eos/out/active/cue/text", "1/5 Opening 5") == CueText("active", "1/5 Opening 5")

    def test_no_pending_cue(self, parse):
        assert parse("/eos/out/pending/cue") == PendingCue(None)

    def test_cue_fired(self, parse):
        event = parse("/eos/out/event/cue/1/5/fire", "Opening")
        assert event == CueFired(CueIdentifier(1, 5), "Opening")


class TestConsoleState:
    """Test console state events."""

    def test_active_channels_with_level(self, parse):
        assert parse("/eos/out/active/chan", "1-3,5 [50]") == ActiveChannels((1, 2, 3, 5))

    def test_active_channels_without_level(self, parse):
        assert parse("/eos/out/active/chan", "7") == ActiveChannels((7,))

    def test_no_active_channels(self, parse):
        assert parse("/eos/out/active/chan", "") == ActiveChannels(())

    def test_active_wheel(self, parse):
        event = parse("/eos/out/active/wheel/1", "Intens [100]", 1, 100.0)
        assert event == ActiveWheel(0, Wheel(WheelCategory.INTENSITY, "Intens", 100.0))

    def test_unassigned_wheel(self, parse):
        assert parse("/eos/out/active/wheel/3", "", 0, 0.0) == ActiveWheel(2, None)

    def test_color(self, parse):
        assert parse("/eos/out/color/hs", 120.0, 0.5) == ColorChanged(HueSat(120.0, 0.5))

    def test_no_color(self, parse):
        assert parse("/eos/out/color/hs") == ColorChanged(None)

    def test_pan_tilt(self, parse):
        event = parse("/eos/out/pantilt", -270.0, 270.0, -135.0, 135.0, 10.0, 20.0)
        assert event.focus.pan == 10.0
        assert event.focus.tilt == 20.0
        assert event.focus.pan_range == (-270.0, 270.0)

    def test_no_xyz(self, parse):
        assert parse("/eos/out/xyz") == FocusXYZChanged(None)

    def test_no_pan_tilt(self, parse):
        assert parse("/eos/out/pantilt", 1.0) == FocusPanTiltChanged(None)

    def test_wheel_mode(self, parse):
        assert parse("/eos/out/wheel", 1) == WheelModeChanged(WheelMode.FINE)

    def test_console_state(self, parse):
        assert parse("/eos/out/event/state", 0) == ConsoleStateChanged(ConsoleState.BLIND)

    def test_locked(self, parse):
        assert parse("/eos/out/event/locked", 1) == LockedChanged(True)


class TestShowControl:
    """Test show control and bank events."""

    def test_sub_bump(self, parse):
        assert parse("/eos/out/event/sub/4", 1) == SubBumped(4, True)

    def test_relay(self, parse):
        assert parse("/eos/out/event/relay/2/1", 1) == RelayState(2, 1, True)

    def test_show_cleared(self, parse):
        assert parse("/eos/out/event/show/cleared") == ShowCleared()

    def test_fader_level(self, parse):
        assert parse("/eos/fader/1/2", 0.75) == FaderLevel(1, 2, 0.75)

    def test_empty_cue_list_bank_item(self, parse):
        assert parse("/eos/out/cuelist/1/0", "") == CueListBankItem(1, 0, None)

    def test_cue_list_bank_item(self, parse):
        event = parse("/eos/out/cuelist/1/2", "1/5", "1/5", "Opening", "", "Act 1", False, 5000, -1)
        assert event.item.cue_identifier == "1/5"
        assert event.item.label == "Opening"
        assert event.item.scene == "Act 1"
        assert event.item.duration_ms == 5000
        assert event.item.time_remaining_ms is None
