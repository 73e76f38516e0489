"""
Tests for the OSC address router.
"""

import pytest

from eos_osc_lib.errors import RouteError
from eos_osc_lib.osc import OscMessage
from eos_osc_lib.router import OscRouter


class Recorder:
    """Handler factory that records which route handled a message."""

    def __init__(self):
        self.calls = []

    def __call__(self, name):
        def handler(message, params):
            self.calls.append((name, message.address, params))
        return handler


@pytest.fixture
def recorder():
    return Recorder()


class TestRouterMatching:
    """Test route precedence."""

    def test_literal_match(self, recorder):
        router = OscRouter().on("/eos/out/cmd", recorder("cmd"))
        assert router.route(OscMessage("/eos/out/cmd")) is True
        assert recorder.calls == [("cmd", "/eos/out/cmd", {})]

    def test_param_captured(self, recorder):
        router = OscRouter().on("/eos/out/active/cue/{cueList}/{cueNumber}", recorder("cue"))
        router.route(OscMessage("/eos/out/active/cue/1/2.5"))
        assert recorder.calls[0][2] == {"cueList": "1", "cueNumber": "2.5"}

    def test_literal_beats_param(self, recorder):
        router = (
            OscRouter()
            .on("/eos/out/active/cue/{cueList}", recorder("param"))
            .on("/eos/out/active/cue/text", recorder("literal"))
        )
        router.route(OscMessage("/eos/out/active/cue/text"))
        router.route(OscMessage("/eos/out/active/cue/3"))
        assert [call[0] for call in recorder.calls] == ["literal", "param"]

    def test_exact_match_beats_wildcard(self, recorder):
        router = (
            OscRouter()
            .on("/eos/*", recorder("wildcard"))
            .on("/eos/out/cmd", recorder("exact"))
        )
        router.route(OscMessage("/eos/out/cmd"))
        assert recorder.calls[0][0] == "exact"

    def test_deepest_wildcard_wins(self, recorder):
        router = (
            OscRouter()
            .on("/*", recorder("root"))
            .on("/eos/*", recorder("eos"))
            .on("/eos/out/get/*", recorder("get"))
        )
        router.route(OscMessage("/eos/out/get/cue/1/2/0"))
        router.route(OscMessage("/eos/out/notify/cue"))
        router.route(OscMessage("/other/thing"))
        assert [call[0] for call in recorder.calls] == ["get", "eos", "root"]

    def test_wildcard_after_dead_end(self, recorder):
        """A partial literal path falls back to the wildcard above it."""
        router = (
            OscRouter()
            .on("/eos/*", recorder("wildcard"))
            .on("/eos/out/cmd", recorder("cmd"))
        )
        router.route(OscMessage("/eos/out/cmd/extra"))
        router.route(OscMessage("/eos/out"))
        assert [call[0] for call in recorder.calls] == ["wildcard", "wildcard"]

    def test_wildcard_params_from_before_wildcard(self, recorder):
        router = OscRouter().on("/fader/{bank}/*", recorder("fader"))
        router.route(OscMessage("/fader/2/anything/else"))
        assert recorder.calls[0][2] == {"bank": "2"}

    def test_wildcard_requires_a_segment(self, recorder):
        router = OscRouter().on("/eos/*", recorder("wildcard"))
        assert router.route(OscMessage("/eos")) is False

    def test_no_match(self, recorder):
        router = OscRouter().on("/eos/out/cmd", recorder("cmd"))
        assert router.route(OscMessage("/eos/out/other")) is False
        assert recorder.calls == []

    def test_exactly_one_handler(self, recorder):
        router = (
            OscRouter()
            .on("/*", recorder("root"))
            .on("/a/{x}", recorder("param"))
            .on("/a/b", recorder("literal"))
        )
        router.route(OscMessage("/a/b"))
        assert len(recorder.calls) == 1


class TestRouterRegistration:
    """Test pattern validation."""

    def test_on_returns_router(self, recorder):
        router = OscRouter()
        assert router.on("/a", recorder("a")) is router

    def test_must_start_with_slash(self, recorder):
        with pytest.raises(RouteError):
            OscRouter().on("eos/out", recorder("x"))

    def test_wildcard_not_last(self, recorder):
        with pytest.raises(RouteError):
            OscRouter().on("/eos/*/cmd", recorder("x"))

    def test_duplicate_route(self, recorder):
        router = OscRouter().on("/a/b", recorder("x"))
        with pytest.raises(RouteError):
            router.on("/a/b", recorder("y"))

    def test_duplicate_wildcard(self, recorder):
        router = OscRouter().on("/a/*", recorder("x"))
        with pytest.raises(RouteError):
            router.on("/a/*", recorder("y"))

    def test_inconsistent_param_names(self, recorder):
        router = OscRouter().on("/cue/{cueList}/fire", recorder("x"))
        with pytest.raises(RouteError):
            router.on("/cue/{list}/stop", recorder("y"))

    def test_consistent_param_names_share_node(self, recorder):
        router = (
            OscRouter()
            .on("/cue/{cueList}/fire", recorder("fire"))
            .on("/cue/{cueList}/stop", recorder("stop"))
        )
        router.route(OscMessage("/cue/1/stop"))
        assert recorder.calls == [("stop", "/cue/1/stop", {"cueList": "1"})]

    def test_empty_param_name(self, recorder):
        with pytest.raises(RouteError):
            OscRouter().on("/a/{}", recorder("x"))

    def test_route_error_is_value_error(self, recorder):
        with pytest.raises(ValueError):
            OscRouter().on("no-slash", recorder("x"))
