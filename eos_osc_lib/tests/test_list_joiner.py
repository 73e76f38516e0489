"""
Tests for /list/<index>/<count> argument joining.
"""

import pytest

from eos_osc_lib.errors import ListJoinError
from eos_osc_lib.list_joiner import ArgumentListJoiner, split_list_suffix
from eos_osc_lib.osc import OscMessage


def chunk(base, index, count, *args):
    return OscMessage(f"{base}/list/{index}/{count}", args)


def chunked(base, values, sizes):
    """Split values into list convention chunks of the given sizes."""
    messages = []
    index = 0
    for size in sizes:
        messages.append(chunk(base, index, len(values), *values[index:index + size]))
        index += size
    return messages


class TestSplitListSuffix:
    """Test address suffix parsing."""

    def test_with_suffix(self):
        assert split_list_suffix("/eos/out/get/group/1/channels/list/0/12") == (
            "/eos/out/get/group/1/channels", 0, 12
        )

    def test_without_suffix(self):
        assert split_list_suffix("/eos/out/cmd") == ("/eos/out/cmd", None, None)

    def test_suffix_only_at_end(self):
        assert split_list_suffix("/a/list/0/2/b")[1] is None


class TestArgumentListJoiner:
    """Test reassembly of split messages."""

    def test_plain_message_passes_through(self):
        joiner = ArgumentListJoiner()
        message = OscMessage("/eos/out/cmd", ("Chan 1",))
        assert joiner.process(message) is message

    @pytest.mark.parametrize("sizes", [[4], [1, 3], [2, 2], [3, 1], [1, 1, 1, 1]])
    def test_any_chunking_rebuilds_message(self, sizes):
        """Every contiguous chunking yields the unsplit message once."""
        values = [10, 20, 30, 40]
        joiner = ArgumentListJoiner()

        results = [joiner.process(m) for m in chunked("/demo/msg", values, sizes)]

        assert results[:-1] == [None] * (len(sizes) - 1)
        assert results[-1] == OscMessage("/demo/msg", tuple(values))
        assert not joiner.has_partial

    def test_single_chunk_released(self):
        joiner = ArgumentListJoiner()
        assert joiner.process(chunk("/a", 0, 2, "x", "y")) == OscMessage("/a", ("x", "y"))
        assert not joiner.has_partial

    def test_out_of_order(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 6, 1, 2))
        with pytest.raises(ListJoinError):
            joiner.process(chunk("/a", 4, 6, 5, 6))

    def test_duplicate_chunk(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 6, 1, 2))
        joiner.process(chunk("/a", 2, 6, 3, 4))
        with pytest.raises(ListJoinError):
            joiner.process(chunk("/a", 2, 6, 3, 4))

    def test_orphan_continuation(self):
        with pytest.raises(ListJoinError, match="no partial argument list"):
            ArgumentListJoiner().process(chunk("/a", 2, 4, 3, 4))

    def test_interleaved_address(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 4, 1, 2))
        with pytest.raises(ListJoinError):
            joiner.process(chunk("/b", 2, 4, 3, 4))

    def test_new_list_while_partial(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 4, 1, 2))
        with pytest.raises(ListJoinError):
            joiner.process(chunk("/a", 0, 4, 1, 2))

    def test_plain_message_while_partial(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 4, 1, 2))
        with pytest.raises(ListJoinError):
            joiner.process(OscMessage("/eos/out/cmd", ("x",)))

    def test_reset_discards_partial(self):
        joiner = ArgumentListJoiner()
        joiner.process(chunk("/a", 0, 4, 1, 2))
        joiner.reset()
        assert not joiner.has_partial
        assert joiner.process(chunk("/b", 0, 1, "x")) == OscMessage("/b", ("x",))
