"""
Wire Codec

OSC 1.0 message encoding/decoding and SLIP framing for the console's TCP
stream. Argument packing is delegated to python-osc; the decoder walks the
type tag string itself so that timetags, impulses and 64-bit values come
back as OscArgument values instead of failing the whole message.
"""

import logging
import struct
from typing import Any, List, Tuple

from pythonosc import slip
from pythonosc.osc_message_builder import BuildError, OscMessageBuilder
from pythonosc.parsing import osc_types

from .errors import OscDecodeError, OscEncodeError
from .osc import BANG, OscArgument, OscMessage, TimeTag, _Bang

logger = logging.getLogger(__name__)

BUNDLE_PREFIX = b"#bundle\x00"

# Frames larger than this without an END byte are discarded
MAX_FRAME_SIZE = 1 << 20

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1


# =============================================================================
# ENCODING
# =============================================================================

def _builder_arg(arg: OscArgument) -> Tuple[Any, str]:
    """Map an argument onto a (value, type tag) pair accepted by OscMessageBuilder."""
    value = arg.value
    tag = arg.type_tag

    if isinstance(value, (_Bang, TimeTag)):
        raise OscEncodeError(f"cannot encode argument {value!r}")
    if value is None:
        return None, "N"
    if isinstance(value, bool):
        return value, "T" if value else "F"
    if isinstance(value, int):
        if tag in ("f", "d"):
            return float(value), tag
        if tag == "h" or not _INT32_MIN <= value <= _INT32_MAX:
            return value, "h"
        return value, "i"
    if isinstance(value, float):
        return value, "d" if tag == "d" else "f"
    if isinstance(value, str):
        return value, "s"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value), "b"

    raise OscEncodeError(f"unsupported argument type: {type(value).__name__}")


def encode_message(message: OscMessage) -> bytes:
    """
    Encode a message as an OSC 1.0 datagram.

    Raises:
        OscEncodeError: if an argument has no wire representation here
            (timetags, impulses, arbitrary objects)
    """
    builder = OscMessageBuilder(address=message.address)
    for arg in message.args:
        value, tag = _builder_arg(arg)
        builder.add_arg(value, tag)

    try:
        return builder.build().dgram
    except BuildError as exc:
        raise OscEncodeError(f"failed to encode {message.address}: {exc}") from exc


def encode_frame(message: OscMessage) -> bytes:
    """Encode a message and wrap it in SLIP END delimiters."""
    return slip.encode(encode_message(message))


# =============================================================================
# DECODING
# =============================================================================

def is_bundle(dgram: bytes) -> bool:
    return dgram.startswith(BUNDLE_PREFIX)


def _get_time_tag(dgram: bytes, index: int) -> Tuple[TimeTag, int]:
    seconds, fraction = struct.unpack_from(">II", dgram, index)
    return TimeTag(seconds, fraction), index + 8


def decode_message(dgram: bytes) -> OscMessage:
    """
    Decode an OSC 1.0 datagram into a message.

    A datagram without a type tag string is treated as a message with no
    arguments.

    Raises:
        OscDecodeError: on truncated data, unknown type tags or bundles
    """
    if is_bundle(dgram):
        raise OscDecodeError("OSC bundles are not supported")

    try:
        address, index = osc_types.get_string(dgram, 0)
        if not address.startswith("/"):
            raise OscDecodeError(f"invalid OSC address: {address!r}")

        if index >= len(dgram):
            return OscMessage(address)

        type_tags, index = osc_types.get_string(dgram, index)
        if not type_tags.startswith(","):
            raise OscDecodeError(f"invalid type tag string: {type_tags!r}")

        args: List[OscArgument] = []
        for tag in type_tags[1:]:
            if tag == "i":
                value, index = osc_types.get_int(dgram, index)
            elif tag == "f":
                value, index = osc_types.get_float(dgram, index)
            elif tag == "s":
                value, index = osc_types.get_string(dgram, index)
            elif tag == "b":
                value, index = osc_types.get_blob(dgram, index)
            elif tag == "h":
                value, index = osc_types.get_int64(dgram, index)
            elif tag == "d":
                value, index = osc_types.get_double(dgram, index)
            elif tag == "t":
                value, index = _get_time_tag(dgram, index)
            elif tag == "T":
                value = True
            elif tag == "F":
                value = False
            elif tag == "N":
                value = None
            elif tag == "I":
                value = BANG
            else:
                raise OscDecodeError(f"unsupported type tag {tag!r} in {address}")
            args.append(OscArgument(value, tag))

    except (osc_types.ParseError, ValueError, IndexError, struct.error) as exc:
        if isinstance(exc, OscDecodeError):
            raise
        raise OscDecodeError(f"malformed OSC message: {exc}") from exc

    return OscMessage(address, tuple(args))


# =============================================================================
# SLIP STREAM DECODER
# =============================================================================

class SlipDecoder:
    """
    Incremental SLIP decoder for a TCP byte stream.

    Bytes are buffered until an END byte arrives; each complete frame is
    unescaped and returned. Empty frames (back-to-back END bytes) are
    skipped, and frames with invalid escape sequences are logged and
    dropped without affecting the frames around them.
    """

    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE):
        self._buffer = bytearray()
        self._max_frame_size = max_frame_size

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by END."""
        return len(self._buffer)

    def reset(self):
        self._buffer.clear()

    def feed(self, data: bytes) -> List[bytes]:
        """
        Add received bytes and return every frame they complete.

        Args:
            data: Raw bytes as read from the socket

        Returns:
            Decoded frame payloads in arrival order
        """
        self._buffer.extend(data)
        frames: List[bytes] = []

        while True:
            end = self._buffer.find(slip.END)
            if end < 0:
                break

            raw = bytes(self._buffer[:end])
            del self._buffer[:end + 1]
            if not raw:
                continue

            try:
                frames.append(slip.decode(raw))
            except slip.ProtocolError as exc:
                logger.error(f"Dropping invalid SLIP frame ({len(raw)} bytes): {exc}")

        if len(self._buffer) > self._max_frame_size:
            logger.error(
                f"Discarding {len(self._buffer)} buffered bytes: no SLIP END within "
                f"{self._max_frame_size} bytes"
            )
            self._buffer.clear()

        return frames
