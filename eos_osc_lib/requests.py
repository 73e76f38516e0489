"""
Request Descriptors

A request knows the `/eos/get/...` message to send, how many
`/eos/out/get/...` responses to collect, and how to turn those responses
into a result. Descriptors are handed to RequestManager.register().
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from .errors import RequestError
from .osc import OscMessage
from .record_targets import RecordTarget, RecordTargetLayout, get_layout
from .target_number import TargetNumber

T = TypeVar("T")

REQUEST_PREFIX = "/eos/get"
RESPONSE_PREFIX = "/eos/out/get"


def response_address(request_address: str) -> str:
    """Map an /eos/get/... address to the /eos/out/get/... address of its reply."""
    if not request_address.startswith(REQUEST_PREFIX + "/"):
        raise ValueError(f"not a request address: {request_address}")
    return RESPONSE_PREFIX + request_address[len(REQUEST_PREFIX):]


class Request(ABC, Generic[T]):
    """
    Base class for request descriptors.

    Attributes:
        expected_response_count: Responses to collect before unpacking
        is_record_target: Whether a response without a uid ends the request
            with a None result
    """

    expected_response_count: int = 1
    is_record_target: bool = False

    @property
    @abstractmethod
    def outbound_message(self) -> OscMessage:
        ...

    @abstractmethod
    def unpack(self, messages: Sequence[OscMessage]) -> T:
        """
        Turn the collected responses into the result.

        Raises:
            RequestError: if the responses do not have the expected shape
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.outbound_message.address})"


class VersionRequest(Request[str]):
    """Console software version, e.g. "3.2.5.13"."""

    ADDRESS = "/eos/get/version"

    @property
    def outbound_message(self) -> OscMessage:
        return OscMessage(self.ADDRESS)

    def unpack(self, messages: Sequence[OscMessage]) -> str:
        message = messages[0]
        if message.address != response_address(self.ADDRESS):
            raise RequestError(f"unexpected response for version request: {message.address}")
        version = message.arg(0)
        if version is None:
            raise RequestError("version response has no arguments")
        return version.get_string()


class RecordTargetCountRequest(Request[int]):
    """
    Number of record targets of one type.

    Cue counts are per cue list, so cue_list is required for "cue".
    """

    def __init__(self, target_type: str, cue_list: Optional[TargetNumber] = None):
        self.target_type = target_type
        self._address = get_layout(target_type).count_address(cue_list=cue_list)

    @property
    def outbound_message(self) -> OscMessage:
        return OscMessage(self._address)

    def unpack(self, messages: Sequence[OscMessage]) -> int:
        message = messages[0]
        expected = response_address(self._address)
        if message.address != expected:
            raise RequestError(
                f"unexpected response for {self.target_type} count request: "
                f"{message.address} (expected {expected})"
            )
        count = message.arg(0)
        if count is None:
            raise RequestError(f"{message.address} has no count argument")
        return count.get_integer()


class RecordTargetRequest(Request[Optional[RecordTarget]]):
    """
    Fetch one record target, by target number or by list index.

    Resolves to None if the target does not exist on the console.

    Example:
        RecordTargetRequest.get("group", 12)
        RecordTargetRequest.index("cue", 0, cue_list=1)
    """

    is_record_target = True

    def __init__(self, layout: RecordTargetLayout, address: str):
        self.layout = layout
        self.expected_response_count = layout.response_count
        self._address = address

    @classmethod
    def get(cls, target_type: str, number: TargetNumber, **scope: Any) -> "RecordTargetRequest":
        layout = get_layout(target_type)
        return cls(layout, layout.get_address(number, **scope))

    @classmethod
    def index(cls, target_type: str, index: int, **scope: Any) -> "RecordTargetRequest":
        layout = get_layout(target_type)
        return cls(layout, layout.index_address(index, **scope))

    @property
    def outbound_message(self) -> OscMessage:
        return OscMessage(self._address)

    def unpack(self, messages: Sequence[OscMessage]) -> Optional[RecordTarget]:
        return self.layout.unpack(messages)


class RawRequest(Request[List[OscMessage]]):
    """
    Arbitrary /eos/get/... request returning the raw responses.

    Useful for queries without a layout in this package.
    """

    def __init__(self, address: str, args: Sequence[Any] = (), expected_response_count: int = 1):
        if not address.startswith(REQUEST_PREFIX + "/"):
            raise ValueError(f'request address must start with "{REQUEST_PREFIX}/"')
        if expected_response_count < 1:
            raise ValueError("expected_response_count must be at least 1")
        self._message = OscMessage(address, tuple(args))
        self.expected_response_count = expected_response_count

    @property
    def outbound_message(self) -> OscMessage:
        return self._message

    def unpack(self, messages: Sequence[OscMessage]) -> List[OscMessage]:
        return list(messages)
