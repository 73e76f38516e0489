"""
Request Manager

Matches `/eos/out/get/...` responses to the requests that caused them.

The console does not echo any correlation id, so matching is purely by
order: responses are attributed to the oldest outstanding request, and a
request is finished once it has collected the number of responses it
expects.

Precondition: the transport must be reliable and ordered (a single TCP
connection). Nothing here detects reordered or lost responses; if that
happens every later request receives the wrong data.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, List

from .errors import UnsolicitedResponseError
from .osc import OscMessage

logger = logging.getLogger(__name__)


def has_unique_id(message: OscMessage) -> bool:
    """
    Whether a record target response carries a unique id.

    The uid is argument 1. It counts as present whenever the argument
    exists and is not nil; an empty string or zero is still present.
    """
    uid = message.arg(1)
    return uid is not None and uid.value is not None


@dataclass
class _PendingRequest:
    request: Any
    future: asyncio.Future
    responses: List[OscMessage] = field(default_factory=list)


class RequestManager:
    """
    FIFO of in-flight requests.

    Requests passed to register() must provide:
        expected_response_count: number of responses to collect
        is_record_target: True for record target lookups
        unpack(messages): turn the collected responses into the result
    """

    def __init__(self):
        self._pending: Deque[_PendingRequest] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def register(self, request) -> asyncio.Future:
        """
        Queue a request and return the future its result will be set on.

        Must be called with the event loop running.
        """
        future = asyncio.get_running_loop().create_future()
        self._pending.append(_PendingRequest(request=request, future=future))
        return future

    def handle_response(self, message: OscMessage):
        """
        Attribute a response to the request at the head of the queue.

        Raises:
            UnsolicitedResponseError: if no request is pending
        """
        if not self._pending:
            raise UnsolicitedResponseError(f"unsolicited response: {message.address}")

        head = self._pending[0]
        head.responses.append(message)

        # Record target does not exist on the console
        if head.request.is_record_target and not has_unique_id(message):
            self._pending.popleft()
            self._resolve(head, None)
            return

        if len(head.responses) < head.request.expected_response_count:
            return

        self._pending.popleft()
        try:
            result = head.request.unpack(head.responses)
        except Exception as e:
            logger.debug(f"Failed to unpack response to {type(head.request).__name__}: {e}")
            if not head.future.done():
                head.future.set_exception(e)
            return

        self._resolve(head, result)

    def cancel_all(self, reason: Exception):
        """Fail every pending request with reason and empty the queue."""
        while self._pending:
            pending = self._pending.popleft()
            if not pending.future.done():
                pending.future.set_exception(reason)

    @staticmethod
    def _resolve(pending: _PendingRequest, result: Any):
        # A caller may have stopped waiting (e.g. timed out); the response
        # is still consumed so later requests stay aligned.
        if not pending.future.done():
            pending.future.set_result(result)
