"""
List Argument Joiner

The console splits messages with many arguments across several wire
messages whose addresses end in `/list/<index>/<count>`, where index is the
position of the chunk's first argument in the full list and count is the
total number of arguments. This module joins those chunks back together.
"""

import re
from typing import List, Optional, Tuple

from .errors import ListJoinError
from .osc import OscArgument, OscMessage

LIST_SUFFIX = re.compile(r"/list/(\d+)/(\d+)$")


def split_list_suffix(address: str) -> Tuple[str, Optional[int], Optional[int]]:
    """
    Split an address into its base address and list convention suffix.

    Returns:
        (base address, index, count); index and count are None if the
        address has no list suffix
    """
    match = LIST_SUFFIX.search(address)
    if not match:
        return address, None, None
    return address[:match.start()], int(match.group(1)), int(match.group(2))


class ArgumentListJoiner:
    """
    Reassembles list convention chunks for a single stream.

    Only one partial message can be in flight at a time. Chunks must arrive
    contiguously and in order, starting at index 0.
    """

    def __init__(self):
        self._address: Optional[str] = None
        self._args: List[OscArgument] = []

    @property
    def has_partial(self) -> bool:
        return self._address is not None

    def reset(self):
        """Discard any partially collected message."""
        self._address = None
        self._args = []

    def process(self, message: OscMessage) -> Optional[OscMessage]:
        """
        Feed one wire message.

        Returns:
            The message unchanged if it does not use the list convention,
            the joined message without the suffix once all arguments have
            been collected, or None while more chunks are expected

        Raises:
            ListJoinError: on orphaned, out-of-sequence or interleaved chunks
        """
        base, index, count = split_list_suffix(message.address)

        if index is None:
            if self.has_partial:
                raise ListJoinError(
                    f"expected continuation of partial argument list for "
                    f"{self._address}, got {message.address}"
                )
            return message

        if self.has_partial and (index == 0 or base != self._address):
            raise ListJoinError(
                f"expected continuation of partial argument list for "
                f"{self._address}, got {message.address}"
            )

        # Everything fits in this one message
        if len(message.args) >= count and not self.has_partial:
            return OscMessage(base, message.args)

        if index == 0:
            self._address = base
            self._args = list(message.args)
            return None

        if not self.has_partial:
            raise ListJoinError(f'no partial argument list found for "{base}"')

        if len(self._args) != index:
            raise ListJoinError(
                f"received out-of-sequence argument list for {base}: "
                f"expected index {len(self._args)}, got {index}"
            )

        self._args.extend(message.args)
        if len(self._args) < count:
            return None

        joined = OscMessage(base, tuple(self._args))
        self.reset()
        return joined
