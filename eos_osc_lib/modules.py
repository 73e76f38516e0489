"""
Console Modules

Thin helpers on top of the request and send functions of a console session.
Every module receives a SessionHandle when it is created and keeps no other
state.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from .errors import RequestError
from .record_targets import RecordTarget, get_layout
from .requests import RecordTargetCountRequest, RecordTargetRequest, Request
from .target_number import TargetNumber

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
RequestFunction = Callable[[Request], Awaitable[Any]]
SendFunction = Callable[..., Awaitable[None]]


@dataclass(frozen=True)
class SessionHandle:
    """
    What a module may do with the console.

    Attributes:
        request: Issue a request descriptor and await its result
        send_message: Send an /eos/ message, `send_message(address, args=())`
    """
    request: RequestFunction
    send_message: SendFunction


# =============================================================================
# RECORD TARGETS
# =============================================================================

class RecordTargetModule:
    """
    Fetches record targets of one type.

    Scope values (cue_list for cues, part for patch) are passed as keyword
    arguments.

    Example:
        groups = RecordTargetModule(session, "group")
        group = await groups.get(12)
        everything = await groups.get_all(progress=lambda done, total: ...)
    """

    def __init__(self, session: SessionHandle, target_type: str):
        self.session = session
        self.target_type = target_type
        self.layout = get_layout(target_type)

    async def get(self, number: TargetNumber, **scope: Any) -> Optional[RecordTarget]:
        """Fetch one target by number; None if it does not exist."""
        return await self.session.request(
            RecordTargetRequest.get(self.target_type, number, **scope)
        )

    async def count(self, **scope: Any) -> int:
        return await self.session.request(
            RecordTargetCountRequest(self.target_type, **scope)
        )

    async def get_all(
        self,
        progress: Optional[ProgressCallback] = None,
        **scope: Any,
    ) -> List[RecordTarget]:
        """
        Fetch every target of this type, in console list order.

        All index requests are sent at once; progress is called with
        (completed, total) as responses arrive.

        Raises:
            RequestError: if the console reports a target as missing while
                the list is being read (the list changed underneath us)
        """
        total = await self.count(**scope)
        if total == 0:
            return []

        completed = 0

        async def fetch(index: int) -> Optional[RecordTarget]:
            nonlocal completed
            target = await self.session.request(
                RecordTargetRequest.index(self.target_type, index, **scope)
            )
            completed += 1
            if progress is not None:
                try:
                    progress(completed, total)
                except Exception as e:
                    logger.error(f"Error in progress callback: {e}")
            return target

        targets = await asyncio.gather(*(fetch(index) for index in range(total)))

        if any(target is None for target in targets):
            raise RequestError(
                f'missing record target found when requesting record target list "{self.target_type}"'
            )
        return list(targets)


class CuesModule(RecordTargetModule):
    """Cues are scoped by cue list: `await cues.get(5, cue_list=1)`."""

    def __init__(self, session: SessionHandle):
        super().__init__(session, "cue")

    async def fire(self, cue_list: TargetNumber, cue_number: TargetNumber):
        await self.session.send_message(f"/eos/cue/{cue_list}/{cue_number}/fire")


# =============================================================================
# CHANNELS
# =============================================================================

# Patch fields copied into each channel part
CHANNEL_PART_FIELDS = (
    "address",
    "current_level",
    "fixture_manufacturer",
    "fixture_model",
    "gel",
    "intensity_parameter_address",
    "notes",
    "text1", "text2", "text3", "text4", "text5",
    "text6", "text7", "text8", "text9", "text10",
)


@dataclass(frozen=True)
class ChannelPart:
    part_number: int
    uid: str
    label: str
    fields: Dict[str, Any]


@dataclass(frozen=True)
class Channel:
    target_number: TargetNumber
    parts: List[ChannelPart]


def patch_to_channel(patch_parts: Sequence[RecordTarget]) -> Channel:
    """
    Combine the patch entries of one channel.

    Raises:
        RequestError: if the entries belong to different channels
    """
    target_number = patch_parts[0].target_number
    parts = []
    for entry in patch_parts:
        if entry.target_number != target_number:
            raise RequestError("unexpected target number when combining patch entries")
        parts.append(ChannelPart(
            part_number=entry.get("part_number"),
            uid=entry.uid,
            label=entry.label,
            fields={name: entry[name] for name in CHANNEL_PART_FIELDS if name in entry.fields},
        ))
    return Channel(target_number=target_number, parts=parts)


class ChannelsModule:
    """Channels, built from the patch (one patch entry per channel part)."""

    def __init__(self, session: SessionHandle):
        self.session = session
        self.patch = RecordTargetModule(session, "patch")

    async def get(self, number: TargetNumber) -> Optional[Channel]:
        # The first part tells us how many parts there are
        first = await self.patch.get(number, part=1)
        if first is None:
            return None

        remaining = await asyncio.gather(*(
            self.patch.get(number, part=part)
            for part in range(2, first["part_count"] + 1)
        ))
        if any(part is None for part in remaining):
            raise RequestError(f"missing part found when requesting channel {number}")

        return patch_to_channel([first] + list(remaining))

    async def get_all(self, progress: Optional[ProgressCallback] = None) -> List[Channel]:
        patch = await self.patch.get_all(progress=progress)

        by_channel: Dict[TargetNumber, List[RecordTarget]] = {}
        for entry in patch:
            by_channel.setdefault(entry.target_number, []).append(entry)

        return [patch_to_channel(entries) for entries in by_channel.values()]


# =============================================================================
# BANKS
# =============================================================================

class PagedBanksModule:
    """Banks of controls that can be paged (faders, cue lists, direct selects)."""

    bank_type = ""

    def __init__(self, session: SessionHandle):
        self.session = session

    async def page_down(self, bank: int, page_delta: int = 1):
        await self.session.send_message(f"/eos/{self.bank_type}/{bank}/page/{page_delta}")

    async def page_up(self, bank: int, page_delta: int = 1):
        await self.page_down(bank, -page_delta)


class FaderBanksModule(PagedBanksModule):
    bank_type = "fader"

    async def create(self, bank: int, fader_count: int, page: Optional[int] = None):
        """
        Args:
            bank: 1-based fader bank index, or 0 for the master fader
            fader_count: Number of faders per page
            page: Optional starting page
        """
        address = f"/eos/fader/{bank}/config"
        if page is not None and page >= 1:
            address += f"/{page}"
        address += f"/{fader_count}"
        await self.session.send_message(address)

    async def reset(self, bank: int):
        await self.session.send_message(f"/eos/fader/{bank}/reset")


class CueListBanksModule(PagedBanksModule):
    bank_type = "cuelist"

    async def create(
        self,
        bank: int,
        cue_list: TargetNumber,
        prev_cue_count: int,
        pending_cue_count: int,
        offset: Optional[int] = None,
    ):
        """cue_list 0 follows the current cue list."""
        address = f"/eos/cuelist/{bank}/config/{cue_list}/{prev_cue_count}/{pending_cue_count}"
        if offset is not None and offset >= 0:
            address += f"/{offset}"
        await self.session.send_message(address)

    async def page_current(self, bank: int):
        await self.session.send_message(f"/eos/cuelist/{bank}/page/0")

    async def reset(self, bank: int):
        await self.session.send_message(f"/eos/cuelist/{bank}/reset")

    async def select_cue(self, bank: int, cue: TargetNumber):
        await self.session.send_message(f"/eos/cuelist/{bank}/select/{cue}")


DIRECT_SELECT_TARGET_TYPES = (
    "bp", "chan", "cp", "curve", "fp", "fx", "group", "ip",
    "macro", "ms", "pixmap", "preset", "scene", "snap", "sub",
)


class DirectSelectsBanksModule(PagedBanksModule):
    bank_type = "ds"

    async def create(
        self,
        bank: int,
        target_type: str,
        button_count: int,
        flexi: bool = False,
        page: Optional[int] = None,
    ):
        if target_type not in DIRECT_SELECT_TARGET_TYPES:
            raise ValueError(f"unsupported direct select target type: {target_type!r}")

        address = f"/eos/ds/{bank}/{target_type}"
        if flexi:
            address += "/flexi"
        if page is not None and page >= 1:
            address += f"/{page}"
        address += f"/{button_count}"
        await self.session.send_message(address)

    async def press(self, bank: int, button: int):
        await self.session.send_message(f"/eos/ds/{bank}/{button}")
