from app.modules.groups.schemas import MessageListResponse
from app.modules.groups.service import GroupService
from app.modules.realtime.relay import (
    ChangeEvent, GROUP_MESSAGE_INSERTS, RealtimeRelay, TEAM_SLOT_CHANGES
)
from app.modules.teams.schemas import SlotListResponse
from app.modules.teams.service import TeamService
from app.modules.unread.schemas import UnreadCountsResponse
from app.modules.unread.service import UnreadService
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Set
import asyncio
import logging

logger = logging.getLogger(__name__)


class GroupSession:
    """
    One user's cached view of their groups, kept coherent by realtime events.

    Handlers only invalidate and refetch on next read, so duplicate or
    out-of-order events leave the cache correct.
    Read receipts triggered by events are written on a single worker thread
    so the event loop never waits on the sync client.
    """

    def __init__(self, user_id: str, groups: GroupService, unread: UnreadService, teams: TeamService):
        self.user_id = user_id
        self.groups = groups
        self.unread = unread
        self.teams = teams
        self.open_group_id: Optional[str] = None
        self._messages: Dict[str, MessageListResponse] = {}
        self._slots: Dict[str, SlotListResponse] = {}
        self._unread: Optional[UnreadCountsResponse] = None
        self._relay: Optional[RealtimeRelay] = None
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="group-session")
        self._pending: Set[asyncio.Future] = set()

    def open_group(self, group_id: str) -> MessageListResponse:
        self.open_group_id = group_id
        self.unread.mark_read(group_id, self.user_id)
        self._unread = None
        return self.messages(group_id)

    def close_group(self) -> None:
        self.open_group_id = None

    def messages(self, group_id: str) -> MessageListResponse:
        cached = self._messages.get(group_id)
        if cached is None:
            cached = self.groups.list_messages(group_id, self.user_id)
            if cached.error is None:
                self._messages[group_id] = cached
        return cached

    def unread_counts(self) -> UnreadCountsResponse:
        if self._unread is None:
            counts = self.unread.get_unread_counts(self.user_id)
            if counts.error is not None:
                return counts
            self._unread = counts
        return self._unread

    def slots(self, team_id: str) -> SlotListResponse:
        cached = self._slots.get(team_id)
        if cached is None:
            cached = self.teams.list_slots(team_id, self.user_id)
            if cached.error is None:
                self._slots[team_id] = cached
        return cached

    def handle_message_insert(self, event: ChangeEvent) -> None:
        group_id = event.new.get("group_id")
        if not group_id:
            logger.debug("Ignoring message event without group_id")
            return
        self._messages.pop(group_id, None)
        self._unread = None
        if group_id == self.open_group_id:
            self._schedule_mark_read(group_id)

    def _schedule_mark_read(self, group_id: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.unread.mark_read(group_id, self.user_id)
            return
        future = loop.run_in_executor(self._writer, self.unread.mark_read, group_id, self.user_id)
        self._pending.add(future)
        future.add_done_callback(self._read_marked)

    def _read_marked(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        self._unread = None
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Could not mark group read for {self.user_id}: {error}")

    async def drain(self) -> None:
        """Wait for read receipts scheduled by event handlers"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def handle_slot_change(self, event: ChangeEvent) -> None:
        team_id = event.new.get("team_id") or event.old.get("team_id")
        if not team_id:
            logger.debug("Ignoring slot event without team_id")
            return
        self._slots.pop(team_id, None)

    async def start(self, relay: RealtimeRelay) -> None:
        if self._relay is not None:
            await self.stop()
        self._relay = relay
        await relay.subscribe(GROUP_MESSAGE_INSERTS, self.handle_message_insert)
        await relay.subscribe(TEAM_SLOT_CHANGES, self.handle_slot_change)
        logger.info(f"Realtime session started for {self.user_id}")

    async def stop(self) -> None:
        if self._relay is not None:
            await self._relay.unsubscribe(GROUP_MESSAGE_INSERTS)
            await self._relay.unsubscribe(TEAM_SLOT_CHANGES)
            self._relay = None
        await self.drain()
        self.open_group_id = None
        self._messages.clear()
        self._slots.clear()
        self._unread = None
        logger.info(f"Realtime session stopped for {self.user_id}")
