"""
Realtime change relay.

Wraps Supabase Realtime postgres_changes channels behind a small
subscribe/unsubscribe interface. At most one channel is open per topic;
subscribing again to a topic tears the previous channel down first.
"""
import asyncio
from dataclasses import dataclass, field
from supabase import AsyncClient
from app.config.settings import settings
from app.core.exceptions import BackendError
from app.database.supabase_client import SupabaseClient
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Topic:
    channel: str
    table: str
    event: str  # INSERT | UPDATE | DELETE | *


GROUP_MESSAGE_INSERTS = Topic("group_messages_live", "group_messages", "INSERT")
TEAM_SLOT_CHANGES = Topic("group_team_slots_live", "group_team_slots", "*")


@dataclass
class ChangeEvent:
    table: str
    event: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)


def parse_change(payload: Any) -> ChangeEvent:
    """Normalize a postgres_changes payload ({"data": {"record", "old_record", ...}} or {"new", "old"})."""
    if not isinstance(payload, dict):
        return ChangeEvent(table="", event="")
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    return ChangeEvent(
        table=data.get("table") or "",
        event=(data.get("type") or data.get("eventType") or "").upper(),
        new=data.get("record") or data.get("new") or {},
        old=data.get("old_record") or data.get("old") or {},
    )


class SupabaseChangeFeed:
    """Opens postgres_changes channels on the async Supabase client"""

    def __init__(self, client: AsyncClient, schema: str = "public"):
        self.client = client
        self.schema = schema

    async def listen(self, topic: Topic, callback: Callable[[Any], None]) -> Any:
        channel = self.client.channel(topic.channel)
        channel.on_postgres_changes(topic.event, callback=callback, table=topic.table, schema=self.schema)
        await channel.subscribe()
        return channel

    async def remove(self, channel: Any) -> None:
        await self.client.remove_channel(channel)


@dataclass
class Subscription:
    topic: Topic
    channel: Any
    active: bool = True


class RealtimeRelay:
    def __init__(self, feed):
        self.feed = feed
        self._subscriptions: Dict[str, Subscription] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def active_topics(self) -> List[str]:
        return sorted(self._subscriptions)

    def get(self, topic: Topic) -> Optional[Subscription]:
        return self._subscriptions.get(topic.channel)

    def _lock(self, topic: Topic) -> asyncio.Lock:
        return self._locks.setdefault(topic.channel, asyncio.Lock())

    async def subscribe(self, topic: Topic, on_event: Callable[[ChangeEvent], None]) -> Subscription:
        def dispatch(payload: Any) -> None:
            try:
                on_event(parse_change(payload))
            except Exception:
                # channel stays open
                logger.exception(f"Realtime handler failed on {topic.channel}")

        # teardown, listen and store happen as one step per topic
        async with self._lock(topic):
            await self._remove(topic)
            try:
                channel = await self.feed.listen(topic, dispatch)
            except Exception as e:
                raise BackendError(f"Could not subscribe to {topic.channel}: {e}") from e
            subscription = Subscription(topic=topic, channel=channel)
            self._subscriptions[topic.channel] = subscription
        logger.info(f"Subscribed to {topic.channel} ({topic.table}, {topic.event})")
        return subscription

    async def unsubscribe(self, topic: Topic) -> bool:
        async with self._lock(topic):
            return await self._remove(topic)

    async def _remove(self, topic: Topic) -> bool:
        subscription = self._subscriptions.pop(topic.channel, None)
        if subscription is None:
            return False
        subscription.active = False
        try:
            await self.feed.remove(subscription.channel)
        except Exception as e:
            logger.warning(f"Error removing channel {topic.channel}: {e}")
        logger.info(f"Unsubscribed from {topic.channel}")
        return True

    async def close(self) -> None:
        for subscription in list(self._subscriptions.values()):
            await self.unsubscribe(subscription.topic)

    async def __aenter__(self) -> "RealtimeRelay":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def connect_relay() -> RealtimeRelay:
    if not settings.realtime_enabled:
        raise BackendError("Realtime is disabled (REALTIME_ENABLED=false)")
    client = await SupabaseClient.get_async_client()
    return RealtimeRelay(SupabaseChangeFeed(client, settings.realtime_schema))
