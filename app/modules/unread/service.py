from supabase import Client
from app.core.dependencies import get_user_group_ids, require_id, require_uuid
from app.core.exceptions import BackendError
from app.database.supabase_client import execute
from app.modules.unread.schemas import GroupReadResponse, UnreadCountsResponse
from datetime import datetime, timezone
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class UnreadService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def mark_read(self, group_id: str, user_id: str, at: Optional[datetime] = None) -> GroupReadResponse:
        """Record that user has read group up to `at` (default: now)"""
        group_id = require_uuid(group_id, "group_id")
        user_id = require_id(user_id, "user_id")
        at = at or datetime.now(timezone.utc)
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        row = {
            "group_id": group_id,
            "user_id": user_id,
            "last_read_at": at.isoformat()
        }
        execute(
            self.supabase.table("group_reads").upsert(row, on_conflict="group_id,user_id")
        )
        logger.debug(f"Group {group_id} marked read by {user_id} at {row['last_read_at']}")
        return GroupReadResponse(**row)

    def get_unread_counts(self, user_id: str) -> UnreadCountsResponse:
        """Unread messages per group for user. Groups with nothing unread are left out."""
        user_id = require_id(user_id, "user_id")
        try:
            group_ids = get_user_group_ids(user_id, self.supabase)
            if not group_ids:
                return UnreadCountsResponse()

            reads = execute(
                self.supabase.table("group_reads")
                .select("group_id, last_read_at")
                .eq("user_id", user_id)
                .in_("group_id", group_ids)
            )
            last_read: Dict[str, str] = {
                r["group_id"]: r["last_read_at"] for r in reads.data or [] if r.get("last_read_at")
            }

            counts: Dict[str, int] = {}
            for group_id in group_ids:
                query = self.supabase.table("group_messages")\
                    .select("id", count="exact", head=True)\
                    .eq("group_id", group_id)
                if group_id in last_read:
                    query = query.gt("created_at", last_read[group_id])
                count = execute(query).count or 0
                if count > 0:
                    counts[group_id] = count
            return UnreadCountsResponse(counts=counts, total=sum(counts.values()))
        except BackendError as e:
            logger.error(f"Error computing unread counts for user {user_id}: {e.detail}")
            return UnreadCountsResponse(error=e.detail)

    def total_unread(self, user_id: str) -> int:
        return self.get_unread_counts(user_id).total
