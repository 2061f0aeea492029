from supabase import Client
from app.core.dependencies import (
    check_group_member, check_group_owner, clean_text, get_user_group_ids,
    invalidate_user_group_ids, require_id, require_uuid
)
from app.core.exceptions import BackendError, GroupsError, NotAuthorizedError, NotFoundError
from app.database.supabase_client import execute
from app.modules.groups.schemas import (
    GroupResponse, GroupListResponse, GroupMemberResponse, GroupMemberListResponse,
    MessageResponse, MessageListResponse
)
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

GROUP_COLUMNS = "id, name, owner_id, created_at"
MESSAGE_COLUMNS = "id, group_id, sender_id, content, created_at"


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_group(self, name: str, owner_id: str) -> GroupResponse:
        """Create a group and add its owner as the first member"""
        owner_id = require_id(owner_id, "owner_id")
        name = clean_text(name, "Group name")

        result = execute(
            self.supabase.table("groups").insert({
                "name": name,
                "owner_id": owner_id
            })
        )
        if not result.data:
            raise BackendError("Failed to create group")
        group = result.data[0]

        try:
            execute(
                self.supabase.table("group_members").insert({
                    "group_id": group["id"],
                    "user_id": owner_id
                })
            )
        except GroupsError:
            # A group without its owner as member is unreachable; drop it
            execute(self.supabase.table("groups").delete().eq("id", group["id"]))
            raise

        invalidate_user_group_ids(owner_id)
        logger.info(f"Group {group['id']} created by {owner_id}")
        return GroupResponse(**group)

    def get_group(self, group_id: str, requester_id: str) -> GroupResponse:
        group = check_group_member(require_uuid(group_id, "group_id"), require_id(requester_id, "requester_id"), self.supabase)
        return GroupResponse(**group)

    def list_my_groups(self, user_id: str) -> GroupListResponse:
        """Groups the user belongs to, newest first"""
        user_id = require_id(user_id, "user_id")
        try:
            group_ids = get_user_group_ids(user_id, self.supabase)
            if not group_ids:
                return GroupListResponse(items=[])
            result = execute(
                self.supabase.table("groups")
                .select(GROUP_COLUMNS)
                .in_("id", group_ids)
                .order("created_at", desc=True)
            )
            return GroupListResponse(items=[GroupResponse(**g) for g in result.data or []])
        except BackendError as e:
            logger.error(f"Error listing groups for user {user_id}: {e.detail}")
            return GroupListResponse(items=[], error=e.detail)

    def delete_group(self, group_id: str, requester_id: str) -> bool:
        """Delete a group with its team, slots, messages, read markers and members"""
        group_id = require_uuid(group_id, "group_id")
        check_group_owner(group_id, require_id(requester_id, "requester_id"), self.supabase)

        members = execute(
            self.supabase.table("group_members").select("user_id").eq("group_id", group_id)
        )
        teams = execute(
            self.supabase.table("group_teams").select("id").eq("group_id", group_id)
        )
        team_ids = [t["id"] for t in teams.data or []]
        if team_ids:
            execute(self.supabase.table("group_team_slots").delete().in_("team_id", team_ids))
            execute(self.supabase.table("group_teams").delete().in_("id", team_ids))
        for table in ("group_reads", "group_messages", "group_members"):
            execute(self.supabase.table(table).delete().eq("group_id", group_id))
        result = execute(self.supabase.table("groups").delete().eq("id", group_id))

        invalidate_user_group_ids(*[m["user_id"] for m in members.data or []])
        logger.info(f"Group {group_id} deleted by {requester_id}")
        return len(result.data or []) > 0

    def add_members(self, group_id: str, requester_id: str, user_ids: List[str]) -> List[GroupMemberResponse]:
        """Add members to the group (owner only). Ids already in the group are skipped."""
        group_id = require_uuid(group_id, "group_id")
        requester_id = require_id(requester_id, "requester_id")
        wanted: List[str] = []
        for user_id in user_ids or []:
            user_id = (user_id or "").strip()
            if user_id and user_id not in wanted:
                wanted.append(user_id)
        if not wanted:
            return []

        check_group_owner(group_id, requester_id, self.supabase)

        existing = execute(
            self.supabase.table("group_members")
            .select("user_id")
            .eq("group_id", group_id)
            .in_("user_id", wanted)
        )
        present = {m["user_id"] for m in existing.data or []}
        new_ids = [u for u in wanted if u not in present]
        if not new_ids:
            return []

        result = execute(
            self.supabase.table("group_members").insert(
                [{"group_id": group_id, "user_id": u} for u in new_ids]
            )
        )
        invalidate_user_group_ids(*new_ids)
        logger.info(f"Added {len(new_ids)} member(s) to group {group_id}")
        return [GroupMemberResponse(**m) for m in result.data or []]

    def remove_member(self, group_id: str, requester_id: str, target_user_id: str) -> bool:
        """Remove a member (owner) or leave the group (self). The owner can do neither to themself."""
        group_id = require_uuid(group_id, "group_id")
        requester_id = require_id(requester_id, "requester_id")
        target_user_id = require_id(target_user_id, "target_user_id")

        group = check_group_member(group_id, requester_id, self.supabase)
        if target_user_id == group["owner_id"]:
            raise NotAuthorizedError("The group owner cannot leave or be removed from the group")
        if requester_id != group["owner_id"] and requester_id != target_user_id:
            raise NotAuthorizedError("Only the group owner can remove other members")

        result = execute(
            self.supabase.table("group_members")
            .delete()
            .eq("group_id", group_id)
            .eq("user_id", target_user_id)
        )
        if not result.data:
            raise NotFoundError("Member not found in this group")

        self._release_slots(group_id, target_user_id)
        invalidate_user_group_ids(target_user_id)
        logger.info(f"User {target_user_id} removed from group {group_id} by {requester_id}")
        return True

    def _release_slots(self, group_id: str, user_id: str) -> None:
        """Clear the slots a former member held in the group's team"""
        teams = execute(
            self.supabase.table("group_teams").select("id").eq("group_id", group_id)
        )
        team_ids = [t["id"] for t in teams.data or []]
        if not team_ids:
            return
        execute(
            self.supabase.table("group_team_slots")
            .update({"user_id": None})
            .in_("team_id", team_ids)
            .eq("user_id", user_id)
        )

    def list_members(self, group_id: str, requester_id: str) -> GroupMemberListResponse:
        group_id = require_uuid(group_id, "group_id")
        requester_id = require_id(requester_id, "requester_id")
        try:
            check_group_member(group_id, requester_id, self.supabase)
            result = execute(
                self.supabase.table("group_members")
                .select("id, group_id, user_id, created_at")
                .eq("group_id", group_id)
            )
            return GroupMemberListResponse(items=[GroupMemberResponse(**m) for m in result.data or []])
        except BackendError as e:
            logger.error(f"Error listing members of group {group_id}: {e.detail}")
            return GroupMemberListResponse(items=[], error=e.detail)

    def send_message(self, group_id: str, sender_id: str, content: Optional[str]) -> MessageResponse:
        """Post a message; the sender must be a current member"""
        group_id = require_uuid(group_id, "group_id")
        sender_id = require_id(sender_id, "sender_id")
        content = clean_text(content, "Message")

        check_group_member(group_id, sender_id, self.supabase)
        result = execute(
            self.supabase.table("group_messages").insert({
                "group_id": group_id,
                "sender_id": sender_id,
                "content": content
            })
        )
        if not result.data:
            raise BackendError("Failed to send message")
        return MessageResponse(**result.data[0])

    def list_messages(self, group_id: str, requester_id: str) -> MessageListResponse:
        """Full message history, oldest first"""
        group_id = require_uuid(group_id, "group_id")
        requester_id = require_id(requester_id, "requester_id")
        try:
            check_group_member(group_id, requester_id, self.supabase)
            result = execute(
                self.supabase.table("group_messages")
                .select(MESSAGE_COLUMNS)
                .eq("group_id", group_id)
                .order("created_at", desc=False)
            )
            return MessageListResponse(items=[MessageResponse(**m) for m in result.data or []])
        except BackendError as e:
            logger.error(f"Error listing messages of group {group_id}: {e.detail}")
            return MessageListResponse(items=[], error=e.detail)
