from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.groups.schemas import (
    GroupCreate, GroupResponse, GroupListResponse,
    GroupMembersAdd, GroupMemberResponse, GroupMemberListResponse,
    MessageCreate, MessageResponse, MessageListResponse
)
from app.modules.groups.service import GroupService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group owned by the current user"""
    return service.create_group(group_data.name, current_user["id"])


@router.get("", response_model=GroupListResponse)
async def list_my_groups(
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List groups the current user is a member of, newest first"""
    return service.list_my_groups(current_user["id"])


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Get group by ID (only if user is a member)"""
    return service.get_group(group_id, current_user["id"])


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Delete group with its team and history (owner only)"""
    service.delete_group(group_id, current_user["id"])
    return None


@router.post("/{group_id}/members", response_model=List[GroupMemberResponse], status_code=201)
async def add_members(
    group_id: str,
    member_data: GroupMembersAdd,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Add members to the group (owner only)"""
    return service.add_members(group_id, current_user["id"], member_data.user_ids)


@router.get("/{group_id}/members", response_model=GroupMemberListResponse)
async def list_members(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List all members of a group (only if user is a member)"""
    return service.list_members(group_id, current_user["id"])


@router.delete("/{group_id}/members/{user_id}", status_code=204)
async def remove_member(
    group_id: str,
    user_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Remove a member (owner) or leave the group (user_id == current user)"""
    service.remove_member(group_id, current_user["id"], user_id)
    return None


@router.post("/{group_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    group_id: str,
    message: MessageCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Send a message to the group"""
    return service.send_message(group_id, current_user["id"], message.content)


@router.get("/{group_id}/messages", response_model=MessageListResponse)
async def list_messages(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Full message history of the group, oldest first"""
    return service.list_messages(group_id, current_user["id"])
