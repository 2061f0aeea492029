from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.unread.schemas import GroupReadResponse, UnreadCountsResponse
from app.modules.unread.service import UnreadService
from app.core.dependencies import get_current_user_id, check_group_member, require_uuid
from supabase import Client
from typing import Dict

router = APIRouter(tags=["unread"])


def get_unread_service(supabase: Client = Depends(get_supabase)) -> UnreadService:
    return UnreadService(supabase)


@router.get("/unread", response_model=UnreadCountsResponse)
async def get_unread_counts(
    current_user: Dict = Depends(get_current_user_id),
    service: UnreadService = Depends(get_unread_service)
):
    """Unread message counts per group for the current user"""
    return service.get_unread_counts(current_user["id"])


@router.post("/groups/{group_id}/read", response_model=GroupReadResponse)
async def mark_group_read(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: UnreadService = Depends(get_unread_service),
    supabase: Client = Depends(get_supabase)
):
    """Mark the group as read up to now (call when the user opens it)"""
    check_group_member(require_uuid(group_id, "group_id"), current_user["id"], supabase)
    return service.mark_read(group_id, current_user["id"])
