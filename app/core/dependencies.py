"""
Core dependencies for route protection and group access checks
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.settings import settings
from app.core.exceptions import InvalidInputError, NotAuthorizedError, NotFoundError
from app.database.supabase_client import execute, get_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Any, Dict, List, Optional
import logging
import time
import uuid

logger = logging.getLogger(__name__)

security = HTTPBearer()

# user_id -> (group_ids, expiry). Shared by group listing and unread counts.
_GROUP_IDS_CACHE: Dict[str, tuple] = {}
_GROUP_IDS_CACHE_MAX_SIZE = 1000


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def require_id(value: Optional[str], field: str) -> str:
    if not value or not str(value).strip():
        raise InvalidInputError(f"{field} is required")
    return str(value).strip()


def require_uuid(value: Optional[str], field: str) -> str:
    """Row ids are uuids; anything else is rejected before it reaches Postgres."""
    value = require_id(value, field)
    try:
        uuid.UUID(value)
    except ValueError:
        raise InvalidInputError(f"{field} is not a valid id")
    return value


def clean_text(value: Optional[str], field: str) -> str:
    """Trimmed text; empty after trimming is rejected."""
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field} cannot be empty")
    return text


def get_user_group_ids(user_id: str, supabase: Client) -> List[str]:
    """Return group_ids from group_members, cached per user for a short TTL."""
    now = time.monotonic()
    cached = _GROUP_IDS_CACHE.get(user_id)
    if cached is not None:
        group_ids, expiry = cached
        if now < expiry:
            return list(group_ids)
        del _GROUP_IDS_CACHE[user_id]
    result = execute(
        supabase.table("group_members")
        .select("group_id")
        .eq("user_id", user_id)
    )
    group_ids = [r["group_id"] for r in (result.data or []) if r.get("group_id")]
    if len(_GROUP_IDS_CACHE) >= _GROUP_IDS_CACHE_MAX_SIZE:
        for key in [k for k, (_, expiry) in _GROUP_IDS_CACHE.items() if expiry <= now]:
            del _GROUP_IDS_CACHE[key]
    if len(_GROUP_IDS_CACHE) < _GROUP_IDS_CACHE_MAX_SIZE:
        _GROUP_IDS_CACHE[user_id] = (group_ids, now + settings.group_ids_cache_ttl_sec)
    return list(group_ids)


def invalidate_user_group_ids(*user_ids: str) -> None:
    for user_id in user_ids:
        _GROUP_IDS_CACHE.pop(user_id, None)


def get_group_row(group_id: str, supabase: Client) -> Dict[str, Any]:
    result = execute(
        supabase.table("groups")
        .select("id, name, owner_id, created_at")
        .eq("id", group_id)
        .limit(1)
    )
    if not result.data:
        raise NotFoundError("Group not found")
    return result.data[0]


def is_group_member(group_id: str, user_id: str, supabase: Client) -> bool:
    result = execute(
        supabase.table("group_members")
        .select("id")
        .eq("group_id", group_id)
        .eq("user_id", user_id)
        .limit(1)
    )
    return bool(result.data)


def check_group_member(group_id: str, user_id: str, supabase: Client) -> Dict[str, Any]:
    """Return the group if user is a member of it"""
    group = get_group_row(group_id, supabase)
    if group["owner_id"] == user_id or is_group_member(group_id, user_id, supabase):
        return group
    raise NotAuthorizedError("You must be a member of this group")


def check_group_owner(group_id: str, user_id: str, supabase: Client) -> Dict[str, Any]:
    """Return the group if user is its owner"""
    group = get_group_row(group_id, supabase)
    if group["owner_id"] != user_id:
        raise NotAuthorizedError("You must be the group owner to perform this action")
    return group
