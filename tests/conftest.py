import pytest
from fastapi.testclient import TestClient

from fake_supabase import FakeSupabase
from app.core import dependencies
from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.auth import service as auth_service
from app.modules.groups.service import GroupService
from app.modules.teams.service import TeamService
from app.modules.unread.service import UnreadService

OWNER = "user-owner"
MEMBER_A = "user-a"
MEMBER_B = "user-b"
OUTSIDER = "user-outsider"
MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture(autouse=True)
def _clear_caches():
    dependencies._GROUP_IDS_CACHE.clear()
    auth_service._AUTH_USER_CACHE.clear()
    yield
    dependencies._GROUP_IDS_CACHE.clear()
    auth_service._AUTH_USER_CACHE.clear()


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def groups(supabase) -> GroupService:
    return GroupService(supabase)


@pytest.fixture
def unread(supabase) -> UnreadService:
    return UnreadService(supabase)


@pytest.fixture
def teams(supabase) -> TeamService:
    return TeamService(supabase)


@pytest.fixture
def group(groups):
    """Group "Lions" owned by OWNER with MEMBER_A and MEMBER_B"""
    created = groups.create_group("Lions", OWNER)
    groups.add_members(created.id, OWNER, [MEMBER_A, MEMBER_B])
    return created


@pytest.fixture
def team(teams, group):
    return teams.create_team(group.id, OWNER, "Lions FC", 7)


@pytest.fixture
def client(supabase):
    for user_id in (OWNER, MEMBER_A, MEMBER_B, OUTSIDER):
        supabase.auth.tokens[f"token-{user_id}"] = user_id
    app.dependency_overrides[get_supabase] = lambda: supabase
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(user_id: str) -> dict:
    return {"Authorization": f"Bearer token-{user_id}"}
