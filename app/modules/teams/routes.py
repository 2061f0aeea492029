from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.teams.schemas import (
    TeamCreate, TeamResponse, FormationUpdate, SlotAssign, SlotResponse,
    SlotListResponse, FormationCatalogResponse
)
from app.modules.teams.service import TeamService, list_formations
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("/formations", response_model=FormationCatalogResponse)
async def get_formations():
    """Full formation catalog keyed by number of starters"""
    return {"formations": list_formations()}


@router.get("/formations/{starters_count}", response_model=FormationCatalogResponse)
async def get_formations_for_count(starters_count: int):
    """Formations available for a number of starters (empty when none)"""
    return {"formations": list_formations(starters_count)}


@router.post("/groups/{group_id}/team", response_model=TeamResponse, status_code=201)
async def create_team(
    group_id: str,
    team_data: TeamCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Create the group's team (group owner only)"""
    return service.create_team(group_id, current_user["id"], team_data.name, team_data.starters_count)


@router.get("/groups/{group_id}/team", response_model=Optional[TeamResponse])
async def get_team(
    group_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Get the group's team with its slots, null when the group has none"""
    return service.get_team(group_id, current_user["id"])


@router.delete("/teams/{team_id}", status_code=204)
async def delete_team(
    team_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Delete the team and its lineup (team owner only)"""
    service.delete_team(team_id, current_user["id"])
    return None


@router.put("/teams/{team_id}/formation", response_model=TeamResponse)
async def set_formation(
    team_id: str,
    formation_data: FormationUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Change formation; resets every slot assignment (team owner only)"""
    return service.set_formation(team_id, current_user["id"], formation_data.formation)


@router.get("/teams/{team_id}/slots", response_model=SlotListResponse)
async def list_slots(
    team_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Slots of the team ordered by index"""
    return service.list_slots(team_id, current_user["id"])


@router.get("/teams/{team_id}/available-players", response_model=List[str])
async def available_players(
    team_id: str,
    slot_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """User ids of members that can still be placed on the team"""
    return service.available_players(team_id, current_user["id"], slot_id)


@router.put("/slots/{slot_id}", response_model=SlotResponse)
async def assign_slot(
    slot_id: str,
    assignment: SlotAssign,
    current_user: Dict = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
):
    """Assign a member to a slot or clear it (team owner only)"""
    return service.assign_slot(slot_id, current_user["id"], assignment.user_id)
