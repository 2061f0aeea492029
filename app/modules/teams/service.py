from supabase import Client
from app.core.dependencies import (
    check_group_member, check_group_owner, clean_text, is_group_member, require_id,
    require_uuid
)
from app.core.exceptions import (
    BackendError, ConflictError, InvalidInputError, NotAuthorizedError, NotFoundError
)
from app.database.supabase_client import execute
from app.modules.teams.formations import FOOTBALL_FORMATIONS_BY_COUNT, formations_for_count, get_formation
from app.modules.teams.schemas import (
    FormationResponse, SlotListResponse, SlotResponse, TeamResponse, TeamState
)
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

TEAM_COLUMNS = "id, group_id, name, starters_count, formation, owner_id"
SLOT_COLUMNS = "id, team_id, index, role, x, y, user_id"
MAX_STARTERS = 11


def resolve_team_state(formation: Optional[str], slots: List[Dict[str, Any]]) -> TeamState:
    if not formation:
        return TeamState.TEAM_CREATED
    assigned = sum(1 for s in slots if s.get("user_id"))
    if assigned == 0:
        return TeamState.FORMATION_SET
    if assigned < len(slots):
        return TeamState.SLOTS_PARTIALLY_ASSIGNED
    return TeamState.SLOTS_FULLY_ASSIGNED


def list_formations(starters_count: Optional[int] = None) -> Dict[int, List[FormationResponse]]:
    """Formation catalog for one player count, or all of it"""
    counts = [starters_count] if starters_count is not None else sorted(FOOTBALL_FORMATIONS_BY_COUNT)
    catalog = {}
    for count in counts:
        catalog[count] = [
            FormationResponse(name=name, starters=definition["starters"], slots=definition["slots"])
            for name, definition in formations_for_count(count).items()
        ]
    return catalog


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_team_row(self, team_id: str) -> Dict[str, Any]:
        result = execute(
            self.supabase.table("group_teams")
            .select(TEAM_COLUMNS)
            .eq("id", team_id)
            .limit(1)
        )
        if not result.data:
            raise NotFoundError("Team not found")
        return result.data[0]

    def _check_team_owner(self, team_id: str, requester_id: str) -> Dict[str, Any]:
        team = self._get_team_row(team_id)
        if team["owner_id"] != requester_id:
            raise NotAuthorizedError("You must be the team owner to perform this action")
        return team

    def _check_team_member(self, team_id: str, requester_id: str) -> Dict[str, Any]:
        team = self._get_team_row(team_id)
        check_group_member(team["group_id"], requester_id, self.supabase)
        return team

    def _fetch_slots(self, team_id: str) -> List[Dict[str, Any]]:
        result = execute(
            self.supabase.table("group_team_slots")
            .select(SLOT_COLUMNS)
            .eq("team_id", team_id)
            .order("index", desc=False)
        )
        return result.data or []

    def _team_response(self, team: Dict[str, Any], slots: List[Dict[str, Any]]) -> TeamResponse:
        return TeamResponse(
            **team,
            state=resolve_team_state(team.get("formation"), slots),
            slots=[SlotResponse(**s) for s in slots]
        )

    def create_team(self, group_id: str, requester_id: str, name: str, starters_count: int) -> TeamResponse:
        """Create the group's team (group owner only, one team per group)"""
        group_id = require_uuid(group_id, "group_id")
        requester_id = require_id(requester_id, "requester_id")
        name = clean_text(name, "Team name")
        if isinstance(starters_count, bool) or not isinstance(starters_count, int):
            raise InvalidInputError("starters_count must be an integer")
        if starters_count <= 0 or starters_count > MAX_STARTERS:
            raise InvalidInputError(f"starters_count must be between 1 and {MAX_STARTERS}")

        check_group_owner(group_id, requester_id, self.supabase)
        existing = execute(
            self.supabase.table("group_teams").select("id").eq("group_id", group_id).limit(1)
        )
        if existing.data:
            raise ConflictError("This group already has a team")

        result = execute(
            self.supabase.table("group_teams").insert({
                "group_id": group_id,
                "name": name,
                "starters_count": starters_count,
                "formation": None,
                "owner_id": requester_id
            })
        )
        if not result.data:
            raise BackendError("Failed to create team")
        team = {k: result.data[0].get(k) for k in TEAM_COLUMNS.split(", ")}
        logger.info(f"Team {team['id']} created for group {group_id}")
        return self._team_response(team, [])

    def get_team(self, group_id: str, requester_id: str) -> Optional[TeamResponse]:
        """The group's team with its slots, or None"""
        group_id = require_uuid(group_id, "group_id")
        check_group_member(group_id, require_id(requester_id, "requester_id"), self.supabase)
        result = execute(
            self.supabase.table("group_teams")
            .select(TEAM_COLUMNS)
            .eq("group_id", group_id)
            .limit(1)
        )
        if not result.data:
            return None
        team = result.data[0]
        return self._team_response(team, self._fetch_slots(team["id"]))

    def list_slots(self, team_id: str, requester_id: str) -> SlotListResponse:
        """Slots ordered by index"""
        team_id = require_uuid(team_id, "team_id")
        requester_id = require_id(requester_id, "requester_id")
        try:
            self._check_team_member(team_id, requester_id)
            return SlotListResponse(items=[SlotResponse(**s) for s in self._fetch_slots(team_id)])
        except BackendError as e:
            logger.error(f"Error listing slots of team {team_id}: {e.detail}")
            return SlotListResponse(items=[], error=e.detail)

    def set_formation(self, team_id: str, requester_id: str, formation_name: str) -> TeamResponse:
        """
        Switch the team to a catalog formation.

        The formation update and the slot replacement run in one transaction
        (set_team_formation). Every previous assignment is dropped.
        """
        team_id = require_uuid(team_id, "team_id")
        requester_id = require_id(requester_id, "requester_id")
        formation_name = clean_text(formation_name, "Formation")

        team = self._check_team_owner(team_id, requester_id)
        definition = get_formation(team["starters_count"], formation_name)
        if definition is None:
            raise InvalidInputError("Formation unknown for this player count")

        slots = [
            {"index": s["index"], "role": s["role"], "x": s["x"], "y": s["y"]}
            for s in definition["slots"]
        ]
        result = execute(
            self.supabase.rpc("set_team_formation", {
                "p_team_id": team_id,
                "p_formation": formation_name,
                "p_slots": slots
            })
        )
        new_slots = sorted(result.data or [], key=lambda s: s["index"])
        if len(new_slots) != len(slots):
            raise BackendError("Formation change returned an unexpected slot set")

        team["formation"] = formation_name
        logger.info(f"Team {team_id} formation set to {formation_name} ({len(new_slots)} slots)")
        return self._team_response(team, new_slots)

    def assign_slot(self, slot_id: str, requester_id: str, user_id: Optional[str]) -> SlotResponse:
        """Put a group member on a slot, or clear it with user_id=None (team owner only)"""
        slot_id = require_uuid(slot_id, "slot_id")
        requester_id = require_id(requester_id, "requester_id")
        user_id = (user_id or "").strip() or None

        slot_result = execute(
            self.supabase.table("group_team_slots").select(SLOT_COLUMNS).eq("id", slot_id).limit(1)
        )
        if not slot_result.data:
            raise NotFoundError("Slot not found")
        slot = slot_result.data[0]
        team = self._check_team_owner(slot["team_id"], requester_id)

        if user_id is not None:
            if user_id != team["owner_id"] and not is_group_member(team["group_id"], user_id, self.supabase):
                raise InvalidInputError("Only group members can be assigned to a slot")
            taken = execute(
                self.supabase.table("group_team_slots")
                .select("id")
                .eq("team_id", team["id"])
                .eq("user_id", user_id)
                .neq("id", slot_id)
                .limit(1)
            )
            if taken.data:
                raise ConflictError("This player already occupies another slot")

        result = execute(
            self.supabase.table("group_team_slots")
            .update({"user_id": user_id})
            .eq("id", slot_id)
        )
        if not result.data:
            # Slot replaced by a concurrent formation change
            raise NotFoundError("Slot no longer available")
        return SlotResponse(**result.data[0])

    def delete_team(self, team_id: str, requester_id: str) -> bool:
        """Delete the team and its slots (team owner only)"""
        team_id = require_uuid(team_id, "team_id")
        self._check_team_owner(team_id, require_id(requester_id, "requester_id"))
        execute(self.supabase.table("group_team_slots").delete().eq("team_id", team_id))
        result = execute(self.supabase.table("group_teams").delete().eq("id", team_id))
        logger.info(f"Team {team_id} deleted by {requester_id}")
        return len(result.data or []) > 0

    def available_players(self, team_id: str, requester_id: str, slot_id: Optional[str] = None) -> List[str]:
        """Group members not holding a slot; the given slot's holder stays eligible for it"""
        team_id = require_uuid(team_id, "team_id")
        team = self._check_team_member(team_id, require_id(requester_id, "requester_id"))
        members = execute(
            self.supabase.table("group_members")
            .select("user_id")
            .eq("group_id", team["group_id"])
        )
        assigned = {
            s["user_id"] for s in self._fetch_slots(team_id)
            if s.get("user_id") and s["id"] != slot_id
        }
        return [m["user_id"] for m in members.data or [] if m["user_id"] not in assigned]
