from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class TeamState(str, Enum):
    TEAM_CREATED = "team_created"
    FORMATION_SET = "formation_set"
    SLOTS_PARTIALLY_ASSIGNED = "slots_partially_assigned"
    SLOTS_FULLY_ASSIGNED = "slots_fully_assigned"


class TeamCreate(BaseModel):
    name: str
    starters_count: int = 11


class FormationUpdate(BaseModel):
    formation: str


class SlotAssign(BaseModel):
    user_id: Optional[str] = None  # None clears the slot


class SlotResponse(BaseModel):
    id: str
    team_id: str
    index: int
    role: Optional[str] = None
    x: float
    y: float
    user_id: Optional[str] = None

    class Config:
        from_attributes = True


class SlotListResponse(BaseModel):
    items: List[SlotResponse] = []
    error: Optional[str] = None


class TeamResponse(BaseModel):
    id: str
    group_id: str
    name: str
    starters_count: int
    formation: Optional[str] = None
    owner_id: str
    state: TeamState = TeamState.TEAM_CREATED
    slots: List[SlotResponse] = []

    class Config:
        from_attributes = True


class FormationSlot(BaseModel):
    index: int
    role: str
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)


class FormationResponse(BaseModel):
    name: str
    starters: int
    slots: List[FormationSlot]


class FormationCatalogResponse(BaseModel):
    formations: Dict[int, List[FormationResponse]]
