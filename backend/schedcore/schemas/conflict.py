from pydantic import BaseModel
from typing import Literal, List

class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal[
        "room_conflict",
        "section_conflict",
    ]
    description: str
    severity: Literal["hard", "soft"]
    day: str
    affected_slots: List[int]  # Indices into the submitted batch
    time_ranges: List[str]

class ResolutionAction(BaseModel):
    action_type: Literal["move_slot", "change_room"]
    description: str
    target_slot: int
    parameters: dict  # e.g. {"roomId": 3}

class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail]
    suggested_resolutions: List[ResolutionAction]
