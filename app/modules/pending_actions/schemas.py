import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from pydantic import BaseModel
from app.modules.pending_actions.models import PendingActionType

@dataclass(frozen=True)
class GeneratePendingActions:
    """Request to notify users; ``invite`` is the relationship record, when any."""

    user: Any
    action_type: PendingActionType
    invite: Any | None = None

class PendingActionOut(BaseModel):
    id: uuid.UUID
    sender_profile_id: uuid.UUID | None
    patient_profile_id: uuid.UUID
    action_type: str
    status: str
    payload: dict | None
    sent_count: int
    last_sent_at: datetime | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
