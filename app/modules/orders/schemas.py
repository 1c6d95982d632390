import uuid
from datetime import datetime
from pydantic import BaseModel, Field

class OrderCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    representative_profile_id: uuid.UUID | None = None

class OrderOut(BaseModel):
    id: uuid.UUID
    patient_profile_id: uuid.UUID
    representative_profile_id: uuid.UUID | None
    description: str
    status: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True
