import uuid
from datetime import datetime
from pydantic import BaseModel, Field
from app.modules.users.schemas import PatientProfileOut

class RepresentativeCreate(BaseModel):
    identity: str = Field(..., min_length=1, max_length=32, description="National id (DNI) of the representative")

class RepresentativeOut(BaseModel):
    id: uuid.UUID
    patient_profile_id: uuid.UUID
    representative_profile_id: uuid.UUID
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    patient_profile: PatientProfileOut | None = None
    representative_profile: PatientProfileOut | None = None

    class Config:
        from_attributes = True
