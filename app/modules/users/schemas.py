import uuid
from datetime import date
from pydantic import BaseModel

class UserPublic(BaseModel):
    # no password field: responses never carry password data
    id: uuid.UUID
    identity: str
    email: str | None = None
    birthdate: date
    patient_profile_id: uuid.UUID | None = None

    class Config:
        from_attributes = True

class PatientProfileOut(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    user: UserPublic | None = None

    class Config:
        from_attributes = True
