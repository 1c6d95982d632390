import uuid
from datetime import date
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.users.models import User, PatientProfile

class UserRepository:
    """Read side of the user directory, plus creation for seeding."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_identity(self, identity: str) -> User | None:
        q = select(User).options(selectinload(User.patient_profile)).where(
            User.identity == identity,
            User.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_patient_profile(self, patient_profile_id: uuid.UUID) -> User | None:
        q = select(User).options(selectinload(User.patient_profile)).where(
            User.patient_profile_id == patient_profile_id,
            User.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def create_profile(self, org_id: uuid.UUID, *, first_name: str, last_name: str) -> PatientProfile:
        obj = PatientProfile(org_id=org_id, first_name=first_name, last_name=last_name)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def create(self, org_id: uuid.UUID, *, identity: str, birthdate: date, email: str | None = None,
                     password_hash: str | None = None, patient_profile_id: uuid.UUID | None = None) -> User:
        obj = User(
            org_id=org_id,
            identity=identity,
            birthdate=birthdate,
            email=email,
            password_hash=password_hash,
            patient_profile_id=patient_profile_id,
        )
        self.session.add(obj)
        await self.session.flush()
        return obj
