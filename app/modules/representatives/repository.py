import uuid
import logging
from datetime import datetime, timezone
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import Conflict
from app.modules.representatives.models import PatientRepresentative
from app.modules.users.models import PatientProfile

log = logging.getLogger(__name__)

_WITH_PROFILES = (
    selectinload(PatientRepresentative.patient_profile).selectinload(PatientProfile.user),
    selectinload(PatientRepresentative.representative_profile).selectinload(PatientProfile.user),
)

class RepresentativeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _flush(self):
        try:
            await self.session.flush()
        except IntegrityError as e:
            log.warning("Relationship write rejected by constraint: %s", e.orig)
            await self.session.rollback()
            raise Conflict("A representative request for this person already exists.") from e

    async def list_for_representative(self, representative_profile_id: uuid.UUID, status: str | None = None) -> Sequence[PatientRepresentative]:
        q = select(PatientRepresentative).options(*_WITH_PROFILES).where(
            PatientRepresentative.representative_profile_id == representative_profile_id,
            PatientRepresentative.deleted_at.is_(None),
        )
        if status is not None:
            q = q.where(PatientRepresentative.status == status)
        q = q.order_by(PatientRepresentative.created_at.asc()).execution_options(populate_existing=True)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def list_for_patient(self, patient_profile_id: uuid.UUID) -> Sequence[PatientRepresentative]:
        q = select(PatientRepresentative).options(*_WITH_PROFILES).where(
            PatientRepresentative.patient_profile_id == patient_profile_id,
            PatientRepresentative.deleted_at.is_(None),
        ).order_by(PatientRepresentative.created_at.asc()).execution_options(populate_existing=True)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def get(self, relationship_id: uuid.UUID) -> PatientRepresentative | None:
        q = select(PatientRepresentative).where(
            PatientRepresentative.id == relationship_id,
            PatientRepresentative.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def find_pair(self, patient_profile_id: uuid.UUID, representative_profile_id: uuid.UUID) -> PatientRepresentative | None:
        """Latest record for the pair, soft-deleted ones included; live records win."""
        q = select(PatientRepresentative).where(
            PatientRepresentative.patient_profile_id == patient_profile_id,
            PatientRepresentative.representative_profile_id == representative_profile_id,
        ).order_by(
            PatientRepresentative.deleted_at.desc().nulls_first(),
            PatientRepresentative.updated_at.desc(),
        ).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def create(self, org_id: uuid.UUID, **data) -> PatientRepresentative:
        obj = PatientRepresentative(org_id=org_id, **data)
        self.session.add(obj)
        await self._flush()
        return obj

    async def save(self, obj: PatientRepresentative) -> PatientRepresentative:
        self.session.add(obj)
        await self._flush()
        return obj

    async def soft_delete(self, relationship_id: uuid.UUID) -> bool:
        obj = await self.session.get(PatientRepresentative, relationship_id)
        if not obj or obj.deleted_at is not None:
            return False
        obj.deleted_at = datetime.now(timezone.utc)
        await self._flush()
        return True

    async def restore(self, relationship_id: uuid.UUID) -> bool:
        obj = await self.session.get(PatientRepresentative, relationship_id)
        if not obj:
            return False
        obj.deleted_at = None
        await self._flush()
        return True

    async def delete(self, relationship_id: uuid.UUID, soft: bool = True) -> bool:
        if soft:
            return await self.soft_delete(relationship_id)
        obj = await self.session.get(PatientRepresentative, relationship_id)
        if not obj:
            return False
        await self.session.delete(obj)
        await self.session.flush()
        return True
