import uuid
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.pending_actions.models import PendingAction, PendingActionStatus

class PendingActionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, **data) -> PendingAction:
        obj = PendingAction(org_id=org_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, action_id: uuid.UUID) -> PendingAction | None:
        q = select(PendingAction).where(
            PendingAction.id == action_id,
            PendingAction.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def find_open(self, sender_profile_id: uuid.UUID | None, patient_profile_id: uuid.UUID, action_type: str | None = None) -> Sequence[PendingAction]:
        q = select(PendingAction).where(
            PendingAction.patient_profile_id == patient_profile_id,
            PendingAction.status == PendingActionStatus.pending.value,
            PendingAction.deleted_at.is_(None),
        )
        if sender_profile_id is None:
            q = q.where(PendingAction.sender_profile_id.is_(None))
        else:
            q = q.where(PendingAction.sender_profile_id == sender_profile_id)
        if action_type is not None:
            q = q.where(PendingAction.action_type == action_type)
        res = await self.session.execute(q.order_by(PendingAction.created_at.asc()))
        return res.scalars().all()

    async def list_for_profile(self, patient_profile_id: uuid.UUID) -> Sequence[PendingAction]:
        q = select(PendingAction).where(
            PendingAction.patient_profile_id == patient_profile_id,
            PendingAction.status == PendingActionStatus.pending.value,
            PendingAction.deleted_at.is_(None),
        ).order_by(PendingAction.created_at.desc())
        res = await self.session.execute(q)
        return res.scalars().all()

    async def save(self, obj: PendingAction) -> PendingAction:
        self.session.add(obj)
        await self.session.flush()
        return obj
