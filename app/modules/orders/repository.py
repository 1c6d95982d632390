import uuid
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.orders.models import Order

class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, **data) -> Order:
        obj = Order(org_id=org_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def list_for_patient(self, patient_profile_id: uuid.UUID) -> Sequence[Order]:
        q = select(Order).where(
            Order.patient_profile_id == patient_profile_id,
            Order.deleted_at.is_(None),
        ).order_by(Order.created_at.desc())
        res = await self.session.execute(q)
        return res.scalars().all()

    async def list_open_by_representative(self, representative_profile_id: uuid.UUID) -> Sequence[Order]:
        q = select(Order).where(
            Order.representative_profile_id == representative_profile_id,
            Order.status == "open",
            Order.deleted_at.is_(None),
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def save(self, obj: Order) -> Order:
        self.session.add(obj)
        await self.session.flush()
        return obj
