import uuid
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.events.outbox import OutboxService, ORDER_REPRESENTATIVE_DETACHED
from app.modules.orders.models import Order
from app.modules.orders.repository import OrderRepository
from app.modules.orders.schemas import OrderCreate

log = logging.getLogger(__name__)

class OrderService:
    def __init__(self, session: AsyncSession, repo: OrderRepository | None = None, outbox: OutboxService | None = None):
        self.session = session
        self.repo = repo or OrderRepository(session)
        self.outbox = outbox or OutboxService(session)

    async def create(self, org_id: uuid.UUID, patient_profile_id: uuid.UUID, payload: OrderCreate) -> Order:
        obj = await self.repo.create(org_id, patient_profile_id=patient_profile_id, **payload.model_dump(exclude_unset=True))
        await self.session.commit()
        return obj

    async def list_for_patient(self, patient_profile_id: uuid.UUID):
        return await self.repo.list_for_patient(patient_profile_id)

    async def update_orders_by_patient_representative(self, representative_profile_id: uuid.UUID | None) -> int:
        """Detach a representative from every open order they manage.

        Flushes only; the caller commits. Returns the number of orders touched.
        """
        if representative_profile_id is None:
            log.info("No representative profile given; orders left unchanged")
            return 0
        orders = await self.repo.list_open_by_representative(representative_profile_id)
        for order in orders:
            order.representative_profile_id = None
            await self.repo.save(order)
            await self.outbox.enqueue(
                order.org_id, ORDER_REPRESENTATIVE_DETACHED, "order", order.id,
                {"patient_profile_id": str(order.patient_profile_id),
                 "representative_profile_id": str(representative_profile_id)},
            )
        log.info("Detached representative %s from %d open order(s)", representative_profile_id, len(orders))
        return len(orders)
