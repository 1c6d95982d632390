"""Tests for OrderService.update_orders_by_patient_representative."""

import uuid

from app.modules.orders.service import OrderService
from conftest import FakeOutbox, FakeSession, Obj, ORG


class FakeOrderRepository:
    def __init__(self, orders):
        self.orders = orders

    async def list_open_by_representative(self, representative_profile_id):
        return [o for o in self.orders if o.representative_profile_id == representative_profile_id and o.status == "open"]

    async def save(self, obj):
        return obj


def _order(rep, status="open"):
    return Obj(id=uuid.uuid4(), org_id=ORG, patient_profile_id=uuid.uuid4(), representative_profile_id=rep, status=status)


async def test_detaches_representative_from_open_orders() -> None:
    rep = uuid.uuid4()
    open_order, closed_order, other = _order(rep), _order(rep, "closed"), _order(uuid.uuid4())
    outbox = FakeOutbox()
    service = OrderService(FakeSession(), repo=FakeOrderRepository([open_order, closed_order, other]), outbox=outbox)

    count = await service.update_orders_by_patient_representative(rep)

    assert count == 1
    assert open_order.representative_profile_id is None
    assert closed_order.representative_profile_id == rep
    assert other.representative_profile_id is not None
    assert [e[0] for e in outbox.events] == ["ORDER_REPRESENTATIVE_DETACHED"]


async def test_missing_profile_is_a_no_op() -> None:
    outbox = FakeOutbox()
    service = OrderService(FakeSession(), repo=FakeOrderRepository([]), outbox=outbox)
    assert await service.update_orders_by_patient_representative(None) == 0
    assert outbox.events == []
