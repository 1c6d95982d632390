import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, get_patient_profile_id, require_scopes, Principal
from app.modules.orders.schemas import OrderCreate, OrderOut
from app.modules.orders.service import OrderService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> OrderService:
    return OrderService(session)

@router.get("", response_model=list[OrderOut], dependencies=[Depends(require_scopes("orders:read"))])
async def list_orders(
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: OrderService = Depends(svc),
):
    return await service.list_for_patient(me)

@router.post("", response_model=OrderOut, status_code=201, dependencies=[Depends(require_scopes("orders:write"))])
async def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_principal),
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: OrderService = Depends(svc),
):
    return await service.create(principal.org_id, me, payload)
