import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_patient_profile_id, require_scopes
from app.modules.pending_actions.schemas import PendingActionOut
from app.modules.pending_actions.service import PendingActionService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> PendingActionService:
    return PendingActionService(session)

@router.get("", response_model=list[PendingActionOut], dependencies=[Depends(require_scopes("pending_actions:read"))])
async def list_pending_actions(
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: PendingActionService = Depends(svc),
):
    return await service.list_for_profile(me)

@router.post("/{action_id}/dismiss", response_model=PendingActionOut, dependencies=[Depends(require_scopes("pending_actions:write"))])
async def dismiss_pending_action(
    action_id: uuid.UUID,
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: PendingActionService = Depends(svc),
):
    return await service.dismiss(me, action_id)
