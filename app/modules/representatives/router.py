import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_patient_profile_id, require_scopes
from app.modules.representatives.schemas import RepresentativeCreate, RepresentativeOut
from app.modules.representatives.service import RepresentativeService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> RepresentativeService:
    return RepresentativeService.from_session(session)

@router.get("/represented", response_model=list[RepresentativeOut], dependencies=[Depends(require_scopes("representatives:read"))])
async def list_represented(
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.get_represented(me)

@router.get("", response_model=list[RepresentativeOut], dependencies=[Depends(require_scopes("representatives:read"))])
async def list_representatives(
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.get_representatives(me)

@router.post("", response_model=list[RepresentativeOut], status_code=201, dependencies=[Depends(require_scopes("representatives:write"))])
async def create_representative(
    payload: RepresentativeCreate,
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.create_representative(me, payload.identity)

@router.post("/{relationship_id}/approve", response_model=list[RepresentativeOut], dependencies=[Depends(require_scopes("representatives:write"))])
async def approve_representative(
    relationship_id: uuid.UUID,
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.approve(me, relationship_id)

@router.delete("/represented/{relationship_id}", response_model=list[RepresentativeOut], dependencies=[Depends(require_scopes("representatives:write"))])
async def remove_represented(
    relationship_id: uuid.UUID,
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.remove_represented(me, relationship_id)

@router.delete("/records/{relationship_id}", status_code=204, dependencies=[Depends(require_scopes("representatives:admin"))])
async def delete_record(
    relationship_id: uuid.UUID,
    service: RepresentativeService = Depends(svc),
):
    ok = await service.delete_one(relationship_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Representative record not found")
    return

@router.delete("/{relationship_id}", response_model=list[RepresentativeOut], dependencies=[Depends(require_scopes("representatives:write"))])
async def remove_representative(
    relationship_id: uuid.UUID,
    me: uuid.UUID = Depends(get_patient_profile_id),
    service: RepresentativeService = Depends(svc),
):
    return await service.remove_representative(me, relationship_id)
