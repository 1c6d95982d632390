import uuid
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel
from app.core.config import settings

http_bearer = HTTPBearer(auto_error=False)

class Principal(BaseModel):
    user_id: uuid.UUID
    org_id: uuid.UUID
    patient_profile_id: uuid.UUID | None = None
    roles: list[str] = []
    scopes: list[str] = []

def _decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG], audience=settings.REQUIRED_AUDIENCE)
        return payload
    except JWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")

def _optional_uuid(value) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid patient_profile_id claim")

async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    x_patient_profile_id: str | None = Header(default=None),
) -> Principal:
    # In local, allow missing token; the acting profile comes from X-Patient-Profile-Id
    if creds is None and settings.ENV == "local":
        return Principal(
            user_id=uuid.uuid4(),
            org_id=uuid.UUID(settings.DEFAULT_ORG_ID),
            patient_profile_id=_optional_uuid(x_patient_profile_id),
            roles=["admin"],
            scopes=["*"],
        )
    if creds is None:
        raise HTTPException(status_code=401, detail="Missing token")

    data = _decode_token(creds.credentials)
    user_id = uuid.UUID(str(data.get("sub") or data.get("user_id")))
    org_id = uuid.UUID(str(data.get("org_id") or settings.DEFAULT_ORG_ID))
    return Principal(
        user_id=user_id,
        org_id=org_id,
        patient_profile_id=_optional_uuid(data.get("patient_profile_id")),
        roles=data.get("roles", []),
        scopes=data.get("scopes", []),
    )

def require_scopes(*needed: str):
    def dep(principal: Principal = Depends(get_principal)) -> Principal:
        if "*" in principal.scopes:
            return principal
        if not set(needed).issubset(set(principal.scopes)):
            raise HTTPException(status_code=403, detail="Insufficient scopes")
        return principal
    return dep

def get_patient_profile_id(principal: Principal = Depends(get_principal)) -> uuid.UUID:
    if principal.patient_profile_id is None:
        raise HTTPException(status_code=403, detail="No patient profile linked to this account")
    return principal.patient_profile_id
