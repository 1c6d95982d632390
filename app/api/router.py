from fastapi import APIRouter
from app.modules.representatives.router import router as representatives_router
from app.modules.pending_actions.router import router as pending_actions_router
from app.modules.orders.router import router as orders_router

api_router = APIRouter()
api_router.include_router(representatives_router, prefix="/representatives", tags=["representatives"])
api_router.include_router(pending_actions_router, prefix="/pending-actions", tags=["pending-actions"])
api_router.include_router(orders_router, prefix="/orders", tags=["orders"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
