from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings

engine = create_async_engine(settings.POSTGRES_DSN, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_session():
    async with SessionLocal() as session:
        yield session

async def init_models():
    # Only "create_all" builds tables here; otherwise migrations own the schema.
    if settings.DB_MANAGE == "create_all":
        from .base import Base
        # register every mapped table on Base.metadata
        from app.modules.users import models as _users  # noqa: F401
        from app.modules.representatives import models as _representatives  # noqa: F401
        from app.modules.pending_actions import models as _pending_actions  # noqa: F401
        from app.modules.orders import models as _orders  # noqa: F401
        from app.modules.events import outbox as _outbox  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
