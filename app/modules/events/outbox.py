import uuid
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import TIMESTAMP, text, String, Integer, Text, JSON, select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.base import Base, TimestampedTenantMixin
from app.core.config import settings
from app.core.db import SessionLocal
from app.platform.provider_registry import registry

log = logging.getLogger("event.outbox")

# Domain events written next to the state change that caused them
PENDING_ACTION_CREATED = "PENDING_ACTION_CREATED"
PENDING_ACTION_RESENT = "PENDING_ACTION_RESENT"
ORDER_REPRESENTATIVE_DETACHED = "ORDER_REPRESENTATIVE_DETACHED"
REPRESENTATIVE_STATUS_CHANGED = "REPRESENTATIVE_STATUS_CHANGED"

class EventOutbox(Base, TimestampedTenantMixin):
    event_type: Mapped[str] = mapped_column(String(64))
    subject_type: Mapped[str] = mapped_column(String(32))
    subject_id: Mapped[str] = mapped_column(String(64))
    payload: Mapped[dict] = mapped_column(JSON)

    occurred_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    status: Mapped[str] = mapped_column(String(16), default="pending")  # pending | processing | sent
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    next_attempt_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

class OutboxRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def enqueue(self, org_id: uuid.UUID, *, event_type: str, subject_type: str, subject_id: str, payload: dict, occurred_at: datetime | None = None) -> EventOutbox:
        now = datetime.now(timezone.utc)
        obj = EventOutbox(
            org_id=org_id,
            event_type=event_type,
            subject_type=subject_type,
            subject_id=str(subject_id),
            payload=payload,
            occurred_at=occurred_at or now,
            status="pending",
            attempts=0,
            next_attempt_at=now,
        )
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def claim_batch(self, limit: int = 50) -> list[EventOutbox]:
        # SELECT ... FOR UPDATE SKIP LOCKED so several relays can share the table
        q = (
            select(EventOutbox)
            .where(
                and_(
                    EventOutbox.deleted_at.is_(None),
                    EventOutbox.status == "pending",
                    EventOutbox.next_attempt_at <= datetime.now(timezone.utc),
                )
            )
            .order_by(EventOutbox.created_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        res = await self.session.execute(q)
        rows = list(res.scalars().all())
        for r in rows:
            r.status = "processing"
        await self.session.flush()
        return rows

    async def mark_sent(self, obj: EventOutbox):
        obj.status = "sent"
        obj.last_error = None
        await self.session.flush()

    async def mark_failed(self, obj: EventOutbox, error: str):
        obj.status = "pending"  # retry
        obj.attempts = (obj.attempts or 0) + 1
        obj.next_attempt_at = datetime.now(timezone.utc) + timedelta(seconds=retry_backoff(obj.attempts))
        obj.last_error = error[:2000]
        await self.session.flush()

def retry_backoff(attempts: int) -> int:
    """Seconds to wait before the next publish attempt: 2,4,8,...,60."""
    return min(60, 2 ** min(attempts, 6))

def to_message(ev: EventOutbox) -> dict:
    return {
        "org_id": str(ev.org_id),
        "event_type": ev.event_type,
        "subject": {"type": ev.subject_type, "id": ev.subject_id},
        "payload": ev.payload,
        "occurred_at": ev.occurred_at.isoformat(),
        "outbox_id": str(ev.id),
    }

class OutboxService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = OutboxRepository(session)

    async def enqueue(self, org_id: uuid.UUID, event_type: str, subject_type: str, subject_id: str | uuid.UUID, payload: dict, occurred_at: datetime | None = None) -> EventOutbox:
        log.debug("enqueue %s %s=%s", event_type, subject_type, subject_id)
        return await self.repo.enqueue(org_id, event_type=event_type, subject_type=subject_type, subject_id=str(subject_id), payload=payload, occurred_at=occurred_at)

# ---- Background relay ----

async def run_outbox_relay(poll_interval_seconds: float | None = None):
    interval = poll_interval_seconds if poll_interval_seconds is not None else settings.OUTBOX_POLL_SECONDS
    bus = registry.event_bus()
    log.info("Outbox relay started with bus=%s", bus.__class__.__name__)
    try:
        while True:
            async with SessionLocal() as session:
                repo = OutboxRepository(session)
                try:
                    batch = await repo.claim_batch(limit=50)
                    if not batch:
                        await session.commit()
                        await asyncio.sleep(interval)
                        continue
                    for ev in batch:
                        try:
                            await bus.publish(topic=settings.EVENT_TOPIC, key=ev.subject_id or "-", value=to_message(ev))
                            await repo.mark_sent(ev)
                        except Exception as ex:
                            log.exception("Publish failed for outbox_id=%s", ev.id)
                            await repo.mark_failed(ev, error=str(ex))
                    await session.commit()
                except Exception:
                    log.exception("Outbox relay iteration failed")
                    await session.rollback()
                    await asyncio.sleep(interval)
            await asyncio.sleep(0)  # yield
    except asyncio.CancelledError:
        log.info("Outbox relay cancelled; shutting down")
        raise
