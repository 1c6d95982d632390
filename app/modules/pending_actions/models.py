import enum
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, JSON, TIMESTAMP, ForeignKey
from app.core.base import Base, TimestampedTenantMixin

class PendingActionType(str, enum.Enum):
    approveRepresented = "approveRepresented"
    addUnderageRepresentative = "addUnderageRepresentative"
    approveUnderageRepresentative = "approveUnderageRepresentative"

class PendingActionStatus(str, enum.Enum):
    pending = "pending"
    done = "done"
    dismissed = "dismissed"

class PendingAction(Base, TimestampedTenantMixin):
    sender_profile_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("patientprofile.id"), nullable=True, index=True)
    patient_profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("patientprofile.id"), index=True)  # who must act
    action_type: Mapped[str] = mapped_column(String(48))
    status: Mapped[str] = mapped_column(String(16), default=PendingActionStatus.pending.value)
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    sent_count: Mapped[int] = mapped_column(Integer, default=1)
    last_sent_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
