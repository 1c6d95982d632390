import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, ForeignKey
from app.core.base import Base, TimestampedTenantMixin

class Order(Base, TimestampedTenantMixin):
    patient_profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("patientprofile.id"), index=True)
    # representative managing the order on the patient's behalf
    representative_profile_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("patientprofile.id"), nullable=True, index=True)
    description: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(16), default="open")  # open | closed | cancelled
