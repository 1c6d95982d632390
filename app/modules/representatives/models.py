import enum
import uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, ForeignKey, CheckConstraint, Index, text
from app.core.base import Base, TimestampedTenantMixin
from app.modules.users.models import PatientProfile

class RepresentativeStatus(str, enum.Enum):
    requested = "requested"
    approved = "approved"
    removed = "removed"

class PatientRepresentative(Base, TimestampedTenantMixin):
    """``patient_profile`` is represented by ``representative_profile``."""

    patient_profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("patientprofile.id"), index=True)
    representative_profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("patientprofile.id"), index=True)
    status: Mapped[str] = mapped_column(String(16), default=RepresentativeStatus.requested.value)  # requested | approved | removed

    patient_profile: Mapped[PatientProfile] = relationship(foreign_keys=[patient_profile_id])
    representative_profile: Mapped[PatientProfile] = relationship(foreign_keys=[representative_profile_id])

    __table_args__ = (
        CheckConstraint("patient_profile_id <> representative_profile_id", name="ck_patientrepresentative_not_self"),
        # at most one live relationship per ordered pair
        Index(
            "uq_patientrepresentative_active_pair",
            "patient_profile_id",
            "representative_profile_id",
            unique=True,
            postgresql_where=text("status IN ('requested', 'approved') AND deleted_at IS NULL"),
        ),
    )
