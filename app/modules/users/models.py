import uuid
from datetime import date
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Date, ForeignKey
from app.core.base import Base, TimestampedTenantMixin

class PatientProfile(Base, TimestampedTenantMixin):
    first_name: Mapped[str] = mapped_column(String(120))
    last_name: Mapped[str] = mapped_column(String(120))

    user: Mapped["User"] = relationship(back_populates="patient_profile", uselist=False)

class User(Base, TimestampedTenantMixin):
    identity: Mapped[str] = mapped_column(String(32), unique=True, index=True)  # national id (DNI)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    birthdate: Mapped[date] = mapped_column(Date)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    patient_profile_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("patientprofile.id"), nullable=True)

    patient_profile: Mapped[PatientProfile | None] = relationship(back_populates="user")
