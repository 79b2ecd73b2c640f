"""SOS event model."""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rapid_responder.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SosCategory(str, enum.Enum):
    Health = "Health"
    Fire = "Fire"
    Threat = "Threat"
    Other = "Other"


class SosStatus(str, enum.Enum):
    active = "active"
    resolved = "resolved"
    cancelled = "cancelled"


class SosEvent(Base):
    """Emergency raised by a user. Owner, category and location never change after insert."""

    __tablename__ = "sos_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    category: Mapped[SosCategory] = mapped_column(
        Enum(SosCategory, name="sos_category", native_enum=False, length=20),
        nullable=False,
    )
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SosStatus] = mapped_column(
        Enum(SosStatus, name="sos_status", native_enum=False, length=20),
        nullable=False,
        default=SosStatus.active,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Set exactly once, on the active -> resolved/cancelled transition
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == SosStatus.active
