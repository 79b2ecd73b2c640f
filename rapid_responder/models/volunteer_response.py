"""Volunteer response model - accept/decline decision on an SOS event."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rapid_responder.db.base import Base
from rapid_responder.models.sos_event import utcnow


class ResponseDecision(str, enum.Enum):
    accepted = "accepted"
    declined = "declined"


class VolunteerResponse(Base):
    """Append-only: rows are never updated once written."""

    __tablename__ = "volunteer_responses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sos_event_id: Mapped[int] = mapped_column(
        ForeignKey("sos_events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    volunteer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    decision: Mapped[ResponseDecision] = mapped_column(
        Enum(ResponseDecision, name="response_decision", native_enum=False, length=20),
        nullable=False,
    )
    estimated_arrival: Mapped[str | None] = mapped_column(String(100), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
