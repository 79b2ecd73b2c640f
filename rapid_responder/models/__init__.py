"""SQLAlchemy models."""

from __future__ import annotations

from rapid_responder.models.sos_event import SosCategory, SosEvent, SosStatus
from rapid_responder.models.volunteer import Volunteer
from rapid_responder.models.volunteer_response import ResponseDecision, VolunteerResponse

__all__ = [
    "SosCategory",
    "SosEvent",
    "SosStatus",
    "Volunteer",
    "ResponseDecision",
    "VolunteerResponse",
]
