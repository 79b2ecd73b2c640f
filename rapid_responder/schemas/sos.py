"""SOS event and volunteer response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from rapid_responder.models.sos_event import SosCategory, SosStatus
from rapid_responder.models.volunteer_response import ResponseDecision


class SosEventCreate(BaseModel):
    category: SosCategory
    # (0, 0) is what clients send when no position fix is available
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    address: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=2000)


class SosEventResponse(BaseModel):
    id: int
    owner_id: str
    category: SosCategory
    latitude: float
    longitude: float
    address: str | None
    description: str | None
    status: SosStatus
    created_at: datetime
    resolved_at: datetime | None

    model_config = {"from_attributes": True}


class SosRespondRequest(BaseModel):
    """Volunteer accepts or declines an SOS event."""

    decision: ResponseDecision
    estimated_arrival: str | None = Field(default=None, max_length=100)
    message: str | None = Field(default=None, max_length=1000)


class VolunteerResponseOut(BaseModel):
    id: int
    sos_event_id: int
    volunteer_id: str
    decision: ResponseDecision
    estimated_arrival: str | None
    message: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AcceptedResponsesView(BaseModel):
    """Owner-facing responder list. Clients re-poll every poll_interval_seconds."""

    sos_id: int
    status: SosStatus
    responses: list[VolunteerResponseOut]
    poll_interval_seconds: int
