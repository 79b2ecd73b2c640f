"""Volunteer schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from rapid_responder.schemas.sos import SosEventResponse


class VolunteerRegister(BaseModel):
    max_range_meters: float | None = Field(default=None, gt=0, le=100_000)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_position_pair(self) -> "VolunteerRegister":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class VolunteerOut(BaseModel):
    user_id: str
    is_available: bool
    max_range_meters: float
    latitude: float | None
    longitude: float | None
    updated_at: datetime

    model_config = {"from_attributes": True}


class VolunteerRegistered(BaseModel):
    volunteer: VolunteerOut
    active_events: list[SosEventResponse] = []
