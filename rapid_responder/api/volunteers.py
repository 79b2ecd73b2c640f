"""Volunteer opt-in/opt-out and location API."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from rapid_responder.core.deps import get_current_user_id, get_dispatcher, get_registry
from rapid_responder.core.errors import NotFoundError
from rapid_responder.schemas.volunteer import (
    LocationUpdate,
    VolunteerOut,
    VolunteerRegister,
    VolunteerRegistered,
)
from rapid_responder.services.dispatch_service import DispatchRouter
from rapid_responder.services.volunteer_registry import VolunteerRegistry

router = APIRouter(prefix="/volunteers", tags=["volunteers"])


@router.post("", response_model=VolunteerRegistered)
def register_volunteer(
    data: VolunteerRegister | None = Body(default=None),
    registry: VolunteerRegistry = Depends(get_registry),
    dispatcher: DispatchRouter = Depends(get_dispatcher),
    user_id: str = Depends(get_current_user_id),
):
    """Opt in as a volunteer. Returns the SOS events already active."""
    d = data or VolunteerRegister()
    volunteer = registry.register(user_id, d.max_range_meters, d.latitude, d.longitude)
    events = dispatcher.on_volunteer_registered(user_id)
    return VolunteerRegistered(
        volunteer=VolunteerOut.model_validate(volunteer),
        active_events=events,
    )


@router.get("/me", response_model=VolunteerOut)
def get_my_registration(
    registry: VolunteerRegistry = Depends(get_registry),
    user_id: str = Depends(get_current_user_id),
):
    volunteer = registry.get(user_id)
    if volunteer is None:
        raise NotFoundError("Volunteer not found")
    return volunteer


@router.delete("/me", response_model=VolunteerOut)
def unregister_volunteer(
    registry: VolunteerRegistry = Depends(get_registry),
    user_id: str = Depends(get_current_user_id),
):
    """Opt out. No further alerts are sent."""
    return registry.unregister(user_id)


@router.post("/me/location", response_model=VolunteerOut)
def update_my_location(
    data: LocationUpdate,
    registry: VolunteerRegistry = Depends(get_registry),
    user_id: str = Depends(get_current_user_id),
):
    """Volunteer reports their current position, used for range matching."""
    return registry.update_location(user_id, data.latitude, data.longitude)
