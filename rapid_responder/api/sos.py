"""SOS events API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from rapid_responder.core.config import settings
from rapid_responder.core.deps import (
    get_aggregator,
    get_current_user_id,
    get_dispatcher,
    get_lifecycle,
    get_registry,
)
from rapid_responder.core.errors import AuthorizationError, NotFoundError
from rapid_responder.core.sos_policies import HISTORY_LIMIT
from rapid_responder.schemas.sos import (
    AcceptedResponsesView,
    SosEventCreate,
    SosEventResponse,
    SosRespondRequest,
    VolunteerResponseOut,
)
from rapid_responder.services.dispatch_service import DispatchRouter
from rapid_responder.services.response_service import ResponseAggregator
from rapid_responder.services.sos_service import EventLifecycleManager
from rapid_responder.services.volunteer_registry import VolunteerRegistry

router = APIRouter(prefix="/sos", tags=["sos"])


@router.post("", response_model=SosEventResponse)
def create_event(
    data: SosEventCreate,
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    """Raise an SOS. Nearby live volunteers are alerted immediately."""
    return lifecycle.create(
        user_id,
        data.category,
        data.latitude,
        data.longitude,
        address=data.address,
        description=data.description,
    )


@router.get("/me", response_model=list[SosEventResponse])
def list_my_events(
    limit: int = Query(default=HISTORY_LIMIT, ge=1, le=100),
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    """Current user's SOS history, newest first."""
    return lifecycle.history_for_owner(user_id, limit)


@router.get("/me/active", response_model=SosEventResponse | None)
def get_my_active_event(
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    """Current user's open SOS, or null."""
    return lifecycle.current_for_owner(user_id)


# ---- Volunteer pull path (before {sos_id} path param) ----


@router.get("/active", response_model=list[SosEventResponse])
def list_active_for_volunteer(
    dispatcher: DispatchRouter = Depends(get_dispatcher),
    registry: VolunteerRegistry = Depends(get_registry),
    user_id: str = Depends(get_current_user_id),
):
    """Active SOS events, most recent first, minus the ones this volunteer declined."""
    if not registry.is_volunteer(user_id):
        raise AuthorizationError("Only available volunteers can list active SOS events")
    return dispatcher.visible_events(user_id)


@router.get("/{sos_id}", response_model=SosEventResponse)
def get_event(
    sos_id: int,
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    return lifecycle.get(sos_id)


@router.post("/{sos_id}/resolve", response_model=SosEventResponse)
def resolve_event(
    sos_id: int,
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    """Mark SOS resolved. Only the owner can resolve."""
    return lifecycle.resolve(sos_id, user_id)


@router.post("/{sos_id}/cancel", response_model=SosEventResponse)
def cancel_event(
    sos_id: int,
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    user_id: str = Depends(get_current_user_id),
):
    """Cancel SOS. Only the owner can cancel."""
    return lifecycle.cancel(sos_id, user_id)


@router.post("/{sos_id}/respond", response_model=VolunteerResponseOut)
def respond_to_event(
    sos_id: int,
    data: SosRespondRequest,
    aggregator: ResponseAggregator = Depends(get_aggregator),
    registry: VolunteerRegistry = Depends(get_registry),
    user_id: str = Depends(get_current_user_id),
):
    """Volunteer accepts or declines, with optional ETA and message."""
    if registry.get(user_id) is None:
        raise NotFoundError("Volunteer not found")
    return aggregator.respond(
        sos_id,
        user_id,
        data.decision,
        estimated_arrival=data.estimated_arrival,
        message=data.message,
    )


@router.get("/{sos_id}/responses", response_model=AcceptedResponsesView)
def list_accepted_responses(
    sos_id: int,
    lifecycle: EventLifecycleManager = Depends(get_lifecycle),
    aggregator: ResponseAggregator = Depends(get_aggregator),
    user_id: str = Depends(get_current_user_id),
):
    """Volunteers on their way. Only the owner can view; poll to refresh."""
    event = lifecycle.get(sos_id)
    if event.owner_id != user_id:
        raise AuthorizationError("Only the owner of this SOS can view its responders")
    return AcceptedResponsesView(
        sos_id=event.id,
        status=event.status,
        responses=aggregator.list_accepted(sos_id),
        poll_interval_seconds=settings.response_poll_seconds,
    )
