"""Volunteer response aggregation."""

from __future__ import annotations

import logging

from rapid_responder.core.errors import InvalidTransitionError, NotFoundError, SosError, ValidationError
from rapid_responder.db.store import EventStore
from rapid_responder.models.sos_event import SosEvent, SosStatus
from rapid_responder.models.volunteer_response import ResponseDecision, VolunteerResponse
from rapid_responder.services.dispatch_service import DispatchRouter

logger = logging.getLogger(__name__)


def _parse_decision(decision: ResponseDecision | str) -> ResponseDecision:
    try:
        return ResponseDecision(decision)
    except ValueError:
        raise ValidationError(f"Unknown decision {decision!r}; expected accepted or declined") from None


class ResponseAggregator:
    """Records volunteer decisions and builds the owner's responder list.

    Responses are append-only. Duplicate accepts are not deduplicated on
    write; the list below keeps only the latest response per volunteer.
    """

    def __init__(self, store: EventStore, dispatcher: DispatchRouter | None = None) -> None:
        self._store = store
        self._dispatcher = dispatcher

    def _get_event(self, event_id: int) -> SosEvent:
        event = self._store.get(SosEvent, event_id)
        if event is None:
            raise NotFoundError("SOS not found")
        return event

    def respond(
        self,
        event_id: int,
        volunteer_id: str,
        decision: ResponseDecision | str,
        estimated_arrival: str | None = None,
        message: str | None = None,
    ) -> VolunteerResponse:
        parsed = _parse_decision(decision)
        event = self._get_event(event_id)
        if event.status != SosStatus.active:
            raise InvalidTransitionError(f"SOS is already {event.status.value}")

        response = self._store.insert(
            VolunteerResponse(
                sos_event_id=event_id,
                volunteer_id=volunteer_id,
                decision=parsed,
                estimated_arrival=estimated_arrival,
                message=message,
            )
        )
        logger.info("SOS %s: volunteer=%s %s", event_id, volunteer_id, parsed.value)

        if parsed == ResponseDecision.accepted and self._dispatcher is not None:
            try:
                self._dispatcher.announce_response(event, response)
            except SosError as exc:
                logger.warning("Response push for SOS %s failed: %s", event_id, exc.detail)
        return response

    def list_accepted(self, event_id: int) -> list[VolunteerResponse]:
        """Volunteers currently responding to an event, most recent first.

        Last write wins per volunteer, so a volunteer who accepted twice shows
        once and one whose latest word is a decline does not show at all.
        """
        self._get_event(event_id)
        rows = self._store.query(
            VolunteerResponse,
            VolunteerResponse.sos_event_id == event_id,
            order_by=(VolunteerResponse.created_at.desc(), VolunteerResponse.id.desc()),
        )
        seen: set[str] = set()
        accepted: list[VolunteerResponse] = []
        for row in rows:
            if row.volunteer_id in seen:
                continue
            seen.add(row.volunteer_id)
            if row.decision == ResponseDecision.accepted:
                accepted.append(row)
        return accepted
