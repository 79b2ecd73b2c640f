"""Dispatch/notification router.

Two independent producers feed what a volunteer sees: ``dispatch`` pushes an
alert to live volunteers the moment an event is created, and
``visible_events`` is the pull query every volunteer polls. Push is only a
latency optimisation; an event is always reachable through the pull path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from rapid_responder.core.errors import DeliveryError
from rapid_responder.core.sos_policies import (
    EVENT_SOS_CLOSED,
    EVENT_SOS_CREATED,
    EVENT_SOS_RESPONSE,
    EVENT_SOS_SNAPSHOT,
)
from rapid_responder.db.store import EventStore
from rapid_responder.models.sos_event import SosEvent, SosStatus
from rapid_responder.models.volunteer import Volunteer
from rapid_responder.models.volunteer_response import ResponseDecision, VolunteerResponse
from rapid_responder.schemas.sos import SosEventResponse, VolunteerResponseOut
from rapid_responder.services.geo_service import format_coordinates, format_distance, haversine_m
from rapid_responder.services.volunteer_registry import VolunteerRegistry

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def push(self, user_id: str, event: str, data: Any) -> bool: ...


@dataclass
class Alert:
    """One volunteer selected for an SOS event."""

    volunteer_id: str
    category: str
    distance_m: float | None  # None if the volunteer's position is unknown
    hint: str


@dataclass
class DispatchResult:
    event_id: int
    alerts: list[Alert] = field(default_factory=list)
    pushed: list[str] = field(default_factory=list)  # volunteers with a live connection
    failed: list[str] = field(default_factory=list)

    @property
    def alerted_ids(self) -> list[str]:
        return [a.volunteer_id for a in self.alerts]


def event_payload(event: SosEvent) -> dict:
    return SosEventResponse.model_validate(event).model_dump(mode="json")


def _location_hint(event: SosEvent) -> str:
    return event.address or format_coordinates(event.latitude, event.longitude)


class DispatchRouter:
    def __init__(
        self,
        store: EventStore,
        registry: VolunteerRegistry,
        notifier: Notifier | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._notifier = notifier

    # ---------- matching ----------

    def _alert_for(self, event: SosEvent, volunteer: Volunteer) -> Alert | None:
        category = event.category.value
        if not volunteer.has_position:
            # Position unknown: include rather than risk under-notifying
            return Alert(
                volunteer_id=volunteer.user_id,
                category=category,
                distance_m=None,
                hint=f"{category} emergency near {_location_hint(event)} needs your help",
            )
        dist = haversine_m(volunteer.latitude, volunteer.longitude, event.latitude, event.longitude)
        if dist > volunteer.max_range_meters:
            return None
        return Alert(
            volunteer_id=volunteer.user_id,
            category=category,
            distance_m=round(dist, 1),
            hint=f"{category} emergency {format_distance(dist)} away needs your help",
        )

    def eligible_volunteers(self, event: SosEvent) -> list[Alert]:
        """Available volunteers in range of the event, excluding its owner."""
        alerts: list[Alert] = []
        for volunteer in self._registry.list_available():
            if volunteer.user_id == event.owner_id:
                continue
            alert = self._alert_for(event, volunteer)
            if alert is not None:
                alerts.append(alert)
        return alerts

    # ---------- push ----------

    def _push(self, user_id: str, name: str, data: Any) -> bool:
        """Push to one user. Returns False if the user has no live channel."""
        if self._notifier is None:
            return False
        try:
            return self._notifier.push(user_id, name, data)
        except DeliveryError:
            raise
        except Exception as exc:
            raise DeliveryError(user_id, f"{name} delivery failed: {exc}") from exc

    def _deliver(self, user_id: str, name: str, data: Any) -> bool:
        """Best-effort push. Failures are logged, never raised."""
        try:
            return self._push(user_id, name, data)
        except DeliveryError as exc:
            logger.warning("Delivery to user=%s failed: %s", exc.user_id, exc.detail)
            return False

    def dispatch(self, event: SosEvent) -> DispatchResult:
        """Alert every eligible volunteer about a newly created event.

        Recipients are independent: one failed push does not stop the rest,
        and nothing is retried.
        """
        result = DispatchResult(event_id=event.id, alerts=self.eligible_volunteers(event))
        payload = event_payload(event)
        for alert in result.alerts:
            data = {**payload, "distance_m": alert.distance_m, "hint": alert.hint}
            try:
                if self._push(alert.volunteer_id, EVENT_SOS_CREATED, data):
                    result.pushed.append(alert.volunteer_id)
            except DeliveryError as exc:
                logger.warning("Delivery to user=%s failed: %s", exc.user_id, exc.detail)
                result.failed.append(alert.volunteer_id)
        logger.info(
            "SOS %s dispatched: %s eligible, %s pushed, %s failed",
            event.id,
            len(result.alerts),
            len(result.pushed),
            len(result.failed),
        )
        return result

    def announce_closed(self, event: SosEvent) -> list[str]:
        """Tell volunteers and responders that an event left the active pool."""
        recipients = {v.user_id for v in self._registry.list_available()}
        responders = self._store.query(VolunteerResponse, VolunteerResponse.sos_event_id == event.id)
        recipients.update(r.volunteer_id for r in responders)
        recipients.discard(event.owner_id)
        data = {"sos_id": event.id, "status": event.status.value}
        return [uid for uid in sorted(recipients) if self._deliver(uid, EVENT_SOS_CLOSED, data)]

    def announce_response(self, event: SosEvent, response: VolunteerResponse) -> bool:
        """Tell the owner a volunteer accepted."""
        data = VolunteerResponseOut.model_validate(response).model_dump(mode="json")
        return self._deliver(event.owner_id, EVENT_SOS_RESPONSE, data)

    # ---------- pull ----------

    def list_active(self) -> list[SosEvent]:
        """All active events, most recent first."""
        return self._store.query(
            SosEvent,
            SosEvent.status == SosStatus.active,
            order_by=(SosEvent.created_at.desc(), SosEvent.id.desc()),
        )

    def declined_event_ids(self, volunteer_id: str) -> set[int]:
        """Events whose latest response from this volunteer is a decline."""
        rows = self._store.query(
            VolunteerResponse,
            VolunteerResponse.volunteer_id == volunteer_id,
            order_by=(VolunteerResponse.id,),
        )
        latest: dict[int, ResponseDecision] = {}
        for row in rows:
            latest[row.sos_event_id] = row.decision
        return {eid for eid, decision in latest.items() if decision == ResponseDecision.declined}

    def visible_events(self, volunteer_id: str) -> list[SosEvent]:
        """Active events a volunteer should see when polling."""
        hidden = self.declined_event_ids(volunteer_id)
        return [e for e in self.list_active() if e.id not in hidden]

    def on_volunteer_registered(self, user_id: str) -> list[SosEvent]:
        """Hand a new volunteer the current active list instead of waiting for a poll."""
        events = self.visible_events(user_id)
        self._deliver(user_id, EVENT_SOS_SNAPSHOT, [event_payload(e) for e in events])
        return events
