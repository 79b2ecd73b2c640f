"""SOS event lifecycle.

States: active (initial), resolved and cancelled (both terminal). Terminal
transitions are applied with a conditional update keyed on the current
status, so when two callers race exactly one succeeds and the other gets
``InvalidTransitionError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from rapid_responder.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    SosError,
    ValidationError,
)
from rapid_responder.core.sos_policies import HISTORY_LIMIT
from rapid_responder.db.store import EventStore
from rapid_responder.models.sos_event import SosCategory, SosEvent, SosStatus
from rapid_responder.services.dispatch_service import DispatchRouter

logger = logging.getLogger(__name__)


def _parse_category(category: SosCategory | str) -> SosCategory:
    try:
        return SosCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in SosCategory)
        raise ValidationError(f"Unknown category {category!r}; expected one of: {allowed}") from None


class EventLifecycleManager:
    def __init__(self, store: EventStore, dispatcher: DispatchRouter | None = None) -> None:
        self._store = store
        self._dispatcher = dispatcher

    def create(
        self,
        owner_id: str,
        category: SosCategory | str,
        latitude: float | None,
        longitude: float | None,
        address: str | None = None,
        description: str | None = None,
    ) -> SosEvent:
        """Create an active SOS event and dispatch it to nearby volunteers.

        Either the event is fully persisted or nothing is. Dispatch runs after
        the commit and can never fail the creation.
        """
        parsed = _parse_category(category)
        if latitude is None or longitude is None:
            raise ValidationError("latitude and longitude are required (send 0, 0 when no fix is available)")

        event = self._store.insert(
            SosEvent(
                owner_id=owner_id,
                category=parsed,
                latitude=latitude,
                longitude=longitude,
                address=address,
                description=description,
                status=SosStatus.active,
            )
        )
        logger.info("SOS %s created: owner=%s category=%s", event.id, owner_id, parsed.value)

        if self._dispatcher is not None:
            try:
                self._dispatcher.dispatch(event)
            except SosError as exc:
                # Event is committed and visible to polling volunteers
                logger.warning("Dispatch for SOS %s failed: %s", event.id, exc.detail)
        return event

    def get(self, event_id: int) -> SosEvent:
        event = self._store.get(SosEvent, event_id)
        if event is None:
            raise NotFoundError("SOS not found")
        return event

    def resolve(self, event_id: int, actor_id: str) -> SosEvent:
        return self._finish(event_id, actor_id, SosStatus.resolved)

    def cancel(self, event_id: int, actor_id: str) -> SosEvent:
        return self._finish(event_id, actor_id, SosStatus.cancelled)

    def _finish(self, event_id: int, actor_id: str, target: SosStatus) -> SosEvent:
        event = self.get(event_id)
        if event.owner_id != actor_id:
            raise AuthorizationError(f"Only the owner of this SOS can mark it {target.value}")
        if event.status != SosStatus.active:
            raise InvalidTransitionError(f"SOS is already {event.status.value}")

        updated = self._store.update_where(
            SosEvent,
            (SosEvent.id == event_id, SosEvent.status == SosStatus.active),
            {"status": target, "resolved_at": datetime.now(timezone.utc)},
        )
        if updated != 1:
            # Lost the race against a concurrent resolve/cancel
            current = self.get(event_id)
            raise InvalidTransitionError(f"SOS is already {current.status.value}")

        event = self.get(event_id)
        logger.info("SOS %s %s by owner=%s", event_id, target.value, actor_id)
        if self._dispatcher is not None:
            try:
                self._dispatcher.announce_closed(event)
            except SosError as exc:
                logger.warning("Close announcement for SOS %s failed: %s", event_id, exc.detail)
        return event

    def current_for_owner(self, owner_id: str) -> SosEvent | None:
        """The owner's most recent active event, if any."""
        return self._store.first(
            SosEvent,
            SosEvent.owner_id == owner_id,
            SosEvent.status == SosStatus.active,
            order_by=(SosEvent.created_at.desc(), SosEvent.id.desc()),
        )

    def history_for_owner(self, owner_id: str, limit: int = HISTORY_LIMIT) -> list[SosEvent]:
        """All of an owner's events, newest first."""
        return self._store.query(
            SosEvent,
            SosEvent.owner_id == owner_id,
            order_by=(SosEvent.created_at.desc(), SosEvent.id.desc()),
            limit=limit,
        )
