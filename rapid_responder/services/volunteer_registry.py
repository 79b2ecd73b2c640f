"""Volunteer registry: who is opted in and how far they will travel."""

from __future__ import annotations

import logging

from rapid_responder.core.config import settings
from rapid_responder.core.errors import NotFoundError, ValidationError
from rapid_responder.db.store import EventStore
from rapid_responder.models.volunteer import Volunteer

logger = logging.getLogger(__name__)


class VolunteerRegistry:
    """Store-backed index of volunteers. Holds no state of its own."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def get(self, user_id: str) -> Volunteer | None:
        return self._store.first(Volunteer, Volunteer.user_id == user_id)

    def register(
        self,
        user_id: str,
        max_range_meters: float | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> Volunteer:
        """Opt a user in. Re-registering updates the existing row instead of duplicating it."""
        if max_range_meters is None:
            max_range_meters = settings.default_max_range_meters
        if max_range_meters <= 0:
            raise ValidationError("max_range_meters must be positive")
        if (latitude is None) != (longitude is None):
            raise ValidationError("latitude and longitude must be given together")

        existing = self.get(user_id)
        if existing is None:
            volunteer = self._store.insert(
                Volunteer(
                    user_id=user_id,
                    is_available=True,
                    max_range_meters=max_range_meters,
                    latitude=latitude,
                    longitude=longitude,
                )
            )
            logger.info("Volunteer registered: user=%s range=%sm", user_id, max_range_meters)
            return volunteer

        patch: dict = {"is_available": True, "max_range_meters": max_range_meters}
        if latitude is not None:
            patch["latitude"] = latitude
            patch["longitude"] = longitude
        logger.info("Volunteer re-registered: user=%s range=%sm", user_id, max_range_meters)
        return self._store.update(existing, patch)

    def unregister(self, user_id: str) -> Volunteer:
        """Opt a user out. The row is kept with availability cleared."""
        volunteer = self.get(user_id)
        if volunteer is None:
            raise NotFoundError("Volunteer not found")
        logger.info("Volunteer unregistered: user=%s", user_id)
        return self._store.update(volunteer, {"is_available": False})

    def update_location(self, user_id: str, latitude: float, longitude: float) -> Volunteer:
        volunteer = self.get(user_id)
        if volunteer is None:
            raise NotFoundError("Volunteer not found")
        return self._store.update(volunteer, {"latitude": latitude, "longitude": longitude})

    def is_volunteer(self, user_id: str) -> bool:
        volunteer = self.get(user_id)
        return volunteer is not None and volunteer.is_available

    def list_available(self) -> list[Volunteer]:
        return self._store.query(
            Volunteer,
            Volunteer.is_available.is_(True),
            order_by=(Volunteer.id,),
        )
