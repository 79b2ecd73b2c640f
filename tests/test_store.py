"""Event store tests: write atomicity and outage mapping."""

import pytest
from sqlalchemy.exc import OperationalError

from rapid_responder.core.errors import StoreUnavailableError
from rapid_responder.models import SosEvent, Volunteer


def _lost_connection(*args, **kwargs):
    raise OperationalError("statement", {}, Exception("connection lost"))


def test_delete_removes_record(store, lifecycle):
    event = lifecycle.create("owner-1", "Other", 1.0, 1.0)

    assert store.delete(SosEvent, event.id) is True
    assert store.get(SosEvent, event.id) is None


def test_delete_missing_record(store):
    assert store.delete(SosEvent, 999) is False


def test_delete_failure_keeps_record(store, db, registry, monkeypatch):
    volunteer = registry.register("u1")

    monkeypatch.setattr(db, "commit", _lost_connection)
    with pytest.raises(StoreUnavailableError):
        store.delete(Volunteer, volunteer.id)
    monkeypatch.undo()

    assert store.get(Volunteer, volunteer.id) is not None


def test_update_reload_failure_leaves_row_unchanged(store, db, registry, monkeypatch):
    registry.register("u1", latitude=10.0, longitude=20.0)

    monkeypatch.setattr(db, "refresh", _lost_connection)
    with pytest.raises(StoreUnavailableError):
        registry.update_location("u1", 11.0, 21.0)
    monkeypatch.undo()

    volunteer = registry.get("u1")
    assert (volunteer.latitude, volunteer.longitude) == (10.0, 20.0)


def test_update_where_reports_unmatched_guard(store, lifecycle):
    event = lifecycle.create("owner-1", "Health", 1.0, 1.0)

    matched = store.update_where(
        SosEvent,
        (SosEvent.id == event.id, SosEvent.owner_id == "someone-else"),
        {"description": "changed"},
    )

    assert matched == 0
    assert store.get(SosEvent, event.id).description is None
