"""Dispatch router tests: who gets alerted, and what volunteers see when polling."""

from rapid_responder.models import SosCategory
from rapid_responder.services.dispatch_service import DispatchRouter
from rapid_responder.services.sos_service import EventLifecycleManager

OWNER = "owner-1"
EVENT_LAT, EVENT_LON = 12.9716, 77.5946
# Roughly 111.2 km per degree of latitude
NEAR_LAT = EVENT_LAT + 0.0045  # ~500 m north
FAR_LAT = EVENT_LAT + 0.045  # ~5 km north


def _event(store, category="Fire"):
    """Create an event without dispatching it."""
    return EventLifecycleManager(store).create(OWNER, category, EVENT_LAT, EVENT_LON)


def test_in_range_volunteer_included_out_of_range_excluded(store, registry, dispatcher):
    registry.register("near", max_range_meters=2000, latitude=NEAR_LAT, longitude=EVENT_LON)
    registry.register("far", max_range_meters=1000, latitude=FAR_LAT, longitude=EVENT_LON)
    event = _event(store)

    alerts = dispatcher.eligible_volunteers(event)

    assert [a.volunteer_id for a in alerts] == ["near"]
    near = alerts[0]
    assert near.category == "Fire"
    assert 450 < near.distance_m < 550
    assert near.hint == "Fire emergency 500 m away needs your help"


def test_unknown_position_is_included(store, registry, dispatcher):
    registry.register("nowhere", max_range_meters=100)
    event = _event(store)

    alerts = dispatcher.eligible_volunteers(event)

    assert [a.volunteer_id for a in alerts] == ["nowhere"]
    assert alerts[0].distance_m is None
    assert alerts[0].hint == "Fire emergency near 12.9716, 77.5946 needs your help"


def test_owner_and_unavailable_volunteers_excluded(store, registry, dispatcher):
    registry.register(OWNER)
    registry.register("gone")
    registry.unregister("gone")
    registry.register("here")
    event = _event(store)

    assert [a.volunteer_id for a in dispatcher.eligible_volunteers(event)] == ["here"]


def test_dispatch_pushes_only_to_live_volunteers(store, registry, dispatcher, notifier):
    registry.register("live")
    registry.register("offline")
    notifier.live.add("live")
    event = _event(store, category=SosCategory.Health)

    result = dispatcher.dispatch(event)

    assert result.alerted_ids == ["live", "offline"]
    assert result.pushed == ["live"]
    assert result.failed == []
    [(name, data)] = notifier.events_for("live")
    assert name == "sos.created"
    assert data["id"] == event.id
    assert data["category"] == "Health"
    assert data["status"] == "active"


def test_delivery_failure_is_isolated(store, registry, dispatcher, notifier):
    for uid in ("a", "b", "c"):
        registry.register(uid)
    notifier.live.update({"a", "c"})
    notifier.failing.add("b")
    event = _event(store)

    result = dispatcher.dispatch(event)

    assert result.pushed == ["a", "c"]
    assert result.failed == ["b"]


def test_create_dispatches_through_lifecycle(lifecycle, registry, notifier):
    registry.register("vol")
    notifier.live.add("vol")
    notifier.failing.add("broken")
    registry.register("broken")

    event = lifecycle.create(OWNER, "Threat", EVENT_LAT, EVENT_LON)

    assert [name for name, _ in notifier.events_for("vol")] == ["sos.created"]
    assert event.status.value == "active"


def test_offline_volunteer_sees_event_on_poll(store, registry, dispatcher):
    """Push is best-effort; polling always shows the event."""
    registry.register("offline")
    event = _event(store)
    dispatcher.dispatch(event)

    assert [e.id for e in dispatcher.visible_events("offline")] == [event.id]


def test_visible_events_most_recent_first_and_only_active(store, lifecycle, dispatcher):
    first = lifecycle.create(OWNER, "Health", 1.0, 1.0)
    second = lifecycle.create("owner-2", "Fire", 1.0, 1.0)
    third = lifecycle.create("owner-3", "Other", 1.0, 1.0)
    lifecycle.cancel(second.id, "owner-2")

    visible = dispatcher.visible_events("vol")
    assert [e.id for e in visible] == [third.id, first.id]
    assert [e.id for e in dispatcher.list_active()] == [third.id, first.id]


def test_declined_event_hidden_from_that_volunteer_only(lifecycle, aggregator, dispatcher):
    event = lifecycle.create(OWNER, "Health", 1.0, 1.0)
    aggregator.respond(event.id, "vol-a", "declined")

    assert dispatcher.visible_events("vol-a") == []
    assert [e.id for e in dispatcher.visible_events("vol-b")] == [event.id]


def test_accept_after_decline_makes_event_visible_again(lifecycle, aggregator, dispatcher):
    event = lifecycle.create(OWNER, "Health", 1.0, 1.0)
    aggregator.respond(event.id, "vol-a", "declined")
    aggregator.respond(event.id, "vol-a", "accepted")

    assert [e.id for e in dispatcher.visible_events("vol-a")] == [event.id]


def test_new_volunteer_gets_snapshot(lifecycle, registry, dispatcher, notifier):
    event = lifecycle.create(OWNER, "Fire", 1.0, 1.0)
    registry.register("newbie")
    notifier.live.add("newbie")

    events = dispatcher.on_volunteer_registered("newbie")

    assert [e.id for e in events] == [event.id]
    [(name, data)] = notifier.events_for("newbie")
    assert name == "sos.snapshot"
    assert [e["id"] for e in data] == [event.id]


def test_dispatch_without_notifier(store, registry):
    registry.register("vol")
    router = DispatchRouter(store, registry)
    result = router.dispatch(_event(store))

    assert result.alerted_ids == ["vol"]
    assert result.pushed == []
