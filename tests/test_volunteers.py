"""Volunteer registry tests."""

import pytest

from rapid_responder.core.config import settings
from rapid_responder.core.errors import NotFoundError, ValidationError


def test_register_defaults(registry):
    volunteer = registry.register("u1")
    assert volunteer.is_available is True
    assert volunteer.max_range_meters == settings.default_max_range_meters
    assert volunteer.has_position is False
    assert registry.is_volunteer("u1")


def test_register_is_idempotent_and_updates_range(registry):
    first = registry.register("u1", max_range_meters=500)
    second = registry.register("u1", max_range_meters=3000)

    assert second.id == first.id
    assert second.max_range_meters == 3000
    assert [v.user_id for v in registry.list_available()] == ["u1"]


def test_reregister_keeps_known_position(registry):
    registry.register("u1", latitude=10.0, longitude=20.0)
    volunteer = registry.register("u1", max_range_meters=2000)
    assert (volunteer.latitude, volunteer.longitude) == (10.0, 20.0)


def test_unregister_and_reactivate(registry):
    registry.register("u1", max_range_meters=750)
    registry.unregister("u1")

    assert not registry.is_volunteer("u1")
    assert registry.list_available() == []

    volunteer = registry.register("u1", max_range_meters=750)
    assert volunteer.is_available is True
    assert registry.is_volunteer("u1")


def test_unregister_unknown(registry):
    with pytest.raises(NotFoundError):
        registry.unregister("ghost")
    assert not registry.is_volunteer("ghost")


@pytest.mark.parametrize("bad_range", [0, -10])
def test_register_rejects_non_positive_range(registry, bad_range):
    with pytest.raises(ValidationError):
        registry.register("u1", max_range_meters=bad_range)


def test_register_rejects_half_position(registry):
    with pytest.raises(ValidationError):
        registry.register("u1", latitude=10.0)


def test_update_location(registry):
    registry.register("u1")
    volunteer = registry.update_location("u1", 40.7128, -74.006)
    assert volunteer.has_position
    assert volunteer.latitude == 40.7128

    with pytest.raises(NotFoundError):
        registry.update_location("ghost", 0.0, 0.0)
