"""SOS policy constants."""

from __future__ import annotations

# Mean Earth radius used by the distance estimator, in meters
EARTH_RADIUS_M = 6_371_000.0

# Default page size for an owner's SOS history
HISTORY_LIMIT = 50

# Push event names sent over the WebSocket channel
EVENT_SOS_CREATED = "sos.created"
EVENT_SOS_CLOSED = "sos.closed"
EVENT_SOS_SNAPSHOT = "sos.snapshot"
EVENT_SOS_RESPONSE = "sos.response"
