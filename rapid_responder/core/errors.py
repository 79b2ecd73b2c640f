"""Error kinds raised by the SOS services."""

from __future__ import annotations


class SosError(Exception):
    """Base class for lifecycle, dispatch and response failures."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(SosError):
    """Malformed input to create/respond/register."""

    status_code = 422


class NotFoundError(SosError):
    """Referenced event or volunteer does not exist."""

    status_code = 404


class InvalidTransitionError(SosError):
    """State machine rule violated (e.g. acting on a closed event)."""

    status_code = 409


class AuthorizationError(SosError):
    """Actor lacks rights for the mutation."""

    status_code = 403


class StoreUnavailableError(SosError):
    """Event store timed out or is unreachable."""

    status_code = 503


class DeliveryError(SosError):
    """Push delivery to one recipient failed. Never propagated to callers of create."""

    def __init__(self, user_id: str, detail: str) -> None:
        super().__init__(detail)
        self.user_id = user_id
