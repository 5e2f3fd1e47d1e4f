"""Exception hierarchy for hamqadam."""

from __future__ import annotations

from enum import Enum


class HamqadamError(Exception):
    """Base exception for all hamqadam errors."""


class DecodeError(HamqadamError, ValueError):
    """An encoded polyline is malformed (truncated group, bad character, invalid point)."""

    def __init__(self, detail: str, position: int | None = None):
        self.detail = detail
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        super().__init__(f"Malformed polyline{where}: {detail}")


class RouteErrorReason(str, Enum):
    """Why a route could not be acquired; also the key of the user-facing message."""

    TRANSPORT = "transport"
    NO_ROUTE_FOUND = "no_route_found"
    PROVIDER_ERROR = "provider_error"
    MALFORMED_RESPONSE = "malformed_response"
    MISSING_CREDENTIAL = "missing_credential"


class RouteError(HamqadamError):
    """A route fetch failed. The selection episode must be restarted."""

    reason: RouteErrorReason = RouteErrorReason.PROVIDER_ERROR

    def __init__(self, message: str, *, provider: str | None = None):
        self.provider = provider
        super().__init__(message)


class TransportError(RouteError):
    """The directions service could not be reached or answered with a non-2xx status."""

    reason = RouteErrorReason.TRANSPORT

    def __init__(self, message: str, *, provider: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, provider=provider)


class ProviderError(RouteError):
    """The directions service answered but reported no route or an error status."""

    def __init__(
        self,
        reason: RouteErrorReason,
        message: str,
        *,
        provider: str | None = None,
        status: str | None = None,
    ):
        self.reason = reason
        self.status = status
        super().__init__(message, provider=provider)


class ConfigError(RouteError):
    """A required credential or setting is missing."""

    reason = RouteErrorReason.MISSING_CREDENTIAL

    def __init__(self, setting: str, *, provider: str | None = None):
        self.setting = setting
        super().__init__(f"Missing required setting: {setting}", provider=provider)


class InvalidTransition(HamqadamError):
    """An event was applied in a phase whose transition table has no entry for it."""

    def __init__(self, phase: str, event: str):
        self.phase = phase
        self.event = event
        super().__init__(f"No transition for event '{event}' in phase '{phase}'")
