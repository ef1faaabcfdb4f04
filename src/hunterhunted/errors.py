"""Error taxonomy shared by the relay and the client."""

from __future__ import annotations

from enum import StrEnum


class HunterHuntedError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(HunterHuntedError):
    """Malformed or out-of-range input to the relay. Nothing was mutated."""

    status_code = 400


class RateLimitError(HunterHuntedError):
    """Too many requests from one source in the current window."""

    status_code = 429

    def __init__(self, message: str = 'Rate limit exceeded. Please try again later.'):
        super().__init__(message)


class NetworkError(HunterHuntedError):
    """The relay was unreachable or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SessionError(HunterHuntedError):
    """An invalid local session transition was requested."""


class ProviderErrorKind(StrEnum):
    permission_denied = 'permission_denied'
    position_unavailable = 'position_unavailable'
    timeout = 'timeout'
    unsupported = 'unsupported'


_PROVIDER_MESSAGES = {
    ProviderErrorKind.permission_denied: 'Location permission denied',
    ProviderErrorKind.position_unavailable: 'Location unavailable',
    ProviderErrorKind.timeout: 'Location request timeout',
    ProviderErrorKind.unsupported: 'Geolocation not supported',
}


class ProviderError(HunterHuntedError):
    """The geolocation provider failed to deliver a fix."""

    def __init__(self, kind: ProviderErrorKind, message: str | None = None):
        self.kind = kind
        super().__init__(message or _PROVIDER_MESSAGES.get(kind, 'GPS error'))
