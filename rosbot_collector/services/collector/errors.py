from __future__ import annotations

from typing import Optional


class CollectorError(Exception):
    """Base class for every error raised by the collector."""


class ConfigurationError(CollectorError):
    """Required settings (usually the credentials) are missing."""


class BadCredentials(CollectorError):
    def __init__(self, message: str = "provided user credentials are invalid") -> None:
        super().__init__(message)


class MissingLoginToken(CollectorError):
    def __init__(self, message: str = "could not parse 'form_build_id' from the login page") -> None:
        super().__init__(message)


class MissingActivityEndpoint(CollectorError):
    def __init__(self, message: str = "could not parse the bot activity endpoint from the landing page") -> None:
        super().__init__(message)


class SessionRefreshFailure(CollectorError):
    """Re-authentication after an expired feed request did not succeed.

    The underlying error is available as ``__cause__``.
    """

    def __init__(self, message: str = "error refreshing session cookies") -> None:
        super().__init__(message)


class ActivityFetchError(CollectorError):
    def __init__(self, status_code: int, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"bot activity request failed with HTTP {status_code}")


class ParseCancelled(CollectorError):
    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout
        msg = "parsing was cancelled"
        if timeout is not None:
            msg = f"parsing did not finish within {timeout}s"
        super().__init__(msg)
