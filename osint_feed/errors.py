"""Exception hierarchy shared by every stage of the pipeline."""

from __future__ import annotations


class OsintFeedError(Exception):
    """Base class for all errors raised by osint_feed."""


class RequestValidationError(OsintFeedError, ValueError):
    """Malformed input: bad shape, unknown source, out-of-range bound."""


class InvalidUrlError(RequestValidationError):
    """URL that cannot be parsed or uses a disallowed scheme or port."""


class ConfigurationError(OsintFeedError):
    """A required credential or setting is missing."""


class FetchError(OsintFeedError):
    """Terminal failure of a single HTTP retrieval."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BlockedHostError(FetchError):
    """Destination is loopback, private, reserved or unresolvable."""


class TooManyRedirectsError(FetchError):
    """Redirect chain exceeded the configured hop limit."""


class ContentTooLargeError(FetchError):
    """Response body exceeded the configured size limit."""


class FetchTimeoutError(FetchError):
    """The request did not complete before its deadline."""


class SourceError(OsintFeedError):
    """A news provider request or response could not be used."""


class GenerationError(OsintFeedError):
    """An LLM generation call failed."""
