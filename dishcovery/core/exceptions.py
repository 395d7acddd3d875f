"""Store error taxonomy shared by the gateway, the feed services and the API."""


class StoreError(Exception):
    """Base class for every failure surfaced by the row store gateway."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class StoreUnavailable(StoreError):
    """Store unreachable or timed out. Safe to retry with backoff."""

    status_code = 503


class InvalidQuery(StoreError):
    """Caller error: bad page number, unknown column, malformed filter. Not retried."""

    status_code = 400


class NotFound(StoreError):
    """Referenced entity is absent."""

    status_code = 404


class SocialStateDegraded(Warning):
    """Like/save annotation could not be resolved; posts render as not liked/saved."""
