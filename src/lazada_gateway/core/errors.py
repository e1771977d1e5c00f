"""
Gateway error taxonomy.

Each error knows the HTTP status it is surfaced with and the JSON body sent to
the caller, so routers only need a single exception handler.
"""

from typing import Any, Optional

GENERIC_UPSTREAM_MESSAGE = "Error when calling Lazada API"


class GatewayError(Exception):
    """Base class for errors surfaced to gateway callers."""

    status_code = 500

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.body = body

    @property
    def detail(self) -> Any:
        """JSON body returned to the caller."""
        if self.body is not None:
            return self.body
        return {"message": self.message}


class MissingParameter(GatewayError):
    """A route's required field was not supplied by the caller."""

    status_code = 400

    def __init__(self, field: str, hint: Optional[str] = None) -> None:
        message = f"Missing {field} ({hint})" if hint else f"Missing {field}"
        super().__init__(message)
        self.field = field


class CredentialUnavailable(GatewayError):
    """No usable credential: never authorized, or the access token expired."""


class AuthorizationExchangeFailed(GatewayError):
    """Lazada rejected the authorization code exchange."""


class UpstreamRequestFailed(GatewayError):
    """A proxied call failed at the network or HTTP level."""

    def __init__(self, body: Any = None, message: str = GENERIC_UPSTREAM_MESSAGE) -> None:
        super().__init__(message, body)


class StoreUnavailable(GatewayError):
    """The credential database could not be read or written."""
