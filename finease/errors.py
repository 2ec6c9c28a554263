"""
Error Taxonomy

Domain errors raised by the store, the services and the auth layer.
The API layer renders each one as a JSON response with its status code.
"""


class FinEaseError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(FinEaseError):
    """Missing or invalid bearer credential."""

    status_code = 401
    default_message = "unauthorized access"


class Forbidden(FinEaseError):
    """Caller identity does not own the requested record(s)."""

    status_code = 403
    default_message = "forbidden access"


class NotFound(FinEaseError):
    """Record absent from the store."""

    status_code = 404
    default_message = "Transaction not found"


class InvalidTransaction(FinEaseError):
    """Payload rejected by the service layer."""

    status_code = 400
    default_message = "Invalid transaction"


class InternalError(FinEaseError):
    """Failure of a backing service. Message is kept generic."""


class StoreUnavailable(InternalError):
    """Record store read/write or aggregation failed."""

    default_message = "Record store unavailable"


class IdentityProviderUnavailable(InternalError):
    """Identity provider could not be reached to verify a token."""

    default_message = "Identity provider unavailable"
