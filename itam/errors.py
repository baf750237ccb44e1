"""
Error kinds raised by the authorization, audit and sequence core.

Services raise these; the API layer maps each kind to one HTTP
status in main.py. Messages must never carry before/after
snapshots, they end up in response bodies.
"""


class ItamError(Exception):
    """Base class for every domain error."""

    kind = "error"


class Unauthenticated(ItamError):
    """No valid identity was presented."""

    kind = "unauthenticated"


class Forbidden(ItamError):
    """Valid identity, but the role or module grant does not allow the action."""

    kind = "forbidden"


class ValidationError(ItamError):
    kind = "validation_error"


class NotFound(ItamError):
    kind = "not_found"


class ConflictError(ItamError):
    """A unique key (module key, document number, ...) is already taken."""

    kind = "conflict"


class StorageFailure(ItamError):
    """The underlying database could not complete the operation."""

    kind = "storage_failure"


class ImmutableRecordError(ItamError):
    """Raised on any attempt to update or delete an append-only record."""

    kind = "immutable_record"
