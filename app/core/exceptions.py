class KapununganError(Exception):
    """Base class for errors surfaced to the admin user."""
    pass


class ValidationError(KapununganError):
    """Malformed or out-of-range input (e.g. a non-numeric amount)."""
    pass


class NotFoundError(KapununganError):
    """Referenced member, period, entry or batch does not exist."""
    pass


class ConflictError(KapununganError):
    """Operation not allowed in the current state (closed period, second open period, ...)."""
    pass


class PersistenceError(KapununganError):
    """Underlying storage failure. Not retried."""
    pass
