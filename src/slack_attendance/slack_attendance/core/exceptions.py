class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an attendance log (or other record) does not exist."""


class BindingNotFoundError(NotFoundError):
    """Raised when no workplace is bound to a team/channel/user triple."""


class ConflictError(DomainError):
    """Raised when a request conflicts with the current stored state."""


class AlreadySubscribedError(ConflictError):
    pass


class TransitionError(ConflictError):
    """Illegal start/end transition for a workplace."""


class AlreadyStartedError(TransitionError):
    pass


class AlreadyEndedError(TransitionError):
    pass


class NoPriorStartError(TransitionError):
    pass


class ConcurrentTransitionError(TransitionError):
    """Another request changed the workplace status between read and write."""


class TimestampParseError(DomainError):
    """Raised when a stored timestamp cannot be parsed."""


class PersistenceError(Exception):
    """Raised by the storage layer when the database operation fails."""
