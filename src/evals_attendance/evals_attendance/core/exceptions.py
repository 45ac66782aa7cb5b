class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidIdentifier(ValidationError):
    """Raised when an attendee identifier cannot be classified."""


class NotFoundError(DomainError):
    """Raised when the addressed event does not exist."""


class AuthenticationError(DomainError):
    """Raised when the request carries no authenticated user."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StoreError(DomainError):
    """Raised when a statement fails (constraint violation, lost connection)."""


class TransactionError(StoreError):
    """Raised when a connection or transaction cannot be acquired."""


class CommitError(StoreError):
    """Raised when the final commit fails; nothing was persisted."""
