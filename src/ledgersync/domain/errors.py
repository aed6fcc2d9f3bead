"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class MappingError(ValidationError):
    """A source record lacks the fields required to project it."""


class GatewayError(DomainError):
    """A single store operation failed."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


class ListenerSubscriptionError(DomainError):
    """A change feed subscription broke."""


def entry_not_found(entry_id: int) -> str:
    """Return message for missing ledger entry."""
    return f"Ledger entry {entry_id} not found"


def record_not_found(register: str, record_id: str) -> str:
    """Return message for missing source record."""
    return f"{register} record '{record_id}' not found"


def missing_fields(record_id: str, fields: list[str]) -> str:
    """Return message for a source record that cannot be projected."""
    return f"Record '{record_id}' is missing required field{'s' if len(fields) != 1 else ''}: {', '.join(fields)}"


def duplicate_signature(existing_id: int) -> str:
    """Return message when a candidate duplicates an existing entry."""
    return f"Entry duplicates existing ledger entry {existing_id}"


def duplicate_origin(origin: str, origin_id: str) -> str:
    """Return message for a second entry mapped to the same source record."""
    return f"A ledger entry already exists for {origin} record '{origin_id}'"


def not_manual_entry(entry_id: int, origin: str) -> str:
    """Return message when a synced entry is edited through the manual path."""
    return (
        f"Ledger entry {entry_id} is owned by the {origin} register. "
        "Change the source record instead."
    )
