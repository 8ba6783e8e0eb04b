"""MongoDB query and command exceptions."""

from __future__ import annotations


class MongoPersistenceError(Exception):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoCommandError(MongoPersistenceError):
    """Raised when the server (or the driver) rejects a command.

    Carries the server error ``code`` when one was reported, so callers can
    tell e.g. "namespace not found" (26) apart from real failures.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class MongoQueryError(MongoPersistenceError):
    """Raised when a query or command document cannot be composed."""


class MalformedConditionError(MongoQueryError):
    """Raised when a condition has the wrong shape or operand count."""


class UnsupportedOperatorError(MongoQueryError):
    """Raised for an operator that is neither an alias nor a ``$`` operator."""

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Unsupported operator '{operator}'")


class MalformedIndexSpecError(MongoQueryError):
    """Raised when an index specification cannot be normalized."""
