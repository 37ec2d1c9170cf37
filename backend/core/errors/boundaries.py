"""Error Boundary Mappers

Maps exceptions raised below a module boundary (SQLAlchemy, parsing,
arbitrary row-building code) to a single AppError type at the boundary.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.exc import (
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)

from .types import (
    AppError,
    ErrorCode,
    ErrorContext,
)
from .builders import (
    db_connection_failed,
    duplicate_key,
    foreign_key_violation,
    internal_error,
    not_null_violation,
    transaction_failed,
)


class ErrorMapper(ABC):
    """Abstract base for error mappers at module boundaries."""

    origin: str

    @abstractmethod
    def map_exception(self, exc: Exception) -> AppError:
        """Map an exception to the boundary error."""


class DatabaseErrorMapper(ErrorMapper):
    """Maps SQLAlchemy exceptions to database error codes."""

    def __init__(self, origin: str = "database"):
        self.origin = origin

    def map_exception(self, exc: Exception) -> AppError:
        if isinstance(exc, IntegrityError):
            return self._map_integrity_error(exc)
        if isinstance(exc, OperationalError):
            return self._map_operational_error(exc)
        if isinstance(exc, SQLAlchemyError):
            return transaction_failed(str(exc), origin=self.origin, cause=exc).error

        return internal_error(
            f"Database error: {exc}",
            origin=self.origin,
            cause=exc,
        ).error

    def _map_integrity_error(self, exc: IntegrityError) -> AppError:
        """Map integrity constraint violations."""
        message = str(exc.orig) if exc.orig else str(exc)
        lowered = message.lower()

        if "duplicate key" in lowered or "unique constraint" in lowered:
            return duplicate_key(message, origin=self.origin, cause=exc).error

        if "foreign key" in lowered:
            return foreign_key_violation(message, origin=self.origin, cause=exc).error

        if "not null" in lowered or "not-null" in lowered:
            return not_null_violation(message, origin=self.origin, cause=exc).error

        return AppError(
            code=ErrorCode.E4013_CONSTRAINT_VIOLATION,
            message=f"Constraint violation: {message}",
            context=ErrorContext(origin=self.origin),
            cause=exc,
        )

    def _map_operational_error(self, exc: OperationalError) -> AppError:
        """Map operational/connection errors."""
        message = str(exc.orig) if exc.orig else str(exc)

        if "connection" in message.lower() or "connect" in message.lower():
            return db_connection_failed(message, origin=self.origin, cause=exc).error

        return transaction_failed(message, origin=self.origin, cause=exc).error


class MigrationErrorMapper(ErrorMapper):
    """Maps any exception raised while migrating one entity.

    Database exceptions are delegated to DatabaseErrorMapper; anything else
    is an unexpected error in row-building code.
    """

    def __init__(self, origin: str = "migration"):
        self.origin = origin
        self._db = DatabaseErrorMapper(origin)

    def map_exception(self, exc: Exception) -> AppError:
        if isinstance(exc, SQLAlchemyError):
            return self._db.map_exception(exc)
        return internal_error(
            str(exc) or exc.__class__.__name__,
            code=ErrorCode.E9001_UNEXPECTED_ERROR,
            origin=self.origin,
            cause=exc,
            exception_type=exc.__class__.__name__,
        ).error
