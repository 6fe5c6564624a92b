"""Error taxonomy — the closed set of error kinds raised inside querysvc.

Every failure that leaves a component is a ``QueryError`` tagged with one
``ErrorKind``. The API boundary classifies errors by that tag alone (see
``querysvc.core.classifier``), so message wording never changes routing.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Structural kind tag of a ``QueryError``."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNEXPECTED = "unexpected"


class QueryError(Exception):
    """An error tagged with a taxonomy kind.

    Args:
        kind: The error kind used for classification.
        message: Human-readable message.
        cause: Optional wrapped error; its text is appended as ``": cause"``.
    """

    def __init__(self, kind: ErrorKind, message: str, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    def __repr__(self) -> str:
        return f"QueryError(kind={self.kind.value!r}, message={str(self)!r})"


def validation(message: str, cause: BaseException | None = None) -> QueryError:
    """Build a VALIDATION error (bad client input)."""
    return QueryError(ErrorKind.VALIDATION, message, cause)


def not_found(message: str, cause: BaseException | None = None) -> QueryError:
    """Build a NOT_FOUND error (missing entity)."""
    return QueryError(ErrorKind.NOT_FOUND, message, cause)


def service_unavailable(message: str, cause: BaseException | None = None) -> QueryError:
    """Build a SERVICE_UNAVAILABLE error (transient downstream failure)."""
    return QueryError(ErrorKind.SERVICE_UNAVAILABLE, message, cause)


def unexpected(message: str, cause: BaseException | None = None) -> QueryError:
    """Build an UNEXPECTED error (internal fault)."""
    return QueryError(ErrorKind.UNEXPECTED, message, cause)


def wrap(message: str, err: BaseException) -> QueryError:
    """Wrap ``err`` with a context message, keeping its kind when it has one.

    A ``QueryError`` keeps its tag so that classification downstream still
    sees the original kind; any other exception becomes UNEXPECTED.
    """
    if isinstance(err, QueryError):
        return QueryError(err.kind, message, err)
    return unexpected(message, err)
