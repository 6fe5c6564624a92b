"""Error Classifier — Maps internal errors to client-facing categories.

Classification rules (by ``ErrorKind`` tag only, never by message text):
  VALIDATION          → BadRequest          (400)
  NOT_FOUND           → NotFound            (404)
  SERVICE_UNAVAILABLE → ServiceUnavailable  (503)
  UNEXPECTED          → InternalServerError (500)
  anything else       → InternalServerError (500)

The message is carried verbatim, including any wrapped cause suffix. A
missing error classifies as InternalServerError with "unknown error".
"""

from __future__ import annotations

from enum import Enum

import structlog
from pydantic import BaseModel, Field

from querysvc.errors import ErrorKind, QueryError

logger = structlog.get_logger(__name__)


class ErrorCategory(str, Enum):
    """Client-visible error category."""

    BAD_REQUEST = "BadRequest"
    NOT_FOUND = "NotFound"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    INTERNAL_SERVER_ERROR = "InternalServerError"


_CATEGORY_BY_KIND: dict[ErrorKind, tuple[ErrorCategory, int]] = {
    ErrorKind.VALIDATION: (ErrorCategory.BAD_REQUEST, 400),
    ErrorKind.NOT_FOUND: (ErrorCategory.NOT_FOUND, 404),
    ErrorKind.SERVICE_UNAVAILABLE: (ErrorCategory.SERVICE_UNAVAILABLE, 503),
    ErrorKind.UNEXPECTED: (ErrorCategory.INTERNAL_SERVER_ERROR, 500),
}


class ClassifiedError(BaseModel):
    """An error ready to be sent to the client."""

    category: ErrorCategory = Field(description="Client error category")
    message: str = Field(description="Error message, verbatim")
    status_code: int = Field(description="HTTP status code for the category")


def classify_error(err: BaseException | None) -> ClassifiedError:
    """Classify ``err`` and log it once.

    Args:
        err: The error that reached the boundary, or ``None``.

    Returns:
        The classified error.
    """
    if err is None:
        logger.error("unknown error")
        return ClassifiedError(
            category=ErrorCategory.INTERNAL_SERVER_ERROR,
            message="unknown error",
            status_code=500,
        )

    message = str(err)
    kind = err.kind if isinstance(err, QueryError) else None
    category, status_code = _CATEGORY_BY_KIND.get(kind, (ErrorCategory.INTERNAL_SERVER_ERROR, 500))

    if status_code >= 500:
        logger.error("request failed", error=message, category=category.value, exc_info=err)
    else:
        logger.warning("request rejected", error=message, category=category.value)

    return ClassifiedError(category=category, message=message, status_code=status_code)
