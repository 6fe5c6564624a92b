"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

import structlog
from fastapi import Depends, Header

from querysvc import errors
from querysvc.core.service import QueryService

# Global service instance (set during application lifespan)
_service: QueryService | None = None


def set_service(service: QueryService | None) -> None:
    """Set the global service instance (called during app lifespan)."""
    global _service
    _service = service


def get_service() -> QueryService:
    """Get the global query service instance.

    Raises:
        RuntimeError: If the service is not initialized.
    """
    if _service is None:
        raise RuntimeError("Query service not initialized. Is the server running?")
    return _service


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise errors.validation("missing required header 'Authorization'")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer":
        token = token.strip()
    else:
        token = authorization.strip()
    if not token:
        raise errors.validation("missing bearer token")
    return token


async def get_principal(
    authorization: str | None = Header(default=None, description="JWT token issued by Heimdall"),
    service: QueryService = Depends(get_service),
) -> str:
    """Resolve the caller's principal from the ``Authorization`` header.

    The principal is bound into the structlog context for the rest of the
    request.
    """
    principal = await service.authenticate(_bearer_token(authorization))
    structlog.contextvars.bind_contextvars(principal=principal)
    return principal
