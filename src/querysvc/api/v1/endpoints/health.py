"""Health check endpoints — Kubernetes liveness and readiness probes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from querysvc.api.deps import get_service
from querysvc.core.service import QueryService
from querysvc.models.response import ErrorResponse

router = APIRouter(tags=["health"])


@router.get(
    "/livez",
    response_class=PlainTextResponse,
    summary="Liveness Probe",
    description="Returns `OK` while the process is serving HTTP. Never touches the backends.",
)
async def livez(service: QueryService = Depends(get_service)) -> str:
    await service.livez()
    return "OK\n"


@router.get(
    "/readyz",
    response_class=PlainTextResponse,
    summary="Readiness Probe",
    description="Returns `OK` when the resource searcher, access checker and organization searcher are all ready.",
    responses={503: {"model": ErrorResponse, "description": "A backend is not ready"}},
)
async def readyz(service: QueryService = Depends(get_service)) -> str:
    await service.readyz()
    return "OK\n"
