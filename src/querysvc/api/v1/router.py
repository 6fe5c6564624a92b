"""API v1 Router — Query and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from querysvc.api.v1.endpoints.health import router as health_router
from querysvc.api.v1.endpoints.organizations import router as organizations_router
from querysvc.api.v1.endpoints.resources import router as resources_router

router = APIRouter()
router.include_router(resources_router)
router.include_router(organizations_router)
router.include_router(health_router)
