"""API v1 router aggregation."""
from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.endpoints import audits, health

router = APIRouter()

router.include_router(audits.router)
router.include_router(health.router)
