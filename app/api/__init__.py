"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import entities

router = APIRouter()

# Entity intelligence tool surface
router.include_router(entities.router, tags=["entities"])
