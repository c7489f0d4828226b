"""Aggregate all API routers."""

from fastapi import APIRouter
from screenclip.api.health import router as health_router
from screenclip.api.clips import router as clips_router
from screenclip.api.notify import router as notify_router, functions_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(clips_router, tags=["clips"])
api_router.include_router(notify_router, tags=["notify"])

# Mirrors the Supabase edge-function path the original processing hook lived at
api_router.include_router(functions_router, tags=["functions"])
