"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from taskboard.backend.api.v1.endpoints import groups, history, notes

router = APIRouter()

router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(groups.router, prefix="/groups", tags=["groups"])
router.include_router(history.router, prefix="/history", tags=["history"])
