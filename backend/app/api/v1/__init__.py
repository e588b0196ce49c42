"""
API Version 1 Router.

Combines all API endpoints under /api/v1 prefix.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import forum, subs, users

router = APIRouter()

# Include endpoint routers
router.include_router(forum.router, prefix="/forum", tags=["Forum"])
router.include_router(subs.router, prefix="/subs", tags=["Subs"])
router.include_router(users.router, prefix="/users", tags=["Users"])
