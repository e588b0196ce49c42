"""
Sub API Endpoints.

Communities and memberships.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.forum import get_forum, pagination_params, serialize_posts
from app.core.database import get_db
from app.core.security import Session, get_session
from app.models.forum import Sub
from app.modules.forum.pagination import PaginationInput
from app.modules.forum.service import ForumService, SubService

router = APIRouter()


class CreateSubRequest(BaseModel):
    """Create new sub."""

    name: str
    description: str | None = None


def get_subs(
    db: AsyncSession = Depends(get_db),
    session: Session | None = Depends(get_session),
) -> SubService:
    return SubService(db, session)


def serialize_sub(sub: Sub) -> dict[str, Any]:
    return {
        "name": sub.name,
        "description": sub.description,
        "creatorId": sub.creator_id,
        "createdAt": sub.created_at.isoformat(),
    }


@router.get("")
async def list_subs(
    subs: SubService = Depends(get_subs),
) -> list[dict[str, Any]]:
    """Get all subs."""
    return [serialize_sub(sub) for sub in await subs.list_subs()]


@router.post("")
async def create_sub(
    request: CreateSubRequest,
    subs: SubService = Depends(get_subs),
) -> dict[str, Any]:
    """Create new sub; the creator joins it."""
    sub = await subs.create_sub(request.name, request.description)

    return serialize_sub(sub)


@router.get("/{name}")
async def get_sub(
    name: str,
    subs: SubService = Depends(get_subs),
) -> dict[str, Any]:
    """Get sub details."""
    sub = await subs.get_sub(name)

    if not sub:
        raise HTTPException(status_code=404, detail="sub not found")

    return {
        **serialize_sub(sub),
        "memberCount": await subs.count_members(name),
    }


@router.get("/{name}/posts")
async def get_sub_posts(
    name: str,
    pagination: PaginationInput = Depends(pagination_params),
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Get a sub's posts, newest first."""
    page = await forum.get_sub_posts(name, pagination)

    return {
        "posts": await serialize_posts(forum, page.items),
        "hasMore": page.has_more,
        "nextCursor": page.next_cursor,
    }


@router.post("/{name}/join")
async def join_sub(
    name: str,
    subs: SubService = Depends(get_subs),
) -> dict[str, Any]:
    """Join a sub."""
    return {"joined": await subs.join(name)}


@router.delete("/{name}/join")
async def leave_sub(
    name: str,
    subs: SubService = Depends(get_subs),
) -> dict[str, Any]:
    """Leave a sub."""
    return {"left": await subs.leave(name)}
