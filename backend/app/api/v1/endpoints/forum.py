"""
Forum API Endpoints.

Feed, posts, votes and comments.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import Session, get_session
from app.models.forum import Comment, Post
from app.modules.forum.pagination import PaginationInput
from app.modules.forum.service import ForumService, VoteSummary

router = APIRouter()


# ==================== Schemas ====================


class PostInput(BaseModel):
    """Create or edit a post."""

    title: str
    body: str
    image: str | None = None


class VoteInput(BaseModel):
    """Up (1) or down (-1) vote."""

    value: int


class CommentInput(BaseModel):
    """New comment."""

    body: str


# ==================== Helpers ====================


def get_forum(
    db: AsyncSession = Depends(get_db),
    session: Session | None = Depends(get_session),
) -> ForumService:
    """Per-request forum service bound to the caller's session."""
    return ForumService(db, session)


def pagination_params(
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    take: int | None = Query(None, ge=1, le=settings.forum_max_page_size),
) -> PaginationInput:
    return PaginationInput(cursor=cursor, take=take or settings.forum_page_size)


def serialize_post(post: Post, summary: VoteSummary) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "body": post.body,
        "image": post.image,
        "creatorId": post.creator_id,
        "subName": post.sub_name,
        "createdAt": post.created_at.isoformat(),
        "updatedAt": post.updated_at.isoformat(),
        "votes": summary.votes,
        "voteStatus": summary.vote_status,
    }


def serialize_comment(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "body": comment.body,
        "creatorId": comment.creator_id,
        "postId": comment.post_id,
        "createdAt": comment.created_at.isoformat(),
    }


async def serialize_posts(forum: ForumService, posts: list[Post]) -> list[dict[str, Any]]:
    """Serialize a page of posts with one vote query for the whole page."""
    summaries = await forum.get_vote_summaries([p.id for p in posts])
    return [serialize_post(p, summaries[p.id]) for p in posts]


# ==================== Feed ====================


@router.get("/feed")
async def get_feed(
    pagination: PaginationInput = Depends(pagination_params),
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Get the caller's feed, newest first."""
    page = await forum.get_feed(pagination)

    return {
        "posts": await serialize_posts(forum, page.items),
        "hasMore": page.has_more,
        "nextCursor": page.next_cursor,
    }


# ==================== Posts ====================


@router.get("/posts/{post_id}")
async def get_post(
    post_id: int,
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Get post details."""
    post = await forum.get_post(post_id)

    if not post:
        raise HTTPException(status_code=404, detail="post not found")

    summary = VoteSummary(
        votes=await forum.get_vote_total(post_id),
        vote_status=await forum.get_vote_status(post_id),
    )
    return serialize_post(post, summary)


@router.post("/subs/{sub_name}/posts")
async def create_post(
    sub_name: str,
    request: PostInput,
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Create new post in a sub."""
    post = await forum.create_post(
        sub_name=sub_name,
        title=request.title,
        body=request.body,
        image=request.image,
    )

    return serialize_post(post, VoteSummary())


@router.put("/posts/{post_id}")
async def edit_post(
    post_id: int,
    request: PostInput,
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Update post content."""
    post = await forum.edit_post(
        post_id,
        title=request.title,
        body=request.body,
        image=request.image,
    )

    summaries = await forum.get_vote_summaries([post.id])
    return serialize_post(post, summaries[post.id])


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    forum: ForumService = Depends(get_forum),
) -> bool:
    """Delete a post."""
    return await forum.delete_post(post_id)


# ==================== Votes ====================


@router.post("/posts/{post_id}/vote")
async def vote_post(
    post_id: int,
    request: VoteInput,
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Vote on a post; repeating the same vote withdraws it."""
    summary = await forum.vote(post_id, request.value)

    return {"votes": summary.votes, "voteStatus": summary.vote_status}


# ==================== Comments ====================


@router.get("/posts/{post_id}/comments")
async def get_comments(
    post_id: int,
    pagination: PaginationInput = Depends(pagination_params),
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Get a post's comments, newest first."""
    page = await forum.get_comments(post_id, pagination)

    return {
        "comments": [serialize_comment(c) for c in page.items],
        "hasMore": page.has_more,
        "nextCursor": page.next_cursor,
    }


@router.post("/posts/{post_id}/comments")
async def create_comment(
    post_id: int,
    request: CommentInput,
    forum: ForumService = Depends(get_forum),
) -> dict[str, Any]:
    """Comment on a post."""
    comment = await forum.create_comment(post_id, request.body)

    return serialize_comment(comment)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    forum: ForumService = Depends(get_forum),
) -> bool:
    """Delete a comment."""
    return await forum.delete_comment(comment_id)
