"""
Forum Service - Feed, post, vote, comment and sub management.
"""

from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthorizationError,
    InputValidationError,
    NotFoundError,
)
from app.core.security import Session, require_session
from app.models.forum import Comment, Post, PostVote, Sub, UserSub
from app.modules.forum.pagination import (
    Page,
    PaginationInput,
    apply_pagination,
    get_pagination_data,
    paginate,
)
from app.modules.forum.validate import (
    raise_for_errors,
    validate_comment,
    validate_post,
    validate_sub_name,
)


@dataclass(frozen=True)
class VoteSummary:
    """Aggregate score of a post and the caller's own vote on it."""

    votes: int = 0
    vote_status: int = 0


class ForumService:
    """
    Service for the post feed, posts, votes and comments.

    Each request builds its own service from the request's database
    session and the caller's session (None when anonymous).

    Usage:
        forum = ForumService(db, session)
        page = await forum.get_feed(PaginationInput(take=10))
    """

    def __init__(self, db: AsyncSession, session: Session | None = None) -> None:
        """Initialize forum service with database and caller sessions."""
        self.db = db
        self.session = session

    @property
    def user_id(self) -> int | None:
        return self.session.user_id if self.session else None

    # ==================== Feed ====================

    async def get_feed(self, pagination: PaginationInput) -> Page[Post]:
        """
        Get a page of posts, newest first.

        Signed-in callers only see posts from subs they belong to;
        anonymous callers see every sub.

        Args:
            pagination: Cursor and page size

        Returns:
            Page of posts with the lookahead flag
        """
        data = get_pagination_data(pagination)
        query = select(Post)

        if self.user_id is not None:
            sub_names = await self.get_subscribed_sub_names(self.user_id)
            if not sub_names:
                return Page()
            query = query.where(Post.sub_name.in_(sub_names))

        query = apply_pagination(query, Post.created_at, Post.id, data)
        result = await self.db.execute(query)
        return paginate(result.scalars().all(), pagination.take)

    async def get_sub_posts(self, sub_name: str, pagination: PaginationInput) -> Page[Post]:
        """Get a page of posts from one sub, newest first."""
        data = get_pagination_data(pagination)
        query = apply_pagination(
            select(Post).where(Post.sub_name == sub_name),
            Post.created_at,
            Post.id,
            data,
        )
        result = await self.db.execute(query)
        return paginate(result.scalars().all(), pagination.take)

    async def get_subscribed_sub_names(self, user_id: int) -> list[str]:
        """Names of the subs ``user_id`` belongs to."""
        result = await self.db.execute(
            select(UserSub.sub_name).where(UserSub.user_id == user_id)
        )
        return list(result.scalars().all())

    # ==================== Posts ====================

    async def get_post(self, post_id: int) -> Post | None:
        """Get post by ID."""
        return await self.db.get(Post, post_id)

    async def create_post(
        self,
        sub_name: str,
        title: str,
        body: str,
        image: str | None = None,
    ) -> Post:
        """
        Create new post in a sub.

        Raises:
            UnauthenticatedError: No caller session
            InputValidationError: Bad title or body
            NotFoundError: The sub does not exist
        """
        session = require_session(self.session)
        raise_for_errors(validate_post(title, body))

        post = Post(
            creator_id=session.user_id,
            sub_name=sub_name,
            title=title,
            body=body,
            image=image,
        )
        self.db.add(post)

        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning(f"Post rejected for sub {sub_name}: {e.orig}")
            raise NotFoundError("sub not found") from e

        logger.info(f"Post {post.id} created in {sub_name} by user {session.user_id}")
        return post

    async def _get_own_post(self, post_id: int, user_id: int) -> Post:
        post = await self.get_post(post_id)
        if not post:
            raise NotFoundError("post not found")
        if post.creator_id != user_id:
            logger.warning(f"User {user_id} tried to change post {post_id}")
            raise AuthorizationError("cannot update post")
        return post

    async def edit_post(
        self,
        post_id: int,
        title: str,
        body: str,
        image: str | None = None,
    ) -> Post:
        """Update a post owned by the caller."""
        session = require_session(self.session)
        post = await self._get_own_post(post_id, session.user_id)
        raise_for_errors(validate_post(title, body))

        post.title = title
        post.body = body
        post.image = image
        post.updated_at = datetime.utcnow()

        await self.db.flush()
        logger.info(f"Post {post_id} edited by user {session.user_id}")
        return post

    async def delete_post(self, post_id: int) -> bool:
        """Delete a post owned by the caller; its votes and comments go with it."""
        session = require_session(self.session)
        post = await self._get_own_post(post_id, session.user_id)

        await self.db.delete(post)
        await self.db.flush()
        logger.info(f"Post {post_id} deleted by user {session.user_id}")
        return True

    # ==================== Votes ====================

    async def get_vote_total(self, post_id: int) -> int:
        """Sum of all vote values on a post."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(PostVote.value), 0)).where(
                PostVote.post_id == post_id
            )
        )
        return int(result.scalar_one())

    async def get_vote_status(self, post_id: int) -> int:
        """The caller's vote on a post: -1, 1, or 0 if none or anonymous."""
        if self.user_id is None:
            return 0

        vote = await self.db.get(PostVote, (self.user_id, post_id))
        return vote.value if vote else 0

    async def get_vote_summaries(self, post_ids: list[int]) -> dict[int, VoteSummary]:
        """
        Vote totals and the caller's vote for many posts at once.

        Runs one grouped query for the whole set instead of two queries
        per post. Posts without votes map to ``VoteSummary(0, 0)``.
        """
        summaries = {post_id: VoteSummary() for post_id in post_ids}
        if not post_ids:
            return summaries

        own_vote = case((PostVote.user_id == self.user_id, PostVote.value), else_=0)
        result = await self.db.execute(
            select(
                PostVote.post_id,
                func.sum(PostVote.value),
                func.sum(own_vote),
            )
            .where(PostVote.post_id.in_(post_ids))
            .group_by(PostVote.post_id)
        )

        for post_id, total, status in result.all():
            summaries[post_id] = VoteSummary(
                votes=int(total or 0),
                vote_status=int(status or 0) if self.user_id is not None else 0,
            )
        return summaries

    async def vote(self, post_id: int, value: int) -> VoteSummary:
        """
        Cast the caller's vote on a post.

        Voting the same value twice withdraws the vote; voting the
        opposite value replaces it.
        """
        session = require_session(self.session)
        if value not in (-1, 1):
            raise InputValidationError.single("value", "vote must be 1 or -1")

        if not await self.get_post(post_id):
            raise NotFoundError("post not found")

        existing = await self.db.get(PostVote, (session.user_id, post_id))
        if existing is None:
            self.db.add(PostVote(user_id=session.user_id, post_id=post_id, value=value))
        elif existing.value == value:
            await self.db.delete(existing)
        else:
            existing.value = value

        await self.db.flush()
        logger.info(f"User {session.user_id} voted {value} on post {post_id}")

        summaries = await self.get_vote_summaries([post_id])
        return summaries[post_id]

    # ==================== Comments ====================

    async def get_comments(self, post_id: int, pagination: PaginationInput) -> Page[Comment]:
        """Get a page of a post's comments, newest first."""
        data = get_pagination_data(pagination)
        query = apply_pagination(
            select(Comment).where(Comment.post_id == post_id),
            Comment.created_at,
            Comment.id,
            data,
        )
        result = await self.db.execute(query)
        return paginate(result.scalars().all(), pagination.take)

    async def create_comment(self, post_id: int, body: str) -> Comment:
        """Add a comment to a post."""
        session = require_session(self.session)
        raise_for_errors(validate_comment(body))

        if not await self.get_post(post_id):
            raise NotFoundError("post not found")

        comment = Comment(post_id=post_id, creator_id=session.user_id, body=body)
        self.db.add(comment)
        await self.db.flush()
        return comment

    async def delete_comment(self, comment_id: int) -> bool:
        """Delete a comment owned by the caller."""
        session = require_session(self.session)

        comment = await self.db.get(Comment, comment_id)
        if not comment:
            raise NotFoundError("comment not found")
        if comment.creator_id != session.user_id:
            raise AuthorizationError("cannot delete comment")

        await self.db.delete(comment)
        await self.db.flush()
        return True


class SubService:
    """Service for subs and memberships."""

    def __init__(self, db: AsyncSession, session: Session | None = None) -> None:
        self.db = db
        self.session = session

    async def list_subs(self) -> list[Sub]:
        """All subs ordered by name."""
        result = await self.db.execute(select(Sub).order_by(Sub.name))
        return list(result.scalars().all())

    async def get_sub(self, name: str) -> Sub | None:
        return await self.db.get(Sub, name)

    async def count_members(self, name: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(UserSub).where(UserSub.sub_name == name)
        )
        return int(result.scalar_one())

    async def create_sub(self, name: str, description: str | None = None) -> Sub:
        """Create a sub; its creator joins it."""
        session = require_session(self.session)
        raise_for_errors(validate_sub_name(name))

        if await self.get_sub(name):
            raise InputValidationError.single("name", "sub already exists")

        sub = Sub(name=name, description=description, creator_id=session.user_id)
        self.db.add(sub)
        self.db.add(UserSub(user_id=session.user_id, sub_name=name))
        await self.db.flush()

        logger.info(f"Sub {name} created by user {session.user_id}")
        return sub

    async def join(self, name: str) -> bool:
        """
        Subscribe the caller to a sub.

        Returns:
            True if the membership was added (False if it already existed)
        """
        session = require_session(self.session)
        if not await self.get_sub(name):
            raise NotFoundError("sub not found")

        if await self.db.get(UserSub, (session.user_id, name)):
            return False

        self.db.add(UserSub(user_id=session.user_id, sub_name=name))
        await self.db.flush()
        return True

    async def leave(self, name: str) -> bool:
        """Unsubscribe the caller from a sub."""
        session = require_session(self.session)
        if not await self.get_sub(name):
            raise NotFoundError("sub not found")

        membership = await self.db.get(UserSub, (session.user_id, name))
        if not membership:
            return False

        await self.db.delete(membership)
        await self.db.flush()
        return True
