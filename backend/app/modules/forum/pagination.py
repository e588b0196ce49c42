"""
Cursor pagination with a lookahead fetch.

A page of ``take`` rows is fetched as ``take + 1`` rows ordered newest
first; the extra row only tells whether another page exists.
Cursors are opaque strings encoding ``(created_at, id)`` of the last row
returned, so rows sharing a timestamp still page deterministically.
"""

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Sequence, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select, and_, or_

from app.core.exceptions import InputValidationError

T = TypeVar("T")


class PaginationInput(BaseModel):
    """Requested page: resume after ``cursor``, return at most ``take`` rows."""

    cursor: str | None = None
    take: int = Field(10, ge=1)


@dataclass(frozen=True)
class PaginationData:
    """Fetch directive derived from a :class:`PaginationInput`."""

    take: int
    after: tuple[datetime, int] | None = None


@dataclass
class Page(Generic[T]):
    """Truncated page plus lookahead result."""

    items: list[T] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None


def encode_cursor(created_at: datetime, row_id: int) -> str:
    """Opaque cursor pointing just past the row ``(created_at, row_id)``."""
    raw = f"{created_at.isoformat()}|{row_id}".encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, int]:
    """Decode a cursor from :func:`encode_cursor`."""
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.urlsafe_b64decode(padded.encode()).decode()
        timestamp, row_id = raw.rsplit("|", 1)
        return datetime.fromisoformat(timestamp), int(row_id)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InputValidationError.single("cursor", "invalid cursor") from e


def get_pagination_data(pagination: PaginationInput) -> PaginationData:
    """Build the lookahead fetch directive for ``pagination``."""
    after = decode_cursor(pagination.cursor) if pagination.cursor else None
    return PaginationData(take=pagination.take + 1, after=after)


def apply_pagination(
    query: Select,
    created_column: Any,
    id_column: Any,
    data: PaginationData,
) -> Select:
    """Order newest first, skip past the cursor and limit to the lookahead size."""
    if data.after is not None:
        created_at, row_id = data.after
        query = query.where(
            or_(
                created_column < created_at,
                and_(created_column == created_at, id_column < row_id),
            )
        )

    return query.order_by(created_column.desc(), id_column.desc()).limit(data.take)


def paginate(rows: Sequence[T], take: int) -> Page[T]:
    """Truncate a lookahead fetch of ``take + 1`` rows to one page."""
    has_more = len(rows) == take + 1
    items = list(rows[:take])

    next_cursor = None
    if has_more and items:
        last = items[-1]
        next_cursor = encode_cursor(last.created_at, last.id)

    return Page(items=items, has_more=has_more, next_cursor=next_cursor)
