"""
User API Endpoints.

Registration and the current user.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import Session, get_session, require_session
from app.models.user import User
from app.modules.users.service import UserService

router = APIRouter()


class RegisterRequest(BaseModel):
    """Register new user."""

    email: str
    username: str
    password: str | None = None


def serialize_user(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "image": user.image,
        "createdAt": user.created_at.isoformat(),
    }


@router.post("/register")
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Register new user."""
    users = UserService(db)
    user = await users.register(request.email, request.username, request.password)

    return serialize_user(user)


@router.get("/me")
async def get_me(
    session: Session | None = Depends(get_session),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get the signed-in user."""
    session = require_session(session)
    user = await UserService(db).get_user(session.user_id)

    if not user:
        raise HTTPException(status_code=404, detail="user not found")

    return serialize_user(user)
