"""
Input validation for forum payloads.

Each validator returns a list of field errors; an empty list means the
input is acceptable.
"""

import re

from app.core.exceptions import FieldError, InputValidationError

EMAIL_RE = re.compile(r"^([a-zA-Z0-9_.\-])+@(([a-zA-Z0-9\-])+\.)+([a-zA-Z0-9]{2,4})+$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9]{3,12}$")
SUB_NAME_RE = re.compile(r"^\w{3,21}$")

TITLE_MAX_LENGTH = 300
BODY_MAX_LENGTH = 40_000
PASSWORD_MIN_LENGTH = 4


def validate_post(title: str | None, body: str | None) -> list[FieldError]:
    """Check post title and body."""
    errors: list[FieldError] = []

    title = (title or "").strip()
    if not title:
        errors.append(FieldError("title", "title cannot be empty"))
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(
            FieldError("title", f"title must be at most {TITLE_MAX_LENGTH} characters")
        )

    body = (body or "").strip()
    if not body:
        errors.append(FieldError("body", "body cannot be empty"))
    elif len(body) > BODY_MAX_LENGTH:
        errors.append(
            FieldError("body", f"body must be at most {BODY_MAX_LENGTH} characters")
        )

    return errors


def validate_comment(body: str | None) -> list[FieldError]:
    """Check comment body."""
    body = (body or "").strip()
    if not body:
        return [FieldError("body", "comment cannot be empty")]
    if len(body) > BODY_MAX_LENGTH:
        return [FieldError("body", f"comment must be at most {BODY_MAX_LENGTH} characters")]
    return []


def validate_register(
    email: str,
    username: str,
    password: str | None = None,
) -> list[FieldError]:
    """Check registration e-mail, username and, if given, password."""
    errors: list[FieldError] = []

    if not EMAIL_RE.match(email or ""):
        errors.append(FieldError("email", "incorrect email"))

    if not USERNAME_RE.match(username or ""):
        errors.append(FieldError("username", "username should be 3-12 characters"))

    if password is not None and len(password) < PASSWORD_MIN_LENGTH:
        errors.append(
            FieldError("password", f"password must be at least {PASSWORD_MIN_LENGTH} characters")
        )

    return errors


def validate_sub_name(name: str) -> list[FieldError]:
    """Check a new sub's name."""
    if not SUB_NAME_RE.match(name or ""):
        return [
            FieldError(
                "name",
                "name should be 3-21 letters, digits or underscores",
            )
        ]
    return []


def raise_for_errors(errors: list[FieldError]) -> None:
    """Raise the input validation fault when ``errors`` is non-empty."""
    if errors:
        raise InputValidationError(errors)
