"""
Forum faults.

Services raise these; the application renders them as JSON responses with
the matching status code.
"""

from dataclasses import dataclass


@dataclass
class FieldError:
    """Validation message attached to a single input field."""

    field: str
    message: str


class ForumError(Exception):
    """Base class for faults surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "errors": []}


class InputValidationError(ForumError):
    """Malformed payload, reported with field-level messages."""

    status_code = 422

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(errors[0].message if errors else "invalid input")
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "InputValidationError":
        return cls([FieldError(field=field, message=message)])

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "errors": [{"field": e.field, "message": e.message} for e in self.errors],
        }


class NotFoundError(ForumError):
    """Referenced post, comment or sub does not exist."""

    status_code = 404


class AuthorizationError(ForumError):
    """Acting user does not own the resource."""

    status_code = 403


class UnauthenticatedError(ForumError):
    """Operation requires a signed-in user."""

    status_code = 401

    def __init__(self, message: str = "not authenticated") -> None:
        super().__init__(message)

