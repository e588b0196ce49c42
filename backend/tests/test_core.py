"""Tests for settings, session tokens and fault rendering."""

import pytest

from app.core.config import Settings
from app.core.exceptions import AuthorizationError, NotFoundError, UnauthenticatedError
from app.core.security import Session, create_access_token, decode_session, require_session


class TestSettings:
    def test_plain_postgres_url_uses_asyncpg(self):
        settings = Settings(database_url="postgresql://u:p@db:5432/readit")

        assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/readit"

    def test_email_server_passthrough(self, monkeypatch):
        monkeypatch.setenv("EMAIL_SERVER_HOST", "smtp.example.com")
        monkeypatch.setenv("EMAIL_SERVER_PORT", "2525")
        monkeypatch.setenv("EMAIL_SERVER_USER", "mailer")
        monkeypatch.setenv("EMAIL_SERVER_PASSWORD", "secret")
        monkeypatch.setenv("EMAIL_FROM", "hello@example.com")

        assert Settings().email_server == {
            "host": "smtp.example.com",
            "port": 2525,
            "auth": {"user": "mailer", "pass": "secret"},
            "from": "hello@example.com",
        }


class TestSessions:
    def test_token_round_trip(self):
        assert decode_session(create_access_token(7)) == Session(user_id=7)

    def test_missing_or_bad_token_is_anonymous(self):
        assert decode_session(None) is None
        assert decode_session("") is None
        assert decode_session("not-a-jwt") is None

    def test_expired_token_is_anonymous(self):
        token = create_access_token(7, expires_minutes=-5)

        assert decode_session(token) is None

    def test_require_session(self):
        session = Session(user_id=1)

        assert require_session(session) is session
        with pytest.raises(UnauthenticatedError):
            require_session(None)


def test_fault_status_codes():
    assert NotFoundError("post not found").status_code == 404
    assert AuthorizationError("cannot update post").status_code == 403
    assert UnauthenticatedError().to_dict() == {"detail": "not authenticated", "errors": []}
