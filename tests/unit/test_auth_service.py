"""
Unit tests for AuthService.

Runs against the per-test SQLite database to cover sign-up, sign-in,
session resolution (including expiry and sliding refresh), sign-out and
email verification.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.config import Settings
from app.domains.auth.service import AuthService
from app.exceptions.auth import (
    InvalidCredentialsError,
    InvalidVerificationTokenError,
    UserAlreadyExistsError,
)
from models import CREDENTIAL_PROVIDER, Account, Session, Verification
from models.base import ensure_aware, utcnow


class TestSignUp:
    """Test cases for AuthService.sign_up."""

    @pytest.mark.asyncio
    async def test_sign_up_creates_user_account_and_session(self, test_db):
        """Test that sign-up persists every auth row and returns a signed token."""
        service = AuthService(test_db)

        result = await service.sign_up(
            name="Ada", email="Ada@Example.com", password="password123", user_agent="pytest"
        )

        assert result.user.email == "ada@example.com"
        assert result.user.email_verified is False
        assert result.session.user_id == result.user.id
        assert result.session.user_agent == "pytest"
        assert service.signer.unsign(result.token) == result.session.token

        account = (await test_db.execute(select(Account))).scalar_one()
        assert account.provider_id == CREDENTIAL_PROVIDER
        assert account.password != "password123"

        verification = (await test_db.execute(select(Verification))).scalar_one()
        assert verification.identifier == "ada@example.com"

    @pytest.mark.asyncio
    async def test_sign_up_duplicate_email(self, test_db, test_user):
        """Test that an existing email (any case) is rejected."""
        with pytest.raises(UserAlreadyExistsError):
            await AuthService(test_db).sign_up(
                name="Again", email="TEST@example.com", password="password123"
            )


class TestSignIn:
    """Test cases for AuthService.sign_in."""

    @pytest.mark.asyncio
    async def test_sign_in_success(self, test_db, test_user):
        result = await AuthService(test_db).sign_in("test@example.com", "password123")

        assert result.user.id == test_user.id
        assert result.token

    @pytest.mark.asyncio
    async def test_sign_in_opens_separate_sessions(self, test_db, test_user_auth):
        result = await AuthService(test_db).sign_in("test@example.com", "password123")

        assert result.session.token != test_user_auth.session.token

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("test@example.com", "wrong-password"), ("nobody@example.com", "password123")],
    )
    async def test_sign_in_invalid_credentials(self, test_db, test_user, email, password):
        with pytest.raises(InvalidCredentialsError):
            await AuthService(test_db).sign_in(email, password)


class TestGetSession:
    """Test cases for AuthService.get_session."""

    @pytest.mark.asyncio
    async def test_valid_token(self, test_db, test_user_auth):
        user, session = await AuthService(test_db).get_session(test_user_auth.token)

        assert user.id == test_user_auth.user.id
        assert session.id == test_user_auth.session.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    async def test_missing_or_malformed_token(self, test_db, token):
        assert await AuthService(test_db).get_session(token) == (None, None)

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret(self, test_db, test_user_auth):
        other = AuthService(test_db, config=Settings(auth_secret="another-secret"))

        assert await other.get_session(test_user_auth.token) == (None, None)

    @pytest.mark.asyncio
    async def test_expired_session_is_removed(self, test_db, test_user_auth):
        """Test that an expired session resolves to nothing and its row is deleted."""
        test_user_auth.session.expires_at = utcnow() - timedelta(seconds=1)
        await test_db.commit()

        assert await AuthService(test_db).get_session(test_user_auth.token) == (None, None)
        remaining = (await test_db.execute(select(Session))).scalars().all()
        assert remaining == []

    @pytest.mark.asyncio
    async def test_sliding_refresh(self, test_db, test_user_auth):
        """Test that a session older than the update age gets a new expiry."""
        service = AuthService(test_db)
        lifetime = timedelta(seconds=service.config.session_expires_in)
        update_age = timedelta(seconds=service.config.session_update_age)
        stale_expiry = utcnow() + lifetime - update_age - timedelta(minutes=5)
        test_user_auth.session.expires_at = stale_expiry
        await test_db.commit()

        _, session = await service.get_session(test_user_auth.token)

        assert ensure_aware(session.expires_at) > stale_expiry + timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_fresh_session_not_refreshed(self, test_db, test_user_auth):
        original = ensure_aware(test_user_auth.session.expires_at)

        _, session = await AuthService(test_db).get_session(test_user_auth.token)

        assert ensure_aware(session.expires_at) == original


class TestSignOut:
    """Test cases for AuthService.sign_out."""

    @pytest.mark.asyncio
    async def test_sign_out_revokes_session(self, test_db, test_user_auth):
        service = AuthService(test_db)

        assert await service.sign_out(test_user_auth.token) is True
        assert await service.get_session(test_user_auth.token) == (None, None)
        assert await service.sign_out(test_user_auth.token) is False

    @pytest.mark.asyncio
    async def test_sign_out_without_token(self, test_db):
        assert await AuthService(test_db).sign_out(None) is False


class TestVerifyEmail:
    """Test cases for AuthService.verify_email."""

    @pytest.mark.asyncio
    async def test_verify_email(self, test_db, test_user):
        verification = (await test_db.execute(select(Verification))).scalar_one()

        user = await AuthService(test_db).verify_email(verification.value)

        assert user.id == test_user.id
        assert user.email_verified is True
        assert (await test_db.execute(select(Verification))).first() is None

    @pytest.mark.asyncio
    async def test_verify_email_unknown_token(self, test_db):
        with pytest.raises(InvalidVerificationTokenError):
            await AuthService(test_db).verify_email("unknown")

    @pytest.mark.asyncio
    async def test_verify_email_expired_token(self, test_db, test_user):
        verification = (await test_db.execute(select(Verification))).scalar_one()
        verification.expires_at = utcnow() - timedelta(seconds=1)
        await test_db.commit()

        with pytest.raises(InvalidVerificationTokenError):
            await AuthService(test_db).verify_email(verification.value)
