# app/domains/auth/service.py
"""Email/password authentication and database-backed sessions."""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import Settings, settings
from app.core.security import SessionTokenSigner, generate_token, hash_password, verify_password
from app.exceptions.auth import (
    InvalidCredentialsError,
    InvalidVerificationTokenError,
    UserAlreadyExistsError,
)
from models import CREDENTIAL_PROVIDER, Account, Session, User, Verification
from models.base import ensure_aware, utcnow

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """A freshly authenticated user with its new session and the signed client token."""

    user: User
    session: Session
    token: str


class AuthService:
    def __init__(self, db: AsyncSession, config: Settings = settings):
        self.db = db
        self.config = config
        self.signer = SessionTokenSigner(config.resolved_auth_secret)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    def _new_session(
        self, user: User, ip_address: str | None = None, user_agent: str | None = None
    ) -> tuple[Session, str]:
        session = Session(
            id=uuid.uuid4(),
            user=user,
            user_id=user.id,
            token=generate_token(),
            expires_at=utcnow() + timedelta(seconds=self.config.session_expires_in),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        return session, self.signer.sign(session.token)

    async def sign_up(
        self,
        name: str,
        email: str,
        password: str,
        image: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Create a user with a credential account, a verification token and a first session."""
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            raise UserAlreadyExistsError()

        user = User(id=uuid.uuid4(), name=name, email=email, email_verified=False, image=image)
        account = Account(
            account_id=str(user.id),
            provider_id=CREDENTIAL_PROVIDER,
            user=user,
            password=hash_password(password),
        )
        verification = Verification(
            identifier=email,
            value=generate_token(),
            expires_at=utcnow() + timedelta(seconds=self.config.verification_expires_in),
        )
        session, token = self._new_session(user, ip_address, user_agent)

        try:
            self.db.add_all([user, account, verification, session])
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise UserAlreadyExistsError() from e
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        if self.config.is_development:
            logger.info(
                "Email verification link for %s: %s/api/auth/verify-email?token=%s",
                email,
                self.config.resolved_auth_base_url,
                verification.value,
            )
        return AuthResult(user=user, session=session, token=token)

    async def sign_in(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthResult:
        """Verify an email/password pair and open a new session."""
        user = await self.get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError()

        result = await self.db.execute(
            select(Account).where(
                Account.user_id == user.id, Account.provider_id == CREDENTIAL_PROVIDER
            )
        )
        account = result.scalar_one_or_none()
        if not account or not verify_password(password, account.password):
            raise InvalidCredentialsError()

        session, token = self._new_session(user, ip_address, user_agent)
        try:
            self.db.add(session)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return AuthResult(user=user, session=session, token=token)

    async def get_session(self, signed_token: str | None) -> tuple[Optional[User], Optional[Session]]:
        """Resolve a signed client token to ``(user, session)``.

        Anything invalid, unknown or expired resolves to ``(None, None)``.
        Expired rows are removed; rows older than ``session_update_age`` get
        their expiry pushed forward.
        """
        token = self.signer.unsign(signed_token)
        if not token:
            return None, None

        result = await self.db.execute(
            select(Session).options(selectinload(Session.user)).where(Session.token == token)
        )
        session = result.scalar_one_or_none()
        if not session:
            return None, None

        now = utcnow()
        expires_at = ensure_aware(session.expires_at)
        if expires_at <= now:
            await self.db.delete(session)
            await self.db.commit()
            return None, None

        lifetime = timedelta(seconds=self.config.session_expires_in)
        if expires_at - lifetime + timedelta(seconds=self.config.session_update_age) <= now:
            session.expires_at = now + lifetime
            await self.db.commit()

        return session.user, session

    async def sign_out(self, signed_token: str | None) -> bool:
        """Revoke the session behind a signed token."""
        token = self.signer.unsign(signed_token)
        if not token:
            return False
        result = await self.db.execute(delete(Session).where(Session.token == token))
        await self.db.commit()
        return result.rowcount > 0

    async def verify_email(self, token: str) -> User:
        """Consume a verification token and mark the matching user verified."""
        result = await self.db.execute(select(Verification).where(Verification.value == token))
        verification = result.scalar_one_or_none()
        if not verification:
            raise InvalidVerificationTokenError()

        if ensure_aware(verification.expires_at) <= utcnow():
            await self.db.delete(verification)
            await self.db.commit()
            raise InvalidVerificationTokenError()

        user = await self.get_user_by_email(verification.identifier)
        if not user:
            raise InvalidVerificationTokenError()

        user.email_verified = True
        await self.db.delete(verification)
        await self.db.commit()
        return user
