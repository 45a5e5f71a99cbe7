# app/core/dependencies.py
"""Per-request dependencies.

FastAPI caches each dependency for the duration of one request, so the
database session, the session lookup and the storage backend below are each
built once per request and shared by everything that asks for them.
"""
import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.database import get_db
from app.domains.auth.service import AuthService
from app.exceptions.base import UnauthorizedError
from app.services.storage import StorageService, select_storage
from models import Session, User

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """The resolved identity of the current request, possibly anonymous."""

    user: User | None = None
    session: Session | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_session_credential(request: Request) -> str | None:
    """Signed session token from the session cookie or an ``Authorization: Bearer`` header."""
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        return cookie

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def resolve_session(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionContext:
    """Validate the request credentials once and publish the result on ``request.state``."""
    user, session = await auth_service.get_session(get_session_credential(request))

    request.state.user = user
    request.state.session = session
    if user is not None:
        logger.debug("Resolved session for user %s", user.id)
    return SessionContext(user=user, session=session)


async def get_optional_user(context: SessionContext = Depends(resolve_session)) -> User | None:
    """Get current user if authenticated, otherwise return None."""
    return context.user


async def get_current_user(context: SessionContext = Depends(resolve_session)) -> User:
    """Get current authenticated user.

    Raises:
        UnauthorizedError: If the request carries no valid session
    """
    if context.user is None:
        raise UnauthorizedError()
    return context.user


def get_storage() -> StorageService:
    """Storage backend for this request, chosen from the current configuration."""
    return select_storage(settings)
