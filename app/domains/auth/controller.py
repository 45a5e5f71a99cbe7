"""Authentication controller endpoints.

These routes manage sessions themselves, so they read credentials directly
instead of going through the session resolver used by the item and file APIs.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.core.config import settings
from app.core.dependencies import get_auth_service, get_session_credential
from app.domains.auth.service import AuthResult, AuthService
from app.schemas.auth import (
    AuthResponse,
    SessionInfo,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)
from app.schemas.base import ResponseSchema

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _client_info(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def _set_session_cookie(response: Response, result: AuthResult, persistent: bool = True) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.token,
        max_age=settings.session_expires_in if persistent else None,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def _auth_payload(result: AuthResult) -> dict:
    return AuthResponse(
        token=result.token, user=UserResponse.model_validate(result.user)
    ).model_dump(mode="json")


@router.post("/sign-up/email", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: Request,
    response: Response,
    payload: SignUpRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register with email and password and start a session."""
    result = await auth_service.sign_up(
        name=payload.name,
        email=str(payload.email),
        password=payload.password,
        image=payload.image,
        **_client_info(request),
    )
    _set_session_cookie(response, result)
    return ResponseSchema.ok(request, _auth_payload(result))


@router.post("/sign-in/email", response_model=ResponseSchema)
async def sign_in(
    request: Request,
    response: Response,
    payload: SignInRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate with email and password and start a session."""
    result = await auth_service.sign_in(
        email=str(payload.email), password=payload.password, **_client_info(request)
    )
    _set_session_cookie(response, result, persistent=payload.rememberMe)
    return ResponseSchema.ok(request, _auth_payload(result))


@router.post("/sign-out", response_model=ResponseSchema)
async def sign_out(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Revoke the current session and clear the cookie."""
    await auth_service.sign_out(get_session_credential(request))
    response.delete_cookie(settings.session_cookie_name, path="/")
    return ResponseSchema.ok(request, {"success": True})


@router.get("/get-session", response_model=ResponseSchema)
async def get_session(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Return the current session and user, or null."""
    user, session = await auth_service.get_session(get_session_credential(request))
    if user is None or session is None:
        return ResponseSchema.ok(request, None)

    info = SessionInfo(
        session=SessionResponse.model_validate(session),
        user=UserResponse.model_validate(user),
    )
    return ResponseSchema.ok(request, info.model_dump(mode="json"))


@router.get("/verify-email", response_model=ResponseSchema)
async def verify_email(
    request: Request,
    token: str = Query(..., min_length=1),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Confirm an email address with the token issued at sign-up."""
    user = await auth_service.verify_email(token)
    return ResponseSchema.ok(request, UserResponse.model_validate(user).model_dump(mode="json"))
