"""
Authentication Endpoints.

Sign-up with e-mail verification, login, token refresh and logout. Tokens are
returned in the body and the access token is also set as an HTTP-only cookie
for browser clients.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import EmailStr

from pdfshare.core.logging_config import get_logger
from pdfshare.core.models.io import (
    LoginRequest,
    MeResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    TokenResponse,
    UserPublic,
)
from pdfshare.server.core.config import settings
from pdfshare.server.core.constant import ACCESS_TOKEN_COOKIE, COOKIE_MAX_AGE_SECONDS
from pdfshare.server.services.deps import AuthServiceDep, CurrentUserDep

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def _set_access_cookie(response: Response, token: str) -> None:
    production = settings.is_production
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        max_age=COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=production,
        samesite="none" if production else "lax",
        domain=settings.cookie_domain if production else None,
        path="/",
    )


def _clear_access_cookie(response: Response) -> None:
    production = settings.is_production
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        httponly=True,
        secure=production,
        samesite="none" if production else "lax",
        domain=settings.cookie_domain if production else None,
        path="/",
    )


def _public(user) -> UserPublic:
    return UserPublic(
        id=user.id,
        email=user.email,
        name=user.name,
        is_email_verified=user.is_email_verified,
        has_google_account=bool(user.google_id),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and send the e-mail verification link.",
    responses={
        201: {"description": "Account created; verification pending"},
        409: {"description": "E-mail already registered"},
    },
)
async def register(body: RegisterRequest, service: AuthServiceDep) -> RegisterResponse:
    """
    Register a new user.

    - **email**: Account e-mail, stored lowercased.
    - **password**: At least 8 characters.
    - **name**: Display name, at least 2 characters.
    """
    user = await service.register(body.email, body.password, body.name)
    return RegisterResponse(email=user.email, name=user.name, is_email_verified=user.is_email_verified)


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify E-mail",
    description="Confirm an e-mail address with the token from the verification mail and sign in.",
    responses={400: {"description": "Unknown or already used token"}},
)
async def verify_email(response: Response, service: AuthServiceDep, token: UUID = Query(...)) -> MessageResponse:
    _, (access, _refresh) = await service.verify_email(str(token))
    _set_access_cookie(response, access)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    summary="Resend Verification E-mail",
    responses={400: {"description": "Unknown user, already verified, or Google account"}},
)
async def resend_verification(body: ResendVerificationRequest, service: AuthServiceDep) -> MessageResponse:
    await service.resend_verification(body.email)
    return MessageResponse(message="Verification email sent successfully")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Authenticate with e-mail and password.",
    responses={401: {"description": "Invalid credentials or e-mail not verified"}},
)
async def login(body: LoginRequest, response: Response, service: AuthServiceDep) -> TokenResponse:
    """
    Log in with e-mail and password.

    Returns an access and a refresh token; the access token is also set as
    the ``access_token`` cookie.
    """
    _, (access, refresh) = await service.login(body.email, body.password)
    _set_access_cookie(response, access)
    return TokenResponse(message="Login successful", access_token=access, refresh_token=refresh)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh Tokens",
    description="Exchange a refresh token for a new token pair. The old refresh token is revoked.",
    responses={401: {"description": "Invalid, expired or revoked refresh token"}},
)
async def refresh(body: RefreshRequest, response: Response, service: AuthServiceDep) -> TokenResponse:
    _, (access, new_refresh) = await service.refresh(body.refresh_token)
    _set_access_cookie(response, access)
    return TokenResponse(message="Token refreshed successfully", access_token=access, refresh_token=new_refresh)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the refresh token and clear the access token cookie.",
)
async def logout(user: CurrentUserDep, service: AuthServiceDep) -> Response:
    await service.logout(user)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_access_cookie(response)
    return response


@router.get("/me", response_model=MeResponse, summary="Current User")
async def me(user: CurrentUserDep) -> MeResponse:
    return MeResponse(email=user.email, name=user.name, is_email_verified=user.is_email_verified)


@router.get("/profile", response_model=UserPublic, summary="Current User Profile")
async def profile(user: CurrentUserDep) -> UserPublic:
    return _public(user)


@router.get(
    "/user-by-email",
    response_model=UserPublic,
    summary="Find User by E-mail",
    responses={404: {"description": "No user with this e-mail"}},
)
async def user_by_email(current_user: CurrentUserDep, service: AuthServiceDep, email: EmailStr = Query(...)) -> UserPublic:
    user = await service.get_by_email(str(email).strip().lower())
    return _public(user)
