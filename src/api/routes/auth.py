"""
Authentication API routes for the Task Tracker API
Registration, login, profile, Google sign-in and password recovery
"""
import json
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from ...database.database import get_session
from ...models.user import (
    UserCreate,
    UserLogin,
    UserPublic,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
)
from ...services.auth_service import AuthService
from ...services.email_service import EmailService
from ...services.oauth_service import GoogleOAuthClient, OAuthError
from ...api.deps import (
    AuthenticatedUser,
    get_auth_service,
    get_current_user,
    get_email_service,
    get_oauth_client,
)
from ...utils.errors import AppError, InternalServerError, ServiceUnavailableError
from ...utils.logging import log_error
from ...utils.responses import success_response


router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: UserCreate,
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        data = auth.register(session, request)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "POST /api/auth/register")
        raise InternalServerError("Error registering user")

    return success_response(
        data=data,
        message="User registered successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(
    request: UserLogin,
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        data = auth.login(session, request.username, request.password)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "POST /api/auth/login")
        raise InternalServerError("Error logging in")

    return success_response(data=data, message="Login successful")


@router.get("/profile")
async def profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.get_profile(session, current_user)
    return success_response(data=UserPublic.model_validate(user).model_dump(mode="json"))


@router.put("/password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.change_password(session, current_user, request.current_password, request.new_password)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "PUT /api/auth/password", current_user.id)
        raise InternalServerError("Error changing password")

    return success_response(message="Password changed successfully")


# Google sign-in

@router.get("/google")
async def google_login(oauth: Optional[GoogleOAuthClient] = Depends(get_oauth_client)):
    if oauth is None:
        raise ServiceUnavailableError("Google OAuth is not configured")
    return RedirectResponse(oauth.authorization_url())


@router.get("/google/callback")
async def google_callback(
    code: Optional[str] = Query(None),
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
    oauth: Optional[GoogleOAuthClient] = Depends(get_oauth_client),
):
    """Finish Google sign-in and hand the token to the frontend through the redirect URL."""
    if oauth is None:
        return RedirectResponse("/?error=google_not_configured")
    if not code:
        return RedirectResponse("/?error=google_auth_failed")

    try:
        profile = await oauth.exchange_code(code)
        data = auth.external_login(session, profile)
    except (OAuthError, AppError) as e:
        log_error(e, "GET /api/auth/google/callback")
        return RedirectResponse("/?error=auth_failed")

    user = {"id": data["id"], "username": data["username"], "email": data["email"]}
    query = urlencode({"token": data["token"], "user": json.dumps(user)})
    return RedirectResponse(f"/?{query}")


# Password recovery

@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
    email_service: EmailService = Depends(get_email_service),
):
    try:
        auth.forgot_password(session, request.email, email_service)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "POST /api/auth/forgot-password")
        raise InternalServerError("Error processing request")

    return success_response(message="Password reset email sent. Check your inbox.")


@router.get("/verify-reset-token")
async def verify_reset_token(
    token: str = Query(""),
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    auth.check_reset_token(session, token)
    return success_response(message="Token is valid")


@router.post("/reset-password")
async def reset_password(
    request: ResetPasswordRequest,
    session: Session = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.reset_password(session, request.token, request.password)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "POST /api/auth/reset-password")
        raise InternalServerError("Error resetting password")

    return success_response(message="Password reset successful. Please login with your new password.")
