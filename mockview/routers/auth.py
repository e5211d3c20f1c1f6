import logging
from datetime import datetime, timezone
from urllib.parse import urlencode

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from supabase import AuthError, Client

from mockview.config import FRONTEND_URL, BACKEND_URL
from mockview.database import get_db
from mockview.dependencies import CurrentUser, ensure_user_row, get_current_user
from mockview.models.user import User
from mockview.responses import ApiError, success
from mockview.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from mockview.services.oauth import google_enabled, oauth
from mockview.supabase_client import get_supabase, get_supabase_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(auth_user, full_name: str = None, credits: int = None) -> UserResponse:
    metadata = getattr(auth_user, "user_metadata", None) or {}
    created_at = auth_user.created_at
    return UserResponse(
        id=auth_user.id,
        email=auth_user.email,
        full_name=full_name or metadata.get("full_name") or auth_user.email,
        created_at=created_at,
        updated_at=getattr(auth_user, "updated_at", None) or created_at,
        credits=credits,
    )


def _session_response(user: UserResponse, session) -> SessionResponse:
    expires_at = None
    if session.expires_at:
        expires_at = datetime.fromtimestamp(session.expires_at, tz=timezone.utc)
    return SessionResponse(
        user=user,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=expires_at,
    )


@router.post("/register")
async def register(
    payload: RegisterRequest,
    supabase: Client = Depends(get_supabase),
    db: Session = Depends(get_db),
):
    """Register a new user with email and password."""
    try:
        result = supabase.auth.sign_up({
            "email": payload.email,
            "password": payload.password,
            "options": {"data": {"full_name": payload.full_name}},
        })
    except AuthError as e:
        raise ApiError(e.message, "REGISTRATION_ERROR", status.HTTP_400_BAD_REQUEST)

    if not result.user:
        raise ApiError("Registration failed", "REGISTRATION_ERROR", status.HTTP_400_BAD_REQUEST)

    user = _user_response(result.user, full_name=payload.full_name)

    # Our own users row; auth already succeeded so a failure here is not fatal
    try:
        ensure_user_row(db, user.id, user.email, user.full_name)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Unable to save user %s: %s", user.id, e)

    if result.session:
        body = AuthResponse(user=user, session=_session_response(user, result.session))
    else:
        body = AuthResponse(
            user=user,
            session=None,
            message="Please check your email to confirm your account",
        )
    return success(body, status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    payload: LoginRequest,
    supabase: Client = Depends(get_supabase),
    db: Session = Depends(get_db),
):
    """Login with email and password."""
    try:
        result = supabase.auth.sign_in_with_password({
            "email": payload.email,
            "password": payload.password,
        })
    except AuthError as e:
        raise ApiError(e.message, "AUTHENTICATION_ERROR", status.HTTP_401_UNAUTHORIZED)

    if not result.user or not result.session:
        raise ApiError("Authentication failed", "AUTHENTICATION_ERROR", status.HTTP_401_UNAUTHORIZED)

    user = _user_response(result.user)
    user.credits = ensure_user_row(db, user.id, user.email, user.full_name).credits
    return success(AuthResponse(user=user, session=_session_response(user, result.session)))


@router.post("/refresh")
async def refresh_token(
    payload: RefreshTokenRequest,
    supabase: Client = Depends(get_supabase),
):
    """Exchange a refresh token for a new session."""
    try:
        result = supabase.auth.refresh_session(payload.refresh_token)
    except AuthError as e:
        raise ApiError(e.message, "AUTHENTICATION_ERROR", status.HTTP_401_UNAUTHORIZED)

    if not result.user or not result.session:
        raise ApiError("Session expired", "AUTHENTICATION_ERROR", status.HTTP_401_UNAUTHORIZED)

    user = _user_response(result.user)
    return success(AuthResponse(user=user, session=_session_response(user, result.session)))


@router.get("/me")
async def get_current_user_info(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get current authenticated user info."""
    user = db.query(User).filter(User.id == current_user.id).first()
    return success(
        UserResponse(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
            credits=user.credits,
        )
    )


@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    supabase: Client = Depends(get_supabase),
):
    """Send a password reset email. Always reports success."""
    try:
        supabase.auth.reset_password_for_email(
            payload.email,
            {"redirect_to": f"{FRONTEND_URL}/auth/reset-password"},
        )
    except AuthError as e:
        logger.warning("Password reset email failed: %s", e)

    return success({"message": "If an account exists for this email, a reset link has been sent"})


@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    admin: Client = Depends(get_supabase_admin),
):
    """Set a new password for the user holding a recovery session."""
    try:
        admin.auth.admin.update_user_by_id(current_user.id, {"password": payload.password})
    except AuthError as e:
        raise ApiError(e.message, "PASSWORD_RESET_ERROR", status.HTTP_400_BAD_REQUEST)

    return success({"message": "Password updated"})


# Google OAuth
@router.get("/login/google")
async def google_login(request: Request):
    """Initiate Google OAuth login."""
    if not google_enabled():
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Google OAuth not configured",
        )
    redirect_uri = f"{BACKEND_URL}/api/auth/callback/google"
    return await oauth.google.authorize_redirect(request, redirect_uri)


@router.get("/callback/google")
async def google_callback(
    request: Request,
    supabase: Client = Depends(get_supabase),
    db: Session = Depends(get_db),
):
    """Handle Google OAuth callback and open a Supabase session."""
    if not google_enabled():
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Google OAuth not configured",
        )

    if not request.query_params.get("code"):
        raise ApiError("No code from Google", "OAUTH_ERROR", status.HTTP_400_BAD_REQUEST)

    try:
        token = await oauth.google.authorize_access_token(request)
    except OAuthError as e:
        logger.warning("Google authorization failed: %s", e)
        raise ApiError(e.description or e.error or "Google authorization failed", "OAUTH_ERROR",
                       status.HTTP_400_BAD_REQUEST)
    id_token = token.get("id_token")
    if not id_token:
        raise ApiError("Failed to get ID token from Google", "OAUTH_ERROR", status.HTTP_400_BAD_REQUEST)

    try:
        result = supabase.auth.sign_in_with_id_token({"provider": "google", "token": id_token})
    except AuthError as e:
        logger.error("Supabase rejected Google sign-in: %s", e)
        raise ApiError(e.message, "OAUTH_ERROR", status.HTTP_400_BAD_REQUEST)

    if not result.user or not result.session:
        raise ApiError("Authentication failed", "OAUTH_ERROR", status.HTTP_400_BAD_REQUEST)

    user_info = token.get("userinfo") or {}
    ensure_user_row(db, result.user.id, result.user.email, user_info.get("name"))

    params = urlencode({
        "access_token": result.session.access_token,
        "refresh_token": result.session.refresh_token,
    })
    return RedirectResponse(url=f"{FRONTEND_URL}/auth/callback?{params}")
