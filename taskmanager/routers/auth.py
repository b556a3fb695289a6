import hmac
import secrets
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..database import get_db
from ..dependencies import get_auth_service, get_google_client, get_settings
from ..models import User
from ..schemas.user import AuthResponse, LoginRequest, MessageResponse, UserCredentials, UserResponse
from ..services.auth import AuthService
from ..services.google import GoogleOAuthClient, OAuthDenied

router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


def set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.session_max_age_seconds,
    )


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> User:
    """Admit the request only if its session cookie resolves to a user.

    Bearer tokens are not consulted here.
    """
    user = auth.get_current_user(db, request.cookies.get(settings.session_cookie_name))
    request.state.user = user
    return user


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    credentials: UserCredentials,
    response: Response,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Create a new user account."""
    result = auth.signup(db, credentials.email, credentials.password)
    set_session_cookie(response, settings, result.session_id)
    return {
        "message": "User registered successfully!",
        "user": result.user,
        "token": result.token,
    }


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Log in with email and password."""
    result = auth.login_local(db, credentials.email, credentials.password)
    set_session_cookie(response, settings, result.session_id)
    return {
        "message": "Logged in successfully!",
        "user": result.user,
        "token": result.token,
    }


@router.get("/google")
def google_login(
    google: GoogleOAuthClient = Depends(get_google_client),
):
    """Send the browser to Google's consent screen."""
    state = secrets.token_urlsafe(16)
    response = RedirectResponse(google.authorization_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        samesite="lax",
        max_age=OAUTH_STATE_MAX_AGE,
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    google: GoogleOAuthClient = Depends(get_google_client),
    settings: Settings = Depends(get_settings),
):
    """Finish the Google flow and hand the token to the client app."""
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if error or not code:
        raise OAuthDenied("Google OAuth authentication failed.")
    if not expected_state or not state or not hmac.compare_digest(expected_state, state):
        raise OAuthDenied("Google OAuth authentication failed.")

    profile = await google.exchange_code(code)
    result = await run_in_threadpool(
        auth.login_with_external_identity, db, "google", profile.subject, profile.email
    )

    target = f"{settings.client_url}/dashboard?{urlencode({'token': result.token})}"
    response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, settings, result.session_id)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return {
        "message": "Current user details fetched successfully.",
        "user": current_user,
    }


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Destroy the session and clear its cookie."""
    auth.logout(db, request.cookies.get(settings.session_cookie_name))
    response.delete_cookie(key=settings.session_cookie_name)
    return {"message": "Logged out successfully."}
