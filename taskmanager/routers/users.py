from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from ..config import Settings
from ..database import get_db
from ..dependencies import get_auth_service, get_settings
from ..models import User
from ..schemas.user import MessageResponse, ProfileUpdate, UserResponse
from ..services import users as user_service
from ..services.auth import AuthService
from .auth import get_current_user

router = APIRouter()


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """Change the current user's email and/or password."""
    user = user_service.update_profile(
        db,
        auth.hasher,
        current_user.id,
        email=profile.email,
        password=profile.password,
    )
    return {"message": "Profile updated successfully!", "user": user}


@router.delete("/profile", response_model=MessageResponse)
def delete_account(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Delete the current user together with their tasks and sessions."""
    user_service.delete_user(db, auth.sessions, current_user.id)
    response.delete_cookie(key=settings.session_cookie_name)
    return {"message": "Account deleted successfully."}
