from fastapi import Request

from .config import Settings
from .services.auth import AuthService
from .services.google import GoogleOAuthClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def get_google_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.google
