from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from ..config import Settings
from ..errors import ServerFault, Unauthorized
from ..logging import get_logger

logger = get_logger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class OAuthDenied(Unauthorized):
    """The provider refused the login, or the callback could not be trusted."""
    error_code = "oauth_denied"


@dataclass
class GoogleProfile:
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None


class GoogleOAuthClient:
    """Authorization-code flow against Google's OpenID Connect endpoints."""

    def __init__(self, settings: Settings, timeout: float = 10.0):
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.callback_url = settings.google_callback_url
        self.timeout = timeout

    def _require_config(self) -> None:
        if not (self.client_id and self.client_secret and self.callback_url):
            logger.error("oauth_credentials_missing", provider="google")
            raise ServerFault("Google OAuth is not configured.")

    def authorization_url(self, state: str) -> str:
        self._require_config()
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> GoogleProfile:
        """Trade an authorization code for the caller's Google profile."""
        self._require_config()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=False) as client:
                token_response = await client.post(
                    TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.callback_url,
                        "grant_type": "authorization_code",
                    },
                    headers={"Accept": "application/json"},
                )
                if token_response.status_code in (400, 401):
                    # invalid_grant and friends: the code was rejected.
                    logger.warning(
                        "oauth_code_rejected",
                        provider="google",
                        status_code=token_response.status_code,
                    )
                    raise OAuthDenied("Google OAuth authentication failed.")
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise OAuthDenied("Google OAuth authentication failed.")

                userinfo_response = await client.get(
                    USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                userinfo = userinfo_response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "oauth_exchange_http_error",
                provider="google",
                status_code=exc.response.status_code,
                error=str(exc),
            )
            raise ServerFault("Google OAuth failed.", detail={"error": str(exc)})
        except httpx.HTTPError as exc:
            logger.error("oauth_exchange_error", provider="google", error=str(exc))
            raise ServerFault("Google OAuth failed.", detail={"error": str(exc)})

        subject = userinfo.get("sub") if isinstance(userinfo, dict) else None
        if not subject:
            logger.error("oauth_identity_missing_uid", provider="google")
            raise OAuthDenied("Google OAuth authentication failed.")

        logger.info("oauth_exchange_success", provider="google")
        return GoogleProfile(
            subject=str(subject),
            email=userinfo.get("email") if userinfo.get("email_verified", True) else None,
            name=userinfo.get("name"),
        )
