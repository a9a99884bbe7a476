"""
Google sign-in: turns a Google ID token, or an OAuth access token, into a
verified profile.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from fastapi import HTTPException, status
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@dataclass(frozen=True)
class GoogleProfile:
    email: str
    name: Optional[str]
    subject: Optional[str]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _claims_from_id_token(token: str) -> dict:
    try:
        return google_id_token.verify_oauth2_token(
            token, google_requests.Request(), settings.GOOGLE_CLIENT_ID
        )
    except (ValueError, GoogleAuthError) as e:
        logger.info(f"Google ID token rejected: {e}")
        raise _unauthorized("Invalid Google ID token")


def _claims_from_access_token(token: str) -> dict:
    try:
        response = requests.get(USERINFO_URL, headers={"Authorization": f"Bearer {token}"}, timeout=10)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.info(f"Google access token rejected: {e}")
        raise _unauthorized("Invalid Google access token")


def verify_google_token(id_token: Optional[str] = None, access_token: Optional[str] = None) -> GoogleProfile:
    """
    Verify the ID token against GOOGLE_CLIENT_ID, falling back to the
    userinfo endpoint when only an access token is usable.
    """
    if not id_token and not access_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="idToken or accessToken is required"
        )
    if not settings.GOOGLE_CLIENT_ID:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not configured"
        )

    claims = None
    if id_token:
        try:
            claims = _claims_from_id_token(id_token)
        except HTTPException:
            if not access_token:
                raise
    if claims is None:
        claims = _claims_from_access_token(access_token)

    email = claims.get("email")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google token carries no email address"
        )
    if claims.get("email_verified") is False:
        raise _unauthorized("Google email address is not verified")

    return GoogleProfile(email=email.strip().lower(), name=claims.get("name"), subject=claims.get("sub"))
