from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.common.schemas import MessageOut
from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.auth.schemas import (
    EmailIn, GoogleAuthIn, LoginIn, ResetPasswordIn, SessionOut, SignupIn, TokenOut
)
from backoffice.modules.auth.service import AuthService

auth_router = APIRouter(tags=["Auth"])


@auth_router.post("/signup", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def signup(data: SignupIn, db: Session = Depends(get_db)):
    """Create a company and its owner account."""
    return AuthService(db).signup(data)


@auth_router.post("/login", response_model=TokenOut)
def login(data: LoginIn, db: Session = Depends(get_db)):
    return AuthService(db).login(data.email, data.password)


@auth_router.post("/google", response_model=TokenOut)
def google_sign_in(data: GoogleAuthIn, response: Response, db: Session = Depends(get_db)):
    """
    Sign in with a Google ID token (or access token). Unknown addresses get
    a new company with the Google account as owner (201).
    """
    session, created = AuthService(db).google_sign_in(data.id_token, data.access_token)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return session


@auth_router.get("/me", response_model=SessionOut)
def me(
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.get_identity)
):
    return AuthService(db).me(identity)


@auth_router.get("/verify-email", response_model=MessageOut)
def verify_email(token: str = Query(...), db: Session = Depends(get_db)):
    AuthService(db).verify_email(token)
    return MessageOut(message="Email verified successfully")


@auth_router.post("/resend-verification", response_model=MessageOut)
def resend_verification(data: EmailIn, db: Session = Depends(get_db)):
    AuthService(db).resend_verification(data.email)
    return MessageOut(message="If the account exists and is not verified, a new link has been sent")


@auth_router.post("/forgot-password", response_model=MessageOut)
def forgot_password(data: EmailIn, db: Session = Depends(get_db)):
    AuthService(db).request_password_reset(data.email)
    return MessageOut(message="If the account exists, a reset link has been sent")


@auth_router.post("/reset-password", response_model=MessageOut)
def reset_password(data: ResetPasswordIn, db: Session = Depends(get_db)):
    AuthService(db).reset_password(data.token, data.password)
    return MessageOut(message="Password has been reset")
