from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets
import jwt
from backoffice.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    """Verify a plain password against its hash. Accounts without a password never match."""
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(subject: str, company: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token whose subject is the employee uuid.
    Employee uuids are only unique within a company, so the company uuid
    travels with it.
    If expires_delta is not provided, it defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "company": company, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and verify a token. Raises jwt.PyJWTError on any failure."""
    return jwt.decode(token, settings.APP_SECRET_STRING, algorithms=[settings.ALGORITHM])


def generate_secure_token() -> str:
    """Random single-use token for email verification and password reset links."""
    return secrets.token_hex(32)
