"""
Authentication service: credential checks and JWT issue/verification.

Operators obtain a token from POST /auth/token and send it as
``Authorization: Bearer <token>`` on every rule request.  The token subject
is recorded as ``created_by`` on managed rules.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.jwt_expire_minutes)


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT for *subject* that expires after *expires_delta*."""
    expire = datetime.now(timezone.utc) + (expires_delta or token_lifetime())
    claims = {"sub": subject, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Return the token subject, or ``None`` if the token is invalid or expired."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    return claims.get("sub")


def authenticate_user(username: str, password: str) -> bool:
    """Check *username* / *password* against the configured API users."""
    stored = settings.get_api_users().get(username)
    if not stored:
        return False
    if stored.startswith("$2b$"):
        return pwd_context.verify(password, stored)
    return stored == password
