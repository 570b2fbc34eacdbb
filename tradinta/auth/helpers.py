"""
Password hashing and access tokens.

A token identifies the user and nothing more: `sub` (the user id), `email`
for log lines, `iat` and `exp`. Role and restrictions are looked up on every
request by the auth middleware, never read from the token.
"""

from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import JWTError, jwt
from fastapi import HTTPException, status

from tradinta.config import settings

_pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

INVALID_TOKEN = "Invalid or expired token"


def hash_password(plain: str) -> str:
    return _pwd_ctx.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    # Accounts created without a password can never log in with one.
    return bool(hashed) and _pwd_ctx.verify(plain, hashed)


def create_access_token(
    user_id: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": user_id, "iat": issued, "exp": issued + lifetime}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry. A token without `sub` is rejected too."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        claims = None
    if not claims or not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_TOKEN,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
