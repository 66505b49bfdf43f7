"""Security and authentication utilities."""
import secrets
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional
import argon2
import jwt
from fastapi import HTTPException, Request

from meetpoll.core import config
from meetpoll.core.constants import TOKEN_BYTES

# Argon2 hasher for the coordinator password
ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def generate_participant_token() -> str:
    """Generate an unguessable participant capability token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its Argon2 hash."""
    try:
        ph.verify(password_hash, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)
    return encoded_jwt


def verify_admin_token(request: Request) -> dict:
    """Verify JWT token from cookie and return payload."""
    token = request.cookies.get("admin_token")

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
        if not payload.get("is_admin"):
            raise HTTPException(status_code=403, detail="Not authorized")
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


def verify_admin_password(password: str) -> bool:
    """Verify the coordinator password.

    Supports both hashed passwords (starting with $argon2) and plaintext.
    To hash a password for production, run:
        python hash_password.py 'your-password'
    """
    stored_password = config.settings.ADMIN_PASSWORD

    if stored_password.startswith("$argon2"):
        return verify_password(password, stored_password)
    return hmac.compare_digest(password.encode(), stored_password.encode())


def verify_webhook_secret(presented: Optional[str]) -> bool:
    """Check the shared secret sent by the database webhook."""
    expected = config.settings.WEBHOOK_SECRET
    if not expected or not presented:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())
