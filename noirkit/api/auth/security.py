from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72

def validate_password_strength(password: str) -> str:
    """
    Owner account passwords:
    - at least 8 characters
    - at least one lowercase letter, one uppercase letter and one digit
    """
    if password is None:
        raise ValueError("Password cannot be empty")

    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")

    if not (
        any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
    ):
        raise ValueError(
            "Password must include at least one uppercase letter, one lowercase letter, and one number"
        )

    return password

def _fit_bcrypt_limit(password: str) -> str:
    # bcrypt only looks at the first 72 bytes; cut on a UTF-8 boundary
    raw = password.encode("utf-8")
    if len(raw) <= BCRYPT_MAX_BYTES:
        return password
    return raw[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")

def hash_password(password: str) -> str:
    return pwd_context.hash(_fit_bcrypt_limit(password))

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(_fit_bcrypt_limit(password), password_hash)

def create_access_token(*, secret: str, user_id: str, username: str, expires_minutes: int = 60) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "username": username,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

def decode_access_token(*, secret: str, token: str) -> dict[str, Any]:
    # raises jwt.PyJWTError if invalid or expired
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
