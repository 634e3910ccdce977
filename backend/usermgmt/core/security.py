# backend/usermgmt/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel

from usermgmt.core.config import Settings

# ONLY pbkdf2_sha256 (no bcrypt anywhere)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# audit actor recorded when no session exists (auth bypass)
AUTH_DISABLED_ACTOR = "auth-disabled"


class SessionUser(BaseModel):
    id: str
    email: str


class Actor(BaseModel):
    session: Optional[SessionUser] = None
    auth_disabled: bool = False
    ip_address: str = "unknown"

    @property
    def user_id(self) -> str:
        return self.session.id if self.session else AUTH_DISABLED_ACTOR


def hash_password(password: str) -> str:
    return pwd_context.hash(password or "")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # users provisioned elsewhere may have no local password
    if not hashed_password:
        return False

    s = str(hashed_password).strip()
    if not s.startswith("$pbkdf2-sha256$"):
        return False

    return pwd_context.verify(plain_password or "", s)


def create_access_token(
    data: dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise ValueError("Invalid token") from e
