# backend/usermgmt/api/deps.py

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from usermgmt.core.config import Settings, get_settings
from usermgmt.core.security import Actor, SessionUser, decode_token
from usermgmt.core.storage import BlobStore

# Only used by Swagger UI for the "Authorize" flow; auto_error off so a
# missing header falls through to the cookie and the bypass check.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

SESSION_COOKIE = "access_token"


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


def resolve_session(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[SessionUser]:
    raw = token or request.cookies.get(SESSION_COOKIE)
    if not raw:
        return None

    try:
        payload = decode_token(raw, settings)
    except ValueError:
        return None

    sub = payload.get("sub")
    email = payload.get("email")
    if not sub or not email:
        return None

    return SessionUser(id=str(sub), email=str(email))


def get_actor(
    request: Request,
    session: Optional[SessionUser] = Depends(resolve_session),
    settings: Settings = Depends(get_settings),
) -> Actor:
    if session is None and not settings.auth_disabled:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized request",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Actor(
        session=session,
        auth_disabled=settings.auth_disabled,
        ip_address=get_client_ip(request),
    )


def require_session(session: Optional[SessionUser] = Depends(resolve_session)) -> SessionUser:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def get_blob_store(request: Request) -> BlobStore:
    # built once per app in create_app
    return request.app.state.blob_store
