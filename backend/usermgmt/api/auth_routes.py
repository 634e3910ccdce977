# backend/usermgmt/api/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from usermgmt.api.deps import require_session
from usermgmt.api.schemas import UserOut
from usermgmt.core.config import Settings, get_settings
from usermgmt.core.database import get_db
from usermgmt.core.security import SessionUser, create_access_token, verify_password
from usermgmt.models.user import User

router = APIRouter()


class LoginIn(BaseModel):
    email: str
    password: str


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _login(db: Session, settings: Settings, email: str, password: str) -> LoginOut:
    email = (email or "").strip().lower()

    user = db.query(User).filter(func.lower(User.email) == email).first()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    token = create_access_token({"sub": user.id, "email": user.email}, settings)

    return LoginOut(
        access_token=token,
        user=UserOut.model_validate(user),
    )


# JSON login used by the frontend
@router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _login(db, settings, payload.email, payload.password)


# OAuth2 form endpoint (Swagger Authorize uses this); username is the email
@router.post("/token", response_model=LoginOut)
def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _login(db, settings, form_data.username, form_data.password or "")


@router.get("/me", response_model=SessionUser)
def me(session: SessionUser = Depends(require_session)):
    return session
