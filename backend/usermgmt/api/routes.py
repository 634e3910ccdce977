# backend/usermgmt/api/routes.py

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from usermgmt.api.deps import get_actor, get_blob_store
from usermgmt.api.schemas import AccountOut, AccountProfileIn, MessageOut, UserOut
from usermgmt.core.config import Settings, get_settings
from usermgmt.core.database import get_db
from usermgmt.core.security import Actor
from usermgmt.core.storage import BlobStore, StorageError
from usermgmt.models.role import UserRole
from usermgmt.services.accounts import (
    find_user_by_session_email,
    find_user_by_session_id,
    update_profile,
)
from usermgmt.services.roles import set_default_role

router = APIRouter()

RECORD_NOT_FOUND = "Record not found. Someone might have deleted it already."

# ---------- ACCOUNT ----------

@router.get("/account", response_model=AccountOut)
def get_account(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    user = find_user_by_session_email(db, actor)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RECORD_NOT_FOUND)

    return AccountOut.model_validate(user)


@router.post("/account/profile", response_model=UserOut)
def update_account_profile(
    name: Optional[str] = Form(None),
    avatar_file: Optional[UploadFile] = File(None, alias="avatarFile"),
    avatar_action: Optional[str] = Form(None, alias="avatarAction"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
):
    user = find_user_by_session_id(db, actor)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RECORD_NOT_FOUND)

    try:
        data = AccountProfileIn.model_validate(
            {"name": name, "avatar_file": avatar_file, "avatar_action": avatar_action},
            context={"avatar_max_bytes": settings.avatar_max_bytes},
        )
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid input.")

    try:
        user = update_profile(db, user, data, store=store, actor=actor)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload avatar.",
        )

    return UserOut.model_validate(user)

# ---------- ROLES ----------

@router.patch("/roles/{role_id}/default", response_model=MessageOut)
def make_default_role(
    role_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    role_id = (role_id or "").strip()
    if not role_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role ID is required.")

    role = db.get(UserRole, role_id)
    if not role:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Role with ID {role_id} not found.")

    set_default_role(db, role, actor_id=actor.user_id, ip_address=actor.ip_address)

    return MessageOut(message="Role successfully set as the default.")
