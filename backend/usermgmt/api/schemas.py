# backend/usermgmt/api/schemas.py

from datetime import datetime
from typing import Optional

from fastapi import UploadFile
from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

ALLOWED_AVATAR_CT = {"image/jpeg", "image/png", "image/webp", "image/gif"}


def upload_size(file: Optional[UploadFile]) -> int:
    if file is None:
        return 0
    if file.size is not None:
        return file.size
    pos = file.file.tell()
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(pos)
    return size


# ---------- OUT ----------

class RoleOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_default: bool

    class Config:
        from_attributes = True


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    role_id: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountOut(UserOut):
    role: Optional[RoleOut] = None


class MessageOut(BaseModel):
    message: str


# ---------- IN ----------

class AccountProfileIn(BaseModel):
    """Multipart fields of the profile form, checked before any side effect."""

    name: str = Field(min_length=1, max_length=255)
    avatar_file: Optional[UploadFile] = None
    # "save" | "remove"; anything else leaves the avatar alone
    avatar_action: Optional[str] = Field(default=None, max_length=32)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_avatar(self, info: ValidationInfo):
        # a file sent with any other action is ignored, not validated
        if self.avatar_action != "save":
            return self

        size = upload_size(self.avatar_file)
        if size == 0:
            return self

        if (self.avatar_file.content_type or "").lower() not in ALLOWED_AVATAR_CT:
            raise ValueError("Unsupported avatar content type")

        max_bytes = (info.context or {}).get("avatar_max_bytes")
        if max_bytes and size > max_bytes:
            raise ValueError("Avatar file too large")
        return self

    def has_avatar_upload(self) -> bool:
        return upload_size(self.avatar_file) > 0
