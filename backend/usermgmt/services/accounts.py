import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from usermgmt.api.schemas import AccountProfileIn
from usermgmt.core.security import Actor
from usermgmt.core.storage import BlobStore, StorageError
from usermgmt.models.user import User
from usermgmt.services.audit import system_log

logger = logging.getLogger(__name__)

AVATAR_NAMESPACE = "avatars"


def best_effort(action: Callable[..., Any], *args, description: str, **kwargs) -> bool:
    """Run ``action``; log and swallow any failure. Returns whether it succeeded."""
    try:
        action(*args, **kwargs)
    except Exception:
        logger.exception("Best-effort %s failed, continuing", description)
        return False
    return True


def _fallback_user(db: Session, actor: Actor) -> Optional[User]:
    # only meaningful in single-user mode; never reached with auth enforced
    if not actor.auth_disabled:
        raise RuntimeError("Fallback user requested while authentication is enforced")
    return db.query(User).order_by(User.created_at, User.id).first()


def find_user_by_session_id(db: Session, actor: Actor) -> Optional[User]:
    if actor.session is not None:
        return db.get(User, actor.session.id)
    return _fallback_user(db, actor)


def find_user_by_session_email(db: Session, actor: Actor) -> Optional[User]:
    if actor.session is not None:
        return db.query(User).filter(User.email == actor.session.email).first()
    return _fallback_user(db, actor)


def update_profile(
    db: Session,
    user: User,
    data: AccountProfileIn,
    *,
    store: BlobStore,
    actor: Actor,
) -> User:
    action = data.avatar_action

    if action == "remove" and user.avatar:
        best_effort(store.delete, user.avatar, description=f"avatar removal for user {user.id}")

    avatar_url = user.avatar
    if action == "save" and data.has_avatar_upload():
        try:
            avatar_url = store.upload(data.avatar_file, AVATAR_NAMESPACE)
        except StorageError:
            logger.exception("Failed to upload avatar for user %s", user.id)
            raise

    user.name = data.name
    if action == "remove":
        user.avatar = None
    elif action == "save":
        user.avatar = avatar_url

    db.commit()

    # own commit, after the profile change
    system_log(
        db,
        event="update",
        user_id=actor.user_id,
        entity_id=user.id,
        entity_type="user.account",
        description="User account updated.",
        ip_address=actor.ip_address,
    )

    db.refresh(user)
    return user
