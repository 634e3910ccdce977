import logging
from typing import Optional

from sqlalchemy.orm import Session

from usermgmt.models.role import UserRole
from usermgmt.services.audit import system_log

logger = logging.getLogger(__name__)


def get_default_role(db: Session) -> Optional[UserRole]:
    return db.query(UserRole).filter(UserRole.is_default.is_(True)).first()


def set_default_role(db: Session, role: UserRole, *, actor_id: str, ip_address: Optional[str]) -> None:
    """
    Make ``role`` the only default role.

    Demoting the current default(s), promoting the target and writing the
    audit entry happen in one transaction. Any failure rolls all three back
    and is re-raised.
    """
    role_id = role.id
    try:
        db.query(UserRole).filter(UserRole.is_default.is_(True)).update(
            {UserRole.is_default: False}, synchronize_session=False
        )
        db.query(UserRole).filter(UserRole.id == role_id).update(
            {UserRole.is_default: True}, synchronize_session=False
        )

        system_log(
            db,
            event="update",
            user_id=actor_id,
            entity_id=role_id,
            entity_type="role.default",
            description="Default role changed.",
            ip_address=ip_address,
            tx=db,
        )

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Default role change to %s rolled back", role_id)
        raise

    logger.info("Role %s is now the default (by %s)", role_id, actor_id)
