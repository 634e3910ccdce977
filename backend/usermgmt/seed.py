# backend/usermgmt/seed.py

import logging

from sqlalchemy.orm import Session

from usermgmt.core.config import Settings, get_settings
from usermgmt.core.database import Base, SessionLocal, engine
from usermgmt.core.logging_config import configure_logging
from usermgmt.core.security import hash_password
from usermgmt.models.audit_log import AuditLog  # noqa: F401  (registers the table)
from usermgmt.models.role import UserRole
from usermgmt.models.user import User

logger = logging.getLogger(__name__)


def seed_if_empty(db: Session, settings: Settings) -> bool:
    """Create starter roles and an administrator when no roles exist yet."""
    if db.query(UserRole).count() > 0:
        return False

    admin_role = UserRole(name="Administrator", description="Full access", is_default=True)
    member_role = UserRole(name="Member", description="Standard access", is_default=False)
    db.add_all([admin_role, member_role])
    db.flush()

    email = settings.seed_admin_email.strip().lower()
    if not db.query(User).filter(User.email == email).first():
        db.add(
            User(
                name="Administrator",
                email=email,
                password_hash=hash_password(settings.seed_admin_password),
                role_id=admin_role.id,
            )
        )

    db.commit()
    logger.info("Seeded roles and administrator %s", email)
    return True


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    # make sure tables exist (DEV ONLY, migrations own the schema elsewhere)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if not seed_if_empty(db, settings):
            logger.info("Roles already present, nothing to seed")
    finally:
        db.close()


if __name__ == "__main__":
    main()
