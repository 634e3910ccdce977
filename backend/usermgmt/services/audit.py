import logging
from typing import Optional

from sqlalchemy.orm import Session

from usermgmt.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def system_log(
    db: Session,
    *,
    event: str,
    user_id: str,
    entity_id: str,
    entity_type: str,
    description: str,
    ip_address: Optional[str],
    tx: Optional[Session] = None,
) -> AuditLog:
    """
    Append one audit entry.

    With ``tx`` the entry joins that open transaction and is only flushed; it
    commits or rolls back together with the caller's other writes. Without it
    the entry is committed on its own.
    """
    log = AuditLog(
        event=event,
        user_id=user_id,
        entity_id=str(entity_id),
        entity_type=entity_type,
        description=description,
        ip_address=ip_address,
    )

    if tx is not None:
        tx.add(log)
        tx.flush()
        return log

    db.add(log)
    db.commit()
    logger.info("audit %s %s %s by %s", event, entity_type, entity_id, user_id)
    return log
