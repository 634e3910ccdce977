from sqlalchemy import Column, DateTime, Integer, String, func
from usermgmt.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # what happened
    event = Column(String, nullable=False)  # e.g. "update"
    description = Column(String, nullable=False, default="")

    # what entity
    entity_id = Column(String, nullable=False, index=True)
    entity_type = Column(String, nullable=False)  # e.g. "user.account", "role.default"

    # who/where
    user_id = Column(String, nullable=False, default="system", index=True)
    ip_address = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
