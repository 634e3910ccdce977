from sqlalchemy import Boolean, Column, DateTime, String, func
from usermgmt.core.database import Base, new_id


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String, primary_key=True, default=new_id)

    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)

    # at most one row is the default at any time
    is_default = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
