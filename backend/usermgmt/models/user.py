from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship
from usermgmt.core.database import Base, new_id
from usermgmt.models.role import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)

    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)

    # blob reference (URL or path), null when no avatar
    avatar = Column(String, nullable=True)

    # null for accounts provisioned by an external identity provider
    password_hash = Column(String, nullable=True)

    role_id = Column(String, ForeignKey("user_roles.id", ondelete="SET NULL"), nullable=True, index=True)
    role = relationship(UserRole, lazy="joined")

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
