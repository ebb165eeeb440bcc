"""
User Model with branch-scoped RBAC.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
import enum
from backoffice.database import Base


class UserRole(str, enum.Enum):
    """
    User roles.

    - ADMIN: Access to every branch
    - ACCOUNTANT: Restricted to the single branch assigned in branch_id
    """
    ADMIN = "ADMIN"
    ACCOUNTANT = "ACCOUNTANT"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.ACCOUNTANT, nullable=False)

    # Assigned branch; admins usually have none
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
