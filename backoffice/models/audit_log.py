from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.sql import func
from backoffice.database import Base
import enum

class AuditAction(str, enum.Enum):
    CREATE = "CREATE"

class AuditEntityType(str, enum.Enum):
    TRANSACTION = "TRANSACTION"
    EMPLOYEE_ADJUSTMENT = "EMPLOYEE_ADJUSTMENT"
    SALARY_PAYMENT = "SALARY_PAYMENT"

class AuditLog(Base):
    """Append-only audit trail. Rows are never updated or deleted."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(Enum(AuditAction), nullable=False)
    entity_type = Column(Enum(AuditEntityType), nullable=False, index=True)
    entity_id = Column(String, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    changes = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
