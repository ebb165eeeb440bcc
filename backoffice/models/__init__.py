# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    branch, user, employee,
    transaction, adjustment, salary_payment,
    audit_log
)

# Explicit class exports for cleaner imports
from .branch import Branch
from .user import User, UserRole
from .employee import Employee, EmployeeStatus
from .transaction import Transaction, TransactionType, PaymentMethod
from .adjustment import EmployeeAdjustment, AdjustmentType, AdjustmentStatus
from .salary_payment import SalaryPayment
from .audit_log import AuditLog, AuditAction, AuditEntityType

__all__ = [
    "Branch",
    "User",
    "UserRole",
    "Employee",
    "EmployeeStatus",
    "Transaction",
    "TransactionType",
    "PaymentMethod",
    "EmployeeAdjustment",
    "AdjustmentType",
    "AdjustmentStatus",
    "SalaryPayment",
    "AuditLog",
    "AuditAction",
    "AuditEntityType",
]
