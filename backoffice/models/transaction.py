from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Enum, ForeignKey, Text
from sqlalchemy.sql import func
from backoffice.database import Base
import enum

class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    MASTER = "MASTER"


EXPENSE_CATEGORIES = (
    "WORKER_DAILY",
    "EMPLOYEE_SALARIES",
    "RENT",
    "UTILITIES",
    "SUPPLIES",
    "MAINTENANCE",
    "TRANSPORTATION",
    "INVENTORY",
    "OTHER_EXPENSE",
)

class Transaction(Base):
    """Cash journal entry (a cash movement in or out of a branch)."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(TransactionType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    payment_method = Column(Enum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
