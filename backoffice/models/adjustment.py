from sqlalchemy import Column, Integer, Numeric, Date, DateTime, Enum, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base
import enum

class AdjustmentType(str, enum.Enum):
    ADVANCE = "ADVANCE"
    BONUS = "BONUS"
    DEDUCTION = "DEDUCTION"

class AdjustmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"

class EmployeeAdjustment(Base):
    """
    Salary modifier awaiting settlement.

    Rows are created PENDING and flipped to PROCESSED exactly once by a
    salary settlement, which also stamps salary_payment_id.
    """
    __tablename__ = "employee_adjustments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_employee_adjustments_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    type = Column(Enum(AdjustmentType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(AdjustmentStatus), default=AdjustmentStatus.PENDING, nullable=False, index=True)
    # Cash-out originated together with an advance
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    salary_payment_id = Column(Integer, ForeignKey("salary_payments.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", back_populates="adjustments")
    salary_payment = relationship("SalaryPayment", back_populates="adjustments")
