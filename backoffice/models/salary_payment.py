from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base

class SalaryPayment(Base):
    __tablename__ = "salary_payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_salary_payments_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    salary_month = Column(String(7), nullable=False)  # YYYY-MM
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    notes = Column(Text, nullable=True)
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", back_populates="salary_payments")
    adjustments = relationship("EmployeeAdjustment", back_populates="salary_payment")
