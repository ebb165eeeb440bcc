from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.database import Base
import enum

class EmployeeStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RESIGNED = "RESIGNED"

class Employee(Base):
    """
    Employee record as seen by payroll. Maintained by employee management;
    payroll only reads it.
    """
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    base_salary = Column(Numeric(12, 2), nullable=False, default=0)
    allowance = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(Enum(EmployeeStatus), default=EmployeeStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    branch = relationship("Branch", back_populates="employees")
    adjustments = relationship("EmployeeAdjustment", back_populates="employee")
    salary_payments = relationship("SalaryPayment", back_populates="employee")
