from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from backoffice.models.adjustment import AdjustmentStatus, AdjustmentType
from backoffice.models.employee import EmployeeStatus
from backoffice.models.transaction import PaymentMethod, TransactionType

class AdjustmentCreate(BaseModel):
    employee_id: int
    type: AdjustmentType
    # Positivity and cent precision are enforced by the ledger so every caller gets the same error
    amount: Decimal
    date: date
    description: Optional[str] = None

class AdjustmentResponse(BaseModel):
    id: int
    employee_id: int
    type: AdjustmentType
    amount: Decimal
    date: date
    description: Optional[str] = None
    status: AdjustmentStatus
    transaction_id: Optional[int] = None
    salary_payment_id: Optional[int] = None
    created_by: int

    model_config = ConfigDict(from_attributes=True)

class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    amount: Decimal
    category: str
    date: date
    employee_id: Optional[int] = None
    branch_id: int
    payment_method: PaymentMethod
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class AdjustmentRecordResponse(BaseModel):
    adjustment: AdjustmentResponse
    transaction: Optional[TransactionResponse] = None

    model_config = ConfigDict(from_attributes=True)

class EmployeeSummary(BaseModel):
    id: int
    name: str
    branch_id: int
    base_salary: Decimal
    allowance: Decimal
    status: EmployeeStatus

    model_config = ConfigDict(from_attributes=True)

class SalarySummary(BaseModel):
    total_bonuses: Decimal
    total_deductions: Decimal
    total_advances: Decimal
    net_salary: Decimal

class SalaryDetailsResponse(BaseModel):
    employee: EmployeeSummary
    salary_month: str
    period_start: date
    period_end: date
    base_salary: Decimal
    allowance: Decimal
    gross_salary: Decimal
    pending_adjustments: List[AdjustmentResponse]
    summary: SalarySummary

class PaySalaryRequest(BaseModel):
    employee_id: int
    salary_month: str = Field(..., examples=["2025-01"])
    payment_date: date
    notes: Optional[str] = None

class SalaryPaymentResponse(BaseModel):
    id: int
    employee_id: int
    amount: Decimal
    payment_date: date
    salary_month: str
    transaction_id: Optional[int] = None
    notes: Optional[str] = None
    recorded_by: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class PaySalaryResponse(BaseModel):
    salary_payment: SalaryPaymentResponse
    transaction: TransactionResponse
    adjustments_processed: int
    salary_month: str
    summary: SalarySummary

    model_config = ConfigDict(from_attributes=True)

class BranchPayrollBreakdown(BaseModel):
    employee_id: int
    employee_name: str
    total_amount: Decimal
    payment_count: int

class BranchPayrollSummary(BaseModel):
    branch_id: int
    total_paid: Decimal
    count: int
    breakdown: List[BranchPayrollBreakdown]
