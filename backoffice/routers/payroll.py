"""
Payroll Router

Handles HTTP endpoints for adjustments and salary settlement.
All business logic is delegated to the payroll service layer; branch access
is enforced there, the router only requires an authenticated back-office role.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.database import get_db
from backoffice.models.adjustment import AdjustmentStatus
from backoffice.models.user import User, UserRole
from backoffice.routers.auth_deps import require_role
from backoffice.schemas.payroll import (
    AdjustmentCreate, AdjustmentRecordResponse, AdjustmentResponse,
    BranchPayrollSummary, PaySalaryRequest, PaySalaryResponse,
    SalaryDetailsResponse, SalaryPaymentResponse,
)
from backoffice.services.adjustments import AdjustmentLedger
from backoffice.services.salary_calculator import SalaryCalculator
from backoffice.services.salary_payments import SalaryPaymentService
from backoffice.services.settlement import SettlementCoordinator

router = APIRouter(prefix="/payroll", tags=["payroll"])

back_office_user = require_role([UserRole.ADMIN, UserRole.ACCOUNTANT])


@router.post("/adjustments", response_model=AdjustmentRecordResponse, status_code=201)
def create_adjustment(
    request: AdjustmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    """
    Record an advance, bonus or deduction. Advances are paid out in cash immediately.
    """
    record = AdjustmentLedger(db).record_adjustment(
        employee_id=request.employee_id,
        adjustment_type=request.type,
        amount=request.amount,
        effective_date=request.date,
        description=request.description,
        actor=current_user,
    )
    return AdjustmentRecordResponse.model_validate(record)


@router.get("/employees/{employee_id}/adjustments", response_model=List[AdjustmentResponse])
def list_adjustments(
    employee_id: int,
    status: Optional[AdjustmentStatus] = None,
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    return AdjustmentLedger(db).list_adjustments(employee_id, current_user, status=status, salary_month=month)


@router.get("/employees/{employee_id}/salary-details", response_model=SalaryDetailsResponse)
def get_salary_details(
    employee_id: int,
    month: str = Query(..., description="Pay period as YYYY-MM"),
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    """
    Net salary preview for a pay period with the pending adjustments behind it.
    """
    details = SalaryCalculator(db).get_salary_details(employee_id, month, current_user)
    return SalaryDetailsResponse.model_validate(details, from_attributes=True)


@router.post("/pay-salary", response_model=PaySalaryResponse, status_code=201)
def pay_salary(
    request: PaySalaryRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    """
    Settle a pay period: pay the net salary and close its pending adjustments.
    """
    result = SettlementCoordinator(db).pay_salary(
        employee_id=request.employee_id,
        salary_month=request.salary_month,
        payment_date=request.payment_date,
        notes=request.notes,
        actor=current_user,
    )
    return PaySalaryResponse.model_validate(result)


@router.get("/employees/{employee_id}/salary-payments", response_model=List[SalaryPaymentResponse])
def list_salary_payments(
    employee_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    return SalaryPaymentService(db).list_for_employee(employee_id, current_user, start_date, end_date)


@router.get("/branches/{branch_id}/summary", response_model=BranchPayrollSummary)
def get_branch_summary(
    branch_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(back_office_user)
):
    return SalaryPaymentService(db).branch_summary(branch_id, current_user, start_date, end_date)
