"""
Salary Calculator

Derives the net salary of an employee for one pay period from the
adjustments that are still PENDING in that period. Pure read: nothing is
written, and the resulting snapshot is what a settlement finalizes against.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Tuple

from sqlalchemy import select

from backoffice.core.periods import resolve_salary_month
from backoffice.models.adjustment import AdjustmentStatus, AdjustmentType, EmployeeAdjustment
from backoffice.models.employee import Employee
from backoffice.models.user import User
from backoffice.services.base import BaseService
from backoffice.services.employees import get_accessible_employee

ZERO = Decimal("0")


@dataclass(frozen=True)
class SettlementSnapshot:
    employee: Employee
    salary_month: str
    period_start: date
    period_end: date
    base_salary: Decimal
    allowance: Decimal
    gross_salary: Decimal
    total_bonuses: Decimal
    total_deductions: Decimal
    total_advances: Decimal
    net_salary: Decimal
    contributing_adjustment_ids: Tuple[int, ...]
    pending_adjustments: Tuple[EmployeeAdjustment, ...]

    @property
    def summary(self) -> Dict[str, Decimal]:
        return {
            "total_bonuses": self.total_bonuses,
            "total_deductions": self.total_deductions,
            "total_advances": self.total_advances,
            "net_salary": self.net_salary,
        }


class SalaryCalculator(BaseService):

    def compute_snapshot(self, employee_id: int, salary_month: str, actor: User) -> SettlementSnapshot:
        period_start, period_end = resolve_salary_month(salary_month)
        employee = get_accessible_employee(self.db, employee_id, actor)

        pending = tuple(self.db.scalars(
            select(EmployeeAdjustment)
            .where(
                EmployeeAdjustment.employee_id == employee.id,
                EmployeeAdjustment.status == AdjustmentStatus.PENDING,
                EmployeeAdjustment.date >= period_start,
                EmployeeAdjustment.date <= period_end,
            )
            .order_by(EmployeeAdjustment.date, EmployeeAdjustment.id)
        ))

        totals = {adjustment_type: ZERO for adjustment_type in AdjustmentType}
        for adjustment in pending:
            totals[adjustment.type] += Decimal(adjustment.amount)

        base_salary = Decimal(employee.base_salary or 0)
        allowance = Decimal(employee.allowance or 0)
        gross_salary = base_salary + allowance
        net_salary = (
            gross_salary
            + totals[AdjustmentType.BONUS]
            - totals[AdjustmentType.DEDUCTION]
            - totals[AdjustmentType.ADVANCE]
        )

        return SettlementSnapshot(
            employee=employee,
            salary_month=salary_month,
            period_start=period_start,
            period_end=period_end,
            base_salary=base_salary,
            allowance=allowance,
            gross_salary=gross_salary,
            total_bonuses=totals[AdjustmentType.BONUS],
            total_deductions=totals[AdjustmentType.DEDUCTION],
            total_advances=totals[AdjustmentType.ADVANCE],
            net_salary=net_salary,
            contributing_adjustment_ids=tuple(a.id for a in pending),
            pending_adjustments=pending,
        )

    def get_salary_details(self, employee_id: int, salary_month: str, actor: User) -> Dict[str, Any]:
        """Snapshot figures plus the raw pending adjustments, shaped for display."""
        snapshot = self.compute_snapshot(employee_id, salary_month, actor)
        return {
            "employee": snapshot.employee,
            "salary_month": snapshot.salary_month,
            "period_start": snapshot.period_start,
            "period_end": snapshot.period_end,
            "base_salary": snapshot.base_salary,
            "allowance": snapshot.allowance,
            "gross_salary": snapshot.gross_salary,
            "pending_adjustments": list(snapshot.pending_adjustments),
            "summary": snapshot.summary,
        }
