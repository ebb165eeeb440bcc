"""
Read-only payroll listings: an employee's payment history and a per-branch
summary of salaries paid over a date range.
"""
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from backoffice.models.employee import Employee
from backoffice.models.salary_payment import SalaryPayment
from backoffice.models.user import User
from backoffice.services.access import ensure_branch_access
from backoffice.services.base import BaseService
from backoffice.services.employees import get_accessible_employee


def _in_range(stmt, start_date: Optional[date], end_date: Optional[date]):
    if start_date:
        stmt = stmt.where(SalaryPayment.payment_date >= start_date)
    if end_date:
        stmt = stmt.where(SalaryPayment.payment_date <= end_date)
    return stmt


class SalaryPaymentService(BaseService):

    def list_for_employee(
        self,
        employee_id: int,
        actor: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[SalaryPayment]:
        employee = get_accessible_employee(self.db, employee_id, actor)
        stmt = select(SalaryPayment).where(SalaryPayment.employee_id == employee.id)
        stmt = _in_range(stmt, start_date, end_date)
        stmt = stmt.order_by(SalaryPayment.payment_date.desc(), SalaryPayment.id.desc())
        return list(self.db.scalars(stmt))

    def branch_summary(
        self,
        branch_id: int,
        actor: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Total salaries paid in a branch, broken down per employee.

        Returns:
            {"branch_id", "total_paid", "count", "breakdown": [{employee_id,
            employee_name, total_amount, payment_count}, ...]}
        """
        ensure_branch_access(actor, branch_id)

        stmt = (
            select(SalaryPayment, Employee.name)
            .join(Employee, Employee.id == SalaryPayment.employee_id)
            .where(Employee.branch_id == branch_id)
        )
        stmt = _in_range(stmt, start_date, end_date).order_by(Employee.name, SalaryPayment.id)

        breakdown: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()
        total_paid = Decimal("0")
        count = 0
        for payment, employee_name in self.db.execute(stmt):
            amount = Decimal(payment.amount)
            total_paid += amount
            count += 1
            row = breakdown.setdefault(payment.employee_id, {
                "employee_id": payment.employee_id,
                "employee_name": employee_name,
                "total_amount": Decimal("0"),
                "payment_count": 0,
            })
            row["total_amount"] += amount
            row["payment_count"] += 1

        return {
            "branch_id": branch_id,
            "total_paid": total_paid,
            "count": count,
            "breakdown": list(breakdown.values()),
        }
