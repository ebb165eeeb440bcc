"""
Adjustment Ledger

Records advances, bonuses and deductions against an employee. Every
adjustment is born PENDING and waits for a salary settlement to consume it.

An ADVANCE is paid out on the spot: its cash movement and its adjustment row
are written in the same unit of work, so neither can exist without the other.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.exceptions import DomainValidationError
from backoffice.core.periods import resolve_salary_month
from backoffice.core.security import sanitize_input
from backoffice.database import atomic
from backoffice.models.adjustment import AdjustmentStatus, AdjustmentType, EmployeeAdjustment
from backoffice.models.audit_log import AuditEntityType
from backoffice.models.employee import Employee
from backoffice.models.transaction import PaymentMethod, Transaction
from backoffice.models.user import User
from backoffice.services.audit import AuditService
from backoffice.services.base import BaseService
from backoffice.services.employees import get_accessible_employee
from backoffice.services.transactions import SALARY_CATEGORY, TransactionJournal, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentPolicy:
    # Whether creating the adjustment pays cash out immediately
    originates_cash_movement: bool
    default_description: Optional[str] = None


ADJUSTMENT_POLICIES: Dict[AdjustmentType, AdjustmentPolicy] = {
    AdjustmentType.ADVANCE: AdjustmentPolicy(
        originates_cash_movement=True,
        default_description=settings.payroll.default_advance_note,
    ),
    AdjustmentType.BONUS: AdjustmentPolicy(originates_cash_movement=False),
    AdjustmentType.DEDUCTION: AdjustmentPolicy(originates_cash_movement=False),
}


@dataclass
class AdjustmentRecord:
    adjustment: EmployeeAdjustment
    transaction: Optional[Transaction] = None


def _parse_type(adjustment_type: Union[AdjustmentType, str]) -> AdjustmentType:
    try:
        return AdjustmentType(adjustment_type)
    except ValueError:
        raise DomainValidationError(
            f"Unknown adjustment type: {adjustment_type}",
            details={"allowed": [t.value for t in AdjustmentType]}
        )


class AdjustmentLedger(BaseService):
    """The only writer of new EmployeeAdjustment rows."""

    def __init__(self, db: Session, journal: Optional[TransactionJournal] = None):
        super().__init__(db)
        self.journal = journal or TransactionJournal(db)
        self.audit = AuditService(db)

    def record_adjustment(
        self,
        employee_id: int,
        adjustment_type: Union[AdjustmentType, str],
        amount: Union[Decimal, int, str],
        effective_date: date,
        description: Optional[str],
        actor: User,
    ) -> AdjustmentRecord:
        # All precondition checks run before anything is written
        adjustment_type = _parse_type(adjustment_type)
        amount = to_money(amount)
        if amount <= 0:
            raise DomainValidationError("Adjustment amount must be greater than zero")
        employee = get_accessible_employee(self.db, employee_id, actor)

        policy = ADJUSTMENT_POLICIES[adjustment_type]
        description = sanitize_input(description)

        with atomic(self.db):
            transaction = None
            if policy.originates_cash_movement:
                transaction = self.journal.create_expense(
                    amount=amount,
                    category=SALARY_CATEGORY,
                    date=effective_date,
                    employee_id=employee.id,
                    notes=description or policy.default_description,
                    branch_id=employee.branch_id,
                    payment_method=PaymentMethod.CASH,
                    actor=actor,
                )

            adjustment = self._persist(employee, adjustment_type, amount, effective_date, description, transaction, actor)
            self.audit.log_create(actor.id, AuditEntityType.EMPLOYEE_ADJUSTMENT, adjustment.id, adjustment)

        logger.info(
            f"Recorded {adjustment_type.value} adjustment {adjustment.id} for employee {employee.id}",
            extra={"employee_id": employee.id, "transaction_id": adjustment.transaction_id}
        )
        return AdjustmentRecord(adjustment=adjustment, transaction=transaction)

    def _persist(
        self,
        employee: Employee,
        adjustment_type: AdjustmentType,
        amount: Decimal,
        effective_date: date,
        description: Optional[str],
        transaction: Optional[Transaction],
        actor: User,
    ) -> EmployeeAdjustment:
        adjustment = EmployeeAdjustment(
            employee_id=employee.id,
            type=adjustment_type,
            amount=amount,
            date=effective_date,
            description=description,
            status=AdjustmentStatus.PENDING,
            transaction_id=transaction.id if transaction is not None else None,
            created_by=actor.id,
        )
        self.db.add(adjustment)
        self.db.flush()
        return adjustment

    def list_adjustments(
        self,
        employee_id: int,
        actor: User,
        status: Optional[AdjustmentStatus] = None,
        salary_month: Optional[str] = None,
    ) -> List[EmployeeAdjustment]:
        employee = get_accessible_employee(self.db, employee_id, actor)

        stmt = select(EmployeeAdjustment).where(EmployeeAdjustment.employee_id == employee.id)
        if status is not None:
            stmt = stmt.where(EmployeeAdjustment.status == AdjustmentStatus(status))
        if salary_month:
            start, end = resolve_salary_month(salary_month)
            stmt = stmt.where(EmployeeAdjustment.date >= start, EmployeeAdjustment.date <= end)

        stmt = stmt.order_by(EmployeeAdjustment.date.desc(), EmployeeAdjustment.id.desc())
        return list(self.db.scalars(stmt))
