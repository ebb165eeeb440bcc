"""
Salary Settlement

Closes one pay period for one employee: pays the net salary out of the cash
journal and marks every adjustment that contributed to it as PROCESSED.

Flow:
1. Snapshot the pending adjustments (SalaryCalculator).
2. Reject resigned employees and non-positive net salary before anything
   is written.
3. In one unit of work: create the SalaryPayment, originate the expense,
   link the two, conditionally flip the snapshot's adjustments and audit.

The adjustment update only touches rows that are still PENDING. If fewer
rows change than the snapshot holds, another settlement got there first and
the whole unit is rolled back with ConflictError.
"""
import logging
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import text, update
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.exceptions import (
    ConflictError, DomainValidationError, InvalidStateError, SettlementTimeoutError, StorageError,
)
from backoffice.core.security import sanitize_input
from backoffice.database import atomic, is_query_canceled
from backoffice.models.adjustment import AdjustmentStatus, EmployeeAdjustment
from backoffice.models.audit_log import AuditEntityType
from backoffice.models.employee import EmployeeStatus
from backoffice.models.salary_payment import SalaryPayment
from backoffice.models.transaction import PaymentMethod, Transaction
from backoffice.models.user import User
from backoffice.services.audit import AuditService
from backoffice.services.base import BaseService
from backoffice.services.salary_calculator import SalaryCalculator, SettlementSnapshot
from backoffice.services.transactions import SALARY_CATEGORY, TransactionJournal

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    salary_payment: SalaryPayment
    transaction: Transaction
    adjustments_processed: int
    salary_month: str
    summary: Dict[str, Decimal]


class UnitDeadline:
    """Wall-clock budget for one settlement, checked between writes."""

    clock = staticmethod(time.monotonic)

    def __init__(self, seconds: Optional[float]):
        self.seconds = seconds if seconds and seconds > 0 else None
        self.expires_at = self.clock() + self.seconds if self.seconds else None

    def remaining_ms(self) -> Optional[int]:
        if self.expires_at is None:
            return None
        return max(1, int((self.expires_at - self.clock()) * 1000))

    def check(self, step: str) -> None:
        if self.expires_at is not None and self.clock() > self.expires_at:
            raise SettlementTimeoutError(details={"step": step, "timeout_seconds": self.seconds})


class SettlementCoordinator(BaseService):

    def __init__(
        self,
        db: Session,
        calculator: Optional[SalaryCalculator] = None,
        journal: Optional[TransactionJournal] = None,
        audit: Optional[AuditService] = None,
    ):
        super().__init__(db)
        self.calculator = calculator or SalaryCalculator(db)
        self.journal = journal or TransactionJournal(db)
        self.audit = audit or AuditService(db)

    def pay_salary(
        self,
        employee_id: int,
        salary_month: str,
        payment_date: date,
        notes: Optional[str],
        actor: User,
        timeout: Optional[float] = None,
    ) -> SettlementResult:
        deadline = UnitDeadline(settings.payroll.settlement_timeout_seconds if timeout is None else timeout)

        locked = settings.payroll.advisory_lock and self._acquire_employee_lock(employee_id)
        try:
            snapshot = self.calculator.compute_snapshot(employee_id, salary_month, actor)
            if snapshot.employee.status == EmployeeStatus.RESIGNED:
                raise DomainValidationError(
                    "Cannot pay salary to a resigned employee",
                    details={"employee_id": snapshot.employee.id}
                )
            if snapshot.net_salary <= 0:
                raise InvalidStateError(
                    "Net salary must be greater than zero",
                    details={"salary_month": salary_month, "net_salary": str(snapshot.net_salary)}
                )
        except Exception:
            # Releases the transaction-scoped advisory lock
            if locked:
                self.db.rollback()
            raise

        notes = sanitize_input(notes) or settings.payroll.default_salary_note.format(month=salary_month)

        return self._settle(snapshot, salary_month, payment_date, notes, actor, deadline)

    def _settle(
        self,
        snapshot: SettlementSnapshot,
        salary_month: str,
        payment_date: date,
        notes: str,
        actor: User,
        deadline: UnitDeadline,
    ) -> SettlementResult:
        try:
            with atomic(self.db):
                self._apply_statement_timeout(deadline)

                salary_payment = SalaryPayment(
                    employee_id=snapshot.employee.id,
                    amount=snapshot.net_salary,
                    payment_date=payment_date,
                    salary_month=salary_month,
                    notes=notes,
                    recorded_by=actor.id,
                )
                self.db.add(salary_payment)
                self.db.flush()
                deadline.check("salary_payment")

                transaction = self.journal.create_expense(
                    amount=snapshot.net_salary,
                    category=SALARY_CATEGORY,
                    date=payment_date,
                    employee_id=snapshot.employee.id,
                    notes=notes,
                    branch_id=snapshot.employee.branch_id,
                    payment_method=PaymentMethod.CASH,
                    actor=actor,
                )
                deadline.check("expense")

                salary_payment.transaction_id = transaction.id
                self.db.flush()

                processed = self._mark_processed(snapshot, salary_payment)
                deadline.check("adjustments")

                self.audit.log_create(
                    actor.id,
                    AuditEntityType.SALARY_PAYMENT,
                    salary_payment.id,
                    {
                        "salary_payment": salary_payment,
                        "transaction": transaction,
                        "adjustments_processed": processed,
                    }
                )
                deadline.check("audit")
        except StorageError as e:
            # statement_timeout expiry surfaces from the driver as a cancelled query
            if is_query_canceled(e.__cause__):
                raise SettlementTimeoutError(
                    details={"step": "statement", "timeout_seconds": deadline.seconds}
                ) from e.__cause__
            raise

        employee_id = snapshot.employee.id

        logger.info(
            f"Salary {salary_month} settled for employee {employee_id}",
            extra={
                "employee_id": employee_id,
                "salary_payment_id": salary_payment.id,
                "transaction_id": transaction.id,
                "adjustments_processed": processed,
            }
        )
        return SettlementResult(
            salary_payment=salary_payment,
            transaction=transaction,
            adjustments_processed=processed,
            salary_month=salary_month,
            summary=snapshot.summary,
        )

    def _mark_processed(self, snapshot: SettlementSnapshot, salary_payment: SalaryPayment) -> int:
        """
        Compare-and-swap the snapshot's adjustments from PENDING to PROCESSED.
        Raises ConflictError unless every one of them was still PENDING.
        """
        expected = len(snapshot.contributing_adjustment_ids)
        if expected == 0:
            return 0

        result = self.db.execute(
            update(EmployeeAdjustment)
            .where(
                EmployeeAdjustment.id.in_(snapshot.contributing_adjustment_ids),
                EmployeeAdjustment.status == AdjustmentStatus.PENDING,
            )
            .values(status=AdjustmentStatus.PROCESSED, salary_payment_id=salary_payment.id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != expected:
            self.log_warning(
                f"Settlement conflict for employee {snapshot.employee.id}: "
                f"{result.rowcount} of {expected} adjustments still pending",
                employee_id=snapshot.employee.id,
            )
            raise ConflictError(
                "Some adjustments were already settled by another salary payment. Reload and retry.",
                details={"expected": expected, "updated": result.rowcount}
            )
        return expected

    def _acquire_employee_lock(self, employee_id: int) -> bool:
        # Released automatically when the surrounding transaction ends
        if self.db.get_bind().dialect.name != "postgresql":
            return False
        self.db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": employee_id})
        return True

    def _apply_statement_timeout(self, deadline: UnitDeadline) -> None:
        remaining = deadline.remaining_ms()
        if remaining is not None and self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text(f"SET LOCAL statement_timeout = {int(remaining)}"))
