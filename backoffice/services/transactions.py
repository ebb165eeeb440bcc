"""
Cash journal.

Only the expense path payroll needs lives here. Entries are flushed into the
caller's session and never committed by the journal itself, so they commit
or roll back together with the operation that originated them.
"""
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from backoffice.core.exceptions import DomainValidationError
from backoffice.core.security import sanitize_input
from backoffice.models.audit_log import AuditEntityType
from backoffice.models.employee import Employee, EmployeeStatus
from backoffice.models.transaction import (
    EXPENSE_CATEGORIES, PaymentMethod, Transaction, TransactionType,
)
from backoffice.models.user import User
from backoffice.services.audit import AuditService
from backoffice.services.base import BaseService

SALARY_CATEGORY = "EMPLOYEE_SALARIES"

# Money columns are Numeric(12, 2)
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1e10")


def to_money(value: Union[Decimal, int, str, float], field: str = "amount") -> Decimal:
    """
    Coerce an incoming amount to a two-place Decimal without going through
    binary floats. Values the money columns cannot hold exactly are rejected.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise DomainValidationError(f"{field} must be a number", details={"field": field})
    if not amount.is_finite():
        raise DomainValidationError(f"{field} must be a finite number", details={"field": field})
    if abs(amount) >= MAX_AMOUNT:
        raise DomainValidationError(
            f"{field} must be less than {MAX_AMOUNT:,.0f}",
            details={"field": field, "max": str(MAX_AMOUNT)}
        )
    if amount != amount.quantize(CENT):
        raise DomainValidationError(
            f"{field} must have at most 2 decimal places",
            details={"field": field}
        )
    return amount.quantize(CENT)


class TransactionJournal(BaseService):

    def create_expense(
        self,
        amount: Union[Decimal, int, str],
        category: str,
        date: date,
        employee_id: Optional[int],
        notes: Optional[str],
        branch_id: int,
        payment_method: PaymentMethod,
        actor: User,
    ) -> Transaction:
        amount = to_money(amount)
        if amount <= 0:
            raise DomainValidationError("Expense amount must be greater than zero")
        if category not in EXPENSE_CATEGORIES:
            raise DomainValidationError(
                f"Unknown expense category: {category}",
                details={"allowed": list(EXPENSE_CATEGORIES)}
            )
        try:
            payment_method = PaymentMethod(payment_method)
        except ValueError:
            raise DomainValidationError(f"Unknown payment method: {payment_method}")

        if category == SALARY_CATEGORY and employee_id is not None:
            employee = self.db.get(Employee, employee_id)
            if employee is None:
                raise DomainValidationError(f"Employee {employee_id} does not exist")
            if employee.status == EmployeeStatus.RESIGNED:
                raise DomainValidationError("Cannot record a salary expense for a resigned employee")

        transaction = Transaction(
            type=TransactionType.EXPENSE,
            amount=amount,
            category=category,
            date=date,
            employee_id=employee_id,
            branch_id=branch_id,
            payment_method=payment_method,
            notes=sanitize_input(notes),
            created_by=actor.id,
        )
        self.db.add(transaction)
        self.db.flush()

        AuditService(self.db).log_create(actor.id, AuditEntityType.TRANSACTION, transaction.id, transaction)
        self.log_info(
            f"Expense {transaction.id} recorded: {amount} {category}",
            branch_id=branch_id,
            transaction_id=transaction.id,
        )
        return transaction
