from sqlalchemy.orm import Session

from backoffice.core.exceptions import AccessDeniedError, NotFoundError
from backoffice.models.employee import Employee
from backoffice.models.user import User
from backoffice.services.access import can_access_branch


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


def get_accessible_employee(db: Session, employee_id: int, actor: User) -> Employee:
    """Load an employee and enforce the actor's branch access in one step."""
    employee = get_employee(db, employee_id)
    if not can_access_branch(actor, employee.branch_id):
        raise AccessDeniedError("You do not have access to this employee.")
    return employee
