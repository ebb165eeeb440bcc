import pytest
from datetime import date
from decimal import Decimal

from backoffice.core.exceptions import AccessDeniedError, DomainValidationError, NotFoundError
from backoffice.core.periods import resolve_salary_month
from backoffice.models.adjustment import AdjustmentStatus, AdjustmentType
from backoffice.models.employee import Employee
from backoffice.services.adjustments import AdjustmentLedger
from backoffice.services.salary_calculator import SalaryCalculator


def _record(db_session, employee, actor, adjustment_type, amount, on):
    return AdjustmentLedger(db_session).record_adjustment(
        employee.id, adjustment_type, amount, on, None, actor
    ).adjustment


@pytest.mark.parametrize("salary_month,expected", [
    ("2025-01", (date(2025, 1, 1), date(2025, 1, 31))),
    ("2024-02", (date(2024, 2, 1), date(2024, 2, 29))),
    ("2025-02", (date(2025, 2, 1), date(2025, 2, 28))),
    ("2025-12", (date(2025, 12, 1), date(2025, 12, 31))),
])
def test_resolve_salary_month(salary_month, expected):
    assert resolve_salary_month(salary_month) == expected


@pytest.mark.parametrize("salary_month", ["2025-13", "2025-00", "2025/01", "25-01", "", "January"])
def test_malformed_month_is_rejected(salary_month):
    with pytest.raises(DomainValidationError):
        resolve_salary_month(salary_month)


def test_net_equals_gross_without_pending_adjustments(db_session, employee, admin_user):
    snapshot = SalaryCalculator(db_session).compute_snapshot(employee.id, "2025-01", admin_user)

    assert snapshot.gross_salary == Decimal("550")
    assert snapshot.net_salary == snapshot.gross_salary
    assert snapshot.contributing_adjustment_ids == ()


def test_snapshot_matches_worked_example(db_session, employee, admin_user):
    bonus = _record(db_session, employee, admin_user, AdjustmentType.BONUS, 100, date(2025, 1, 3))
    deduction = _record(db_session, employee, admin_user, AdjustmentType.DEDUCTION, 30, date(2025, 1, 15))
    advance = _record(db_session, employee, admin_user, AdjustmentType.ADVANCE, 20, date(2025, 1, 20))

    snapshot = SalaryCalculator(db_session).compute_snapshot(employee.id, "2025-01", admin_user)

    assert snapshot.total_bonuses == Decimal("100")
    assert snapshot.total_deductions == Decimal("30")
    assert snapshot.total_advances == Decimal("20")
    assert snapshot.net_salary == Decimal("600")
    assert set(snapshot.contributing_adjustment_ids) == {bonus.id, deduction.id, advance.id}


def test_only_pending_adjustments_inside_the_period_count(db_session, employee, admin_user, branch):
    first_day = _record(db_session, employee, admin_user, AdjustmentType.BONUS, 10, date(2025, 2, 1))
    last_day = _record(db_session, employee, admin_user, AdjustmentType.BONUS, 20, date(2025, 2, 28))
    _record(db_session, employee, admin_user, AdjustmentType.BONUS, 40, date(2025, 1, 31))
    _record(db_session, employee, admin_user, AdjustmentType.BONUS, 80, date(2025, 3, 1))
    processed = _record(db_session, employee, admin_user, AdjustmentType.BONUS, 160, date(2025, 2, 10))
    processed.status = AdjustmentStatus.PROCESSED
    db_session.commit()

    colleague = Employee(name="Omar", branch_id=branch.id, base_salary=Decimal("100"), allowance=Decimal("0"))
    db_session.add(colleague)
    db_session.commit()
    _record(db_session, colleague, admin_user, AdjustmentType.BONUS, 320, date(2025, 2, 10))

    snapshot = SalaryCalculator(db_session).compute_snapshot(employee.id, "2025-02", admin_user)

    assert snapshot.contributing_adjustment_ids == (first_day.id, last_day.id)
    assert snapshot.total_bonuses == Decimal("30")
    assert snapshot.net_salary == Decimal("580")


def test_totals_use_exact_decimal_arithmetic(db_session, employee, admin_user):
    _record(db_session, employee, admin_user, AdjustmentType.BONUS, "0.10", date(2025, 1, 1))
    _record(db_session, employee, admin_user, AdjustmentType.BONUS, "0.20", date(2025, 1, 2))
    _record(db_session, employee, admin_user, AdjustmentType.DEDUCTION, "0.30", date(2025, 1, 3))

    snapshot = SalaryCalculator(db_session).compute_snapshot(employee.id, "2025-01", admin_user)

    assert snapshot.total_bonuses == Decimal("0.30")
    assert snapshot.net_salary == Decimal("550")


def test_compute_snapshot_writes_nothing(db_session, employee, admin_user):
    adjustment = _record(db_session, employee, admin_user, AdjustmentType.BONUS, 10, date(2025, 1, 1))

    SalaryCalculator(db_session).compute_snapshot(employee.id, "2025-01", admin_user)

    assert not db_session.dirty and not db_session.new
    assert db_session.get(type(adjustment), adjustment.id).status == AdjustmentStatus.PENDING


def test_snapshot_access_checks(db_session, employee, outside_accountant, admin_user):
    calculator = SalaryCalculator(db_session)
    with pytest.raises(AccessDeniedError):
        calculator.compute_snapshot(employee.id, "2025-01", outside_accountant)
    with pytest.raises(NotFoundError):
        calculator.compute_snapshot(424242, "2025-01", admin_user)


def test_salary_details_include_raw_pending_adjustments(db_session, employee, accountant):
    bonus = _record(db_session, employee, accountant, AdjustmentType.BONUS, 100, date(2025, 1, 3))

    details = SalaryCalculator(db_session).get_salary_details(employee.id, "2025-01", accountant)

    assert details["employee"].id == employee.id
    assert details["gross_salary"] == Decimal("550")
    assert [a.id for a in details["pending_adjustments"]] == [bonus.id]
    assert details["summary"]["net_salary"] == Decimal("650")
