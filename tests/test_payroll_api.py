import pytest
from decimal import Decimal
from fastapi import status

from backoffice.models.adjustment import AdjustmentStatus, EmployeeAdjustment
from backoffice.models.salary_payment import SalaryPayment


def _add_adjustment(client, headers, employee, adj_type, amount, on="2025-01-10"):
    return client.post(
        "/api/payroll/adjustments",
        headers=headers,
        json={"employee_id": employee.id, "type": adj_type, "amount": str(amount), "date": on}
    )


def test_create_bonus_adjustment(client, employee, accountant, auth_headers):
    response = _add_adjustment(client, auth_headers(accountant), employee, "BONUS", 100)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["adjustment"]["type"] == "BONUS"
    assert data["adjustment"]["status"] == "PENDING"
    assert Decimal(data["adjustment"]["amount"]) == Decimal("100")
    assert data["transaction"] is None


def test_create_advance_returns_linked_transaction(client, employee, admin_user, auth_headers):
    response = _add_adjustment(client, auth_headers(admin_user), employee, "ADVANCE", 20)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["transaction"]["category"] == "EMPLOYEE_SALARIES"
    assert data["transaction"]["payment_method"] == "CASH"
    assert data["adjustment"]["transaction_id"] == data["transaction"]["id"]


def test_zero_amount_is_a_validation_error(client, db_session, employee, admin_user, auth_headers):
    response = _add_adjustment(client, auth_headers(admin_user), employee, "BONUS", 0)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert db_session.query(EmployeeAdjustment).count() == 0


def test_sub_cent_amount_is_a_validation_error(client, db_session, employee, admin_user, auth_headers):
    response = _add_adjustment(client, auth_headers(admin_user), employee, "ADVANCE", "0.004")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert db_session.query(EmployeeAdjustment).count() == 0


def test_outside_branch_is_forbidden(client, employee, outside_accountant, auth_headers):
    response = _add_adjustment(client, auth_headers(outside_accountant), employee, "DEDUCTION", 10)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["code"] == "PERMISSION_DENIED"


def test_requests_require_authentication(client, employee, expired_token):
    response = client.get(f"/api/payroll/employees/{employee.id}/salary-details?month=2025-01")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = client.get(
        f"/api/payroll/employees/{employee.id}/salary-details?month=2025-01",
        headers={"Authorization": f"Bearer {expired_token}"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["message"] == "TOKEN_EXPIRED"


def test_salary_details_and_payment_flow(client, db_session, employee, accountant, auth_headers):
    headers = auth_headers(accountant)
    _add_adjustment(client, headers, employee, "BONUS", 100)
    _add_adjustment(client, headers, employee, "DEDUCTION", 30)
    _add_adjustment(client, headers, employee, "ADVANCE", 20)

    details = client.get(f"/api/payroll/employees/{employee.id}/salary-details?month=2025-01", headers=headers)
    assert details.status_code == status.HTTP_200_OK
    body = details.json()
    assert Decimal(body["gross_salary"]) == Decimal("550")
    assert Decimal(body["summary"]["net_salary"]) == Decimal("600")
    assert len(body["pending_adjustments"]) == 3

    paid = client.post(
        "/api/payroll/pay-salary",
        headers=headers,
        json={"employee_id": employee.id, "salary_month": "2025-01", "payment_date": "2025-02-01"}
    )
    assert paid.status_code == status.HTTP_201_CREATED
    result = paid.json()
    assert Decimal(result["salary_payment"]["amount"]) == Decimal("600")
    assert Decimal(result["transaction"]["amount"]) == Decimal("600")
    assert result["salary_payment"]["transaction_id"] == result["transaction"]["id"]
    assert result["adjustments_processed"] == 3

    processed = client.get(
        f"/api/payroll/employees/{employee.id}/adjustments?status=PROCESSED", headers=headers
    ).json()
    assert {a["salary_payment_id"] for a in processed} == {result["salary_payment"]["id"]}

    history = client.get(f"/api/payroll/employees/{employee.id}/salary-payments", headers=headers).json()
    assert [p["id"] for p in history] == [result["salary_payment"]["id"]]


def test_pay_salary_with_non_positive_net_is_rejected(client, db_session, employee, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    _add_adjustment(client, headers, employee, "DEDUCTION", 550)

    response = client.post(
        "/api/payroll/pay-salary",
        headers=headers,
        json={"employee_id": employee.id, "salary_month": "2025-01", "payment_date": "2025-02-01"}
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["code"] == "INVALID_STATE"
    assert db_session.query(SalaryPayment).count() == 0
    assert db_session.query(EmployeeAdjustment).filter(
        EmployeeAdjustment.status == AdjustmentStatus.PENDING
    ).count() == 1


def test_malformed_month_is_rejected(client, employee, admin_user, auth_headers):
    response = client.get(
        f"/api/payroll/employees/{employee.id}/salary-details?month=2025-13",
        headers=auth_headers(admin_user)
    )
    assert response.status_code == 422


def test_unknown_employee_is_not_found(client, admin_user, auth_headers):
    response = client.get("/api/payroll/employees/99999/salary-details?month=2025-01", headers=auth_headers(admin_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_branch_summary(client, employee, accountant, outside_accountant, auth_headers):
    headers = auth_headers(accountant)
    for month, paid_on in (("2025-01", "2025-02-01"), ("2025-02", "2025-03-01")):
        response = client.post(
            "/api/payroll/pay-salary",
            headers=headers,
            json={"employee_id": employee.id, "salary_month": month, "payment_date": paid_on}
        )
        assert response.status_code == status.HTTP_201_CREATED

    summary = client.get(f"/api/payroll/branches/{employee.branch_id}/summary", headers=headers)
    assert summary.status_code == status.HTTP_200_OK
    body = summary.json()
    assert body["count"] == 2
    assert Decimal(body["total_paid"]) == Decimal("1100")
    assert body["breakdown"][0]["employee_id"] == employee.id
    assert body["breakdown"][0]["payment_count"] == 2

    ranged = client.get(
        f"/api/payroll/branches/{employee.branch_id}/summary?start_date=2025-02-15",
        headers=headers
    ).json()
    assert ranged["count"] == 1

    forbidden = client.get(
        f"/api/payroll/branches/{employee.branch_id}/summary",
        headers=auth_headers(outside_accountant)
    )
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN
