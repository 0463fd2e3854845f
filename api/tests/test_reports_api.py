"""
Employee Report API Tests - /api/reports

Tests:
1. Current report is created on first visit (once)
2. Log, edit, delete time entries
3. Submit, locked edits, edit request flow
4. Ad spend
5. Past months without a report
"""
import json

from utils.months import current_month_key


def _entry_body(agency, hours=1, service="seo"):
    return {
        "clientId": agency["acme"].id,
        "clientServiceId": agency[f"acme_{service}"].id,
        "taskId": agency["audit" if service == "seo" else "setup"].id,
        "hours": hours,
        "notes": "on-page fixes",
    }


def _add(client, headers, agency, hours=1, service="seo", month=None):
    month = month or current_month_key()
    return client.post(f"/api/reports/{month}/entries", json=_entry_body(agency, hours, service), headers=headers)


def test_reports_require_auth(client):
    response = client.get("/api/reports/current")
    assert response.status_code == 401, f"Expected 401, got {response.status_code}"


def test_current_report_created_once(client, employee, store):
    """Visiting twice yields the same OPEN report and a single row."""
    _, headers = employee

    first = client.get("/api/reports/current", headers=headers)
    second = client.get("/api/reports/current", headers=headers)

    assert first.status_code == 200, first.text
    report = first.json()["report"]
    assert report["status"] == "OPEN"
    assert report["monthKey"] == current_month_key()
    assert second.json()["report"]["id"] == report["id"]
    assert len(store.reports.load()) == 1, "Only one report row expected"


def test_report_months(client, employee):
    _, headers = employee
    response = client.get("/api/reports/months", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["currentMonthKey"] == current_month_key()
    assert data["months"] == [current_month_key()]


def test_add_entry_returns_names(client, employee, agency):
    _, headers = employee
    response = _add(client, headers, agency, hours=1.5)

    assert response.status_code == 201, response.text
    entry = response.json()
    assert entry["hours"] == 1.5
    assert entry["clientName"] == "Acme"
    assert entry["serviceName"] == "SEO"
    assert entry["taskName"] == "Audit"
    assert entry["serviceId"] == agency["seo"].id

    view = client.get("/api/reports/current", headers=headers).json()
    assert view["totalHours"] == 1.5
    assert view["totalHoursDisplay"] == "1.50"
    assert len(view["entries"]) == 1


def test_add_entry_invalid_hours_422(client, employee, agency):
    _, headers = employee
    response = _add(client, headers, agency, hours=0.1)

    assert response.status_code == 422, f"Expected 422, got {response.status_code}"
    assert response.json()["field"] == "hours"


def test_add_entry_overflowing_hours_422(client, employee, agency):
    """1e999 parses to infinity and must not reach the rounding step."""
    _, headers = employee
    body = json.dumps({**_entry_body(agency), "hours": 0}).replace('"hours": 0', '"hours": 1e999')
    response = client.post(
        f"/api/reports/{current_month_key()}/entries",
        content=body,
        headers={**headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 422, f"Expected 422, got {response.status_code}"
    assert response.json()["field"] == "hours"


def test_add_entry_past_month_without_report_404(client, employee, agency):
    """Only the current month is opened on demand."""
    _, headers = employee
    response = _add(client, headers, agency, month="2001-01")

    assert response.status_code == 404, f"Expected 404, got {response.status_code}"


def test_get_past_month_without_report(client, employee):
    _, headers = employee
    response = client.get("/api/reports/2001-01", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["report"] is None
    assert data["monthLabel"] == "January 2001"
    assert data["isEditable"] is False


def test_invalid_month_key_422(client, employee):
    _, headers = employee
    response = client.get("/api/reports/2026-13", headers=headers)
    assert response.status_code == 422


def test_update_and_delete_entry(client, employee, agency):
    _, headers = employee
    entry = _add(client, headers, agency).json()

    response = client.patch(
        f"/api/reports/entries/{entry['id']}",
        json={"hours": 2.25, "clientServiceId": agency["acme_ppc"].id, "taskId": agency["setup"].id},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["hours"] == 2.25
    assert updated["serviceName"] == "PPC"
    assert updated["taskName"] == "Setup"

    response = client.delete(f"/api/reports/entries/{entry['id']}", headers=headers)
    assert response.status_code == 204
    assert client.get("/api/reports/current", headers=headers).json()["entries"] == []


def test_other_employee_cannot_touch_entry(client, employee, second_employee, agency):
    entry = _add(client, employee[1], agency).json()

    response = client.delete(f"/api/reports/entries/{entry['id']}", headers=second_employee[1])

    assert response.status_code == 404, f"Expected 404, got {response.status_code}"


def test_submit_empty_report_409(client, employee):
    _, headers = employee
    response = client.post(f"/api/reports/{current_month_key()}/submit", headers=headers)

    assert response.status_code == 409, f"Expected 409, got {response.status_code}"
    assert response.json()["code"] == "INVALID_STATE"


def test_submit_then_locked(client, employee, agency):
    """After submit: entries refused, second submit refused."""
    _, headers = employee
    month = current_month_key()
    entry = _add(client, headers, agency).json()

    response = client.post(f"/api/reports/{month}/submit", headers=headers)
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "SUBMITTED"
    assert response.json()["submittedAt"] is not None

    assert _add(client, headers, agency).status_code == 409
    assert client.patch(f"/api/reports/entries/{entry['id']}", json={"hours": 3}, headers=headers).status_code == 409
    assert client.post(f"/api/reports/{month}/submit", headers=headers).status_code == 409

    view = client.get("/api/reports/current", headers=headers).json()
    assert view["isLocked"] is True and view["isEditable"] is False


def test_edit_request_is_idempotent_while_pending(client, employee, agency):
    _, headers = employee
    month = current_month_key()
    _add(client, headers, agency)
    client.post(f"/api/reports/{month}/submit", headers=headers)

    first = client.post(f"/api/reports/{month}/edit-request", headers=headers)
    second = client.post(f"/api/reports/{month}/edit-request", headers=headers)

    assert first.status_code == 200, first.text
    assert first.json()["status"] == "PENDING"
    assert first.json()["monthKey"] == month
    assert second.json()["id"] == first.json()["id"], "Pending request should be reused"
    assert client.get("/api/reports/current", headers=headers).json()["editRequestPending"] is True


def test_edit_request_on_open_report_409(client, employee):
    _, headers = employee
    response = client.post(f"/api/reports/{current_month_key()}/edit-request", headers=headers)
    assert response.status_code == 409


def test_ad_spend(client, employee):
    _, headers = employee
    month = current_month_key()

    response = client.put(f"/api/reports/{month}/ad-spend", json={"metaSpend": 250, "googleSpend": 99.5}, headers=headers)
    assert response.status_code == 200, response.text
    assert response.json()["metaSpend"] == 250
    assert response.json()["googleSpend"] == 99.5

    response = client.put(f"/api/reports/{month}/ad-spend", json={"metaSpend": -5}, headers=headers)
    assert response.status_code == 422


def test_deactivated_employee_refused(client, admin, employee):
    """A still-valid token of a deactivated employee is rejected."""
    employee_record, headers = employee
    _, admin_headers = admin

    client.post(f"/api/employees/{employee_record.id}/deactivate", headers=admin_headers)
    response = client.get("/api/reports/current", headers=headers)

    assert response.status_code == 403, f"Expected 403, got {response.status_code}"
    assert response.json()["detail"] == "Account disabled"
