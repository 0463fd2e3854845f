"""
Admin Report API Tests - report list, edit-request decisions, settings backup

Tests:
1. Admin list ordering and filters
2. Approve unlocks the report; second decision is refused
3. Deny keeps the report locked
4. Employees cannot reach admin routes
5. Backup export / import round trip
6. Backups breaking cross-record rules are refused whole
"""
import pytest

from utils.months import current_month_key


@pytest.fixture
def submitted(client, employee, agency):
    """Employee has logged 2h and submitted the current month."""
    _, headers = employee
    month = current_month_key()
    body = {
        "clientId": agency["acme"].id,
        "clientServiceId": agency["acme_seo"].id,
        "taskId": agency["audit"].id,
        "hours": 2,
    }
    assert client.post(f"/api/reports/{month}/entries", json=body, headers=headers).status_code == 201
    response = client.post(f"/api/reports/{month}/submit", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def pending(client, employee, submitted):
    response = client.post(f"/api/reports/{current_month_key()}/edit-request", headers=employee[1])
    assert response.status_code == 200, response.text
    return response.json()


def test_admin_report_list(client, admin, submitted):
    _, headers = admin
    response = client.get("/api/admin/reports", headers=headers)

    assert response.status_code == 200, response.text
    rows = response.json()
    assert len(rows) == 1
    row = rows[0]
    assert row["report"]["id"] == submitted["id"]
    assert row["employeeName"] == "Anna Employee"
    assert row["entryCount"] == 1
    assert row["totalHours"] == 2

    assert client.get("/api/admin/reports", params={"status": "OPEN"}, headers=headers).json() == []
    assert len(client.get("/api/admin/reports", params={"month": current_month_key()}, headers=headers).json()) == 1
    assert client.get("/api/admin/reports", params={"month": "2001-01"}, headers=headers).json() == []


def test_admin_routes_forbidden_for_employee(client, employee):
    _, headers = employee
    for path in ("/api/admin/reports", "/api/admin/reports/edit-requests", "/api/admin/settings/backup"):
        response = client.get(path, headers=headers)
        assert response.status_code == 403, f"{path}: expected 403, got {response.status_code}"


def test_pending_edit_requests_listed(client, admin, pending):
    response = client.get("/api/admin/reports/edit-requests", headers=admin[1])

    assert response.status_code == 200
    rows = response.json()
    assert [r["request"]["id"] for r in rows] == [pending["id"]]
    assert rows[0]["employeeName"] == "Anna Employee"
    assert rows[0]["monthKey"] == current_month_key()


def test_approve_unlocks_report(client, admin, employee, pending, submitted):
    """Approve -> report UNLOCKED, entries accepted again, re-approve 409."""
    _, admin_headers = admin
    response = client.post(
        f"/api/admin/reports/edit-requests/{pending['id']}/approve",
        json={"reason": "fix client"},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["request"]["status"] == "APPROVED"
    assert data["request"]["adminId"] == admin[0].id
    assert data["request"]["reason"] == "fix client"
    assert data["report"]["status"] == "UNLOCKED"
    assert data["report"]["version"] == submitted["version"] + 1

    view = client.get("/api/reports/current", headers=employee[1]).json()
    assert view["isEditable"] is True
    assert view["editRequestPending"] is False

    again = client.post(f"/api/admin/reports/edit-requests/{pending['id']}/approve", headers=admin_headers)
    assert again.status_code == 409, f"Expected 409, got {again.status_code}"
    assert again.json()["current"] == "APPROVED"

    assert client.get("/api/admin/reports/edit-requests", headers=admin_headers).json() == []


def test_deny_keeps_report_locked(client, admin, employee, pending):
    _, admin_headers = admin
    response = client.post(f"/api/admin/reports/edit-requests/{pending['id']}/deny", headers=admin_headers)

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["request"]["status"] == "DENIED"
    assert data["report"]["status"] == "SUBMITTED"

    view = client.get("/api/reports/current", headers=employee[1]).json()
    assert view["isLocked"] is True

    response = client.post(f"/api/admin/reports/edit-requests/{pending['id']}/approve", headers=admin_headers)
    assert response.status_code == 409


def test_decision_on_missing_request_404(client, admin):
    response = client.post("/api/admin/reports/edit-requests/missing/deny", headers=admin[1])
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Settings / backup
# ---------------------------------------------------------------------------

def test_backup_export_import_round_trip(client, admin, submitted, store):
    """Exported JSON imports back unchanged into an emptied database."""
    _, headers = admin
    exported = client.get("/api/admin/settings/backup", headers=headers).json()

    assert exported["version"] == 1
    collections = exported["collections"]
    assert set(collections) == {
        "employees", "clients", "services", "tasks",
        "clientServices", "monthlyReports", "timeEntries", "editRequests",
    }
    assert collections["monthlyReports"][0]["monthKey"] == current_month_key()
    assert "eik" in collections["clients"][0], "Client tax id keeps its export key"

    response = client.post("/api/admin/settings/backup", json={"collections": collections}, headers=headers)

    assert response.status_code == 200, response.text
    assert response.json()["imported"]["timeEntries"] == 1
    assert response.json()["imported"]["clients"] == 2

    again = client.get("/api/admin/settings/backup", headers=headers).json()["collections"]
    assert again == collections, "Re-export should match the imported data"


def test_backup_import_rejects_unknown_collection(client, admin):
    response = client.post("/api/admin/settings/backup", json={"collections": {"invoices": []}}, headers=admin[1])

    assert response.status_code == 422
    assert response.json()["field"] == "collections"


def test_backup_import_rejects_invalid_record(client, admin, store):
    """Nothing is written when a record fails validation."""
    bad = {"collections": {"clients": [{"id": "c-1", "name": "Acme", "createdAt": "2026-02-01T00:00:00Z"}],
                           "monthlyReports": [{"id": "r-1", "employeeId": "e-1", "monthKey": "Feb 2026"}]}}

    response = client.post("/api/admin/settings/backup", json=bad, headers=admin[1])

    assert response.status_code == 422, response.text
    assert response.json()["field"].startswith("monthlyReports.")
    assert store.clients.load() == [], "No collection should be replaced"


def _report_row(report_id, employee_id):
    return {"id": report_id, "employeeId": employee_id, "monthKey": "2026-02", "status": "SUBMITTED"}


def _entry_row(entry_id, report_id, employee_id, hours=1):
    return {
        "id": entry_id,
        "reportId": report_id,
        "employeeId": employee_id,
        "clientId": "c-1",
        "clientServiceId": "cs-1",
        "serviceId": "s-1",
        "taskId": "t-1",
        "hours": hours,
    }


@pytest.mark.parametrize(
    "collections, field",
    [
        (
            {"services": [{"id": "s-1", "name": "SEO"}, {"id": "s-2", "name": "seo"}]},
            "services",
        ),
        (
            {"tasks": [
                {"id": "t-1", "serviceId": "s-1", "name": "Audit"},
                {"id": "t-2", "serviceId": "s-1", "name": "AUDIT"},
            ]},
            "tasks",
        ),
        (
            {
                "monthlyReports": [_report_row("r-a", "emp-a")],
                "timeEntries": [_entry_row("te-1", "r-a", "emp-b")],
            },
            "timeEntries",
        ),
        (
            {
                "monthlyReports": [_report_row("r-a", "emp-a")],
                "editRequests": [
                    {"id": "er-1", "reportId": "r-a", "employeeId": "emp-a", "status": "PENDING"},
                    {"id": "er-2", "reportId": "r-a", "employeeId": "emp-a", "status": "PENDING"},
                ],
            },
            "editRequests",
        ),
        (
            {"monthlyReports": [_report_row("r-a", "emp-a"), _report_row("r-b", "emp-a")]},
            "monthlyReports",
        ),
        (
            {
                "monthlyReports": [_report_row("r-a", "emp-a")],
                "timeEntries": [_entry_row("te-1", "r-a", "emp-a", hours=0.1)],
            },
            "timeEntries.0.hours",
        ),
    ],
)
def test_backup_import_rejects_broken_invariants(client, admin, agency, collections, field):
    """A backup breaking a cross-record rule is refused and nothing is replaced."""
    _, headers = admin
    before = client.get("/api/admin/settings/backup", headers=headers).json()["collections"]

    response = client.post("/api/admin/settings/backup", json={"collections": collections}, headers=headers)

    assert response.status_code == 422, response.text
    assert response.json()["field"] == field
    after = client.get("/api/admin/settings/backup", headers=headers).json()["collections"]
    assert after == before, "No collection should be replaced"


def test_backup_import_checks_against_stored_collections(client, admin, employee, submitted):
    """Collections left out of the backup still count: a second pending request is refused."""
    _, headers = admin
    request = {"id": "er-1", "reportId": submitted["id"], "employeeId": employee[0].id, "status": "PENDING"}

    response = client.post(
        "/api/admin/settings/backup",
        json={"collections": {"editRequests": [request, {**request, "id": "er-2"}]}},
        headers=headers,
    )
    assert response.status_code == 422, response.text
    assert response.json()["field"] == "editRequests"

    response = client.post("/api/admin/settings/backup", json={"collections": {"editRequests": [request]}}, headers=headers)
    assert response.status_code == 200, response.text
    pending = client.get("/api/admin/reports/edit-requests", headers=headers).json()
    assert [row["request"]["id"] for row in pending] == ["er-1"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["ok"] is True
