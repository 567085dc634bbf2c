# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for absence API endpoints."""

import uuid


def absence_payload(employee, start, end, type="vacation"):
    return {
        "user_id": str(employee.id),
        "type": type,
        "start_date": start,
        "end_date": end,
    }


class TestSubmitAbsence:
    """Tests for POST /api/v1/absences endpoint."""

    def test_submit_vacation(self, client, employee):
        """Test submitting a vacation request."""
        response = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["days_required"] == 5.0

    def test_sick_leave_is_approved(self, client, employee):
        """Test that sick leave needs no approval."""
        response = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-07", type="sick"),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "approved"
        assert response.json()["approved_by"] == "system"

    def test_overlap_is_rejected(self, client, employee):
        """Test the overlap scenario against an approved absence."""
        first = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-01", "2027-09-05"),
        ).json()
        client.post(
            f"/api/v1/absences/{first['id']}/approve", json={"actor": "manager"}
        )

        overlapping = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-03", "2027-09-07"),
        )
        assert overlapping.status_code == 409

        adjacent = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        )
        assert adjacent.status_code == 201

    def test_inverted_range(self, client, employee):
        """Test that the end date must not precede the start date."""
        response = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-10", "2027-09-06"),
        )
        assert response.status_code == 422

    def test_before_hire_date(self, client, employee):
        """Test that absences before hiring are refused."""
        response = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2026-12-28", "2026-12-30"),
        )
        assert response.status_code == 400

    def test_weekend_only_range(self, client, employee):
        """Test that a request without working days is refused."""
        response = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-03-06", "2027-03-07"),
        )
        assert response.status_code == 400

    def test_unknown_employee(self, client):
        """Test submitting for a missing employee."""
        response = client.post(
            "/api/v1/absences",
            json={
                "user_id": str(uuid.uuid4()),
                "type": "vacation",
                "start_date": "2027-09-06",
                "end_date": "2027-09-06",
            },
        )
        assert response.status_code == 404


class TestAbsenceDecisions:
    """Tests for approve, reject and cancel endpoints."""

    def test_approve(self, client, employee):
        """Test approving a request updates the vacation balance."""
        absence = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        ).json()

        response = client.post(
            f"/api/v1/absences/{absence['id']}/approve",
            json={"actor": "manager", "note": "Enjoy"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        balance = client.get(f"/api/v1/vacation/{employee.id}/2027").json()
        assert balance["taken"] == 5.0
        assert balance["remaining"] == 25.0

    def test_approve_twice(self, client, employee):
        """Test that a decided request cannot be approved again."""
        absence = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        ).json()
        url = f"/api/v1/absences/{absence['id']}/approve"

        assert client.post(url, json={"actor": "manager"}).status_code == 200
        assert client.post(url, json={"actor": "manager"}).status_code == 409

    def test_approve_overtime_compensation_without_balance(self, client, employee):
        """Test that compensation below the minus limit is refused."""
        absence = client.post(
            "/api/v1/absences",
            json=absence_payload(
                employee, "2027-01-01", "2027-01-05", type="overtime_comp"
            ),
        ).json()

        response = client.post(
            f"/api/v1/absences/{absence['id']}/approve", json={"actor": "manager"}
        )
        assert response.status_code == 409
        assert client.get(f"/api/v1/absences/{absence['id']}").json()[
            "status"
        ] == "pending"

    def test_reject(self, client, employee):
        """Test rejecting a request."""
        absence = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        ).json()

        response = client.post(
            f"/api/v1/absences/{absence['id']}/reject",
            json={"actor": "manager", "note": "Busy season"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "rejected"
        assert data["admin_note"] == "Busy season"

    def test_cancel(self, client, employee):
        """Test cancelling an approved sick leave reverses its ledger rows."""
        absence = client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-07", type="sick"),
        ).json()

        response = client.delete(f"/api/v1/absences/{absence['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/absences/{absence['id']}").status_code == 404

        transactions = client.get(f"/api/v1/overtime/{employee.id}/transactions").json()
        assert len(transactions) == 4
        assert transactions[-1]["balance_after"] == 0.0

    def test_cancel_missing(self, client):
        """Test cancelling a non-existent request."""
        response = client.delete(f"/api/v1/absences/{uuid.uuid4()}")
        assert response.status_code == 404


class TestListAbsences:
    """Tests for GET /api/v1/absences endpoint."""

    def test_filter_by_status_and_type(self, client, employee):
        """Test the query filters."""
        client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-09-06", "2027-09-10"),
        )
        client.post(
            "/api/v1/absences",
            json=absence_payload(employee, "2027-10-04", "2027-10-04", type="sick"),
        )

        pending = client.get("/api/v1/absences", params={"status": "pending"}).json()
        assert [a["type"] for a in pending] == ["vacation"]

        sick = client.get(
            "/api/v1/absences",
            params={"user_id": str(employee.id), "type": "sick"},
        ).json()
        assert [a["start_date"] for a in sick] == ["2027-10-04"]
