"""
Tests for fingerprint enrollment endpoints.
"""

from datetime import datetime

from sqlalchemy import select

from itam.models.audit_log import AuditLog

FINGERPRINT_ACTIONS = ["read", "create", "update", "print"]
EXTERNAL = {
    "assignee_type": "external",
    "external_full_name": "Sam Contractor",
    "attendance_employee_no": "A-17",
}


class TestEnrollments:

    def _create(self, client, headers):
        return client.post("/fingerprints", json=EXTERNAL, headers=headers)

    def test_doc_numbers_are_sequential(self, client, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        year = datetime.utcnow().year

        first = self._create(client, admin_headers)
        second = self._create(client, admin_headers)

        assert first.status_code == 201
        assert first.json()["doc_number"] == f"FP-{year}-00001"
        assert second.json()["doc_number"] == f"FP-{year}-00002"
        assert first.json()["status"] == "assigned"

    def test_create_writes_event_and_audit(self, client, db_session, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        enrollment_id = self._create(client, admin_headers).json()["id"]

        events = client.get(
            f"/fingerprints/{enrollment_id}/events", headers=admin_headers
        ).json()["items"]
        assert [e["type"] for e in events] == ["CREATE"]

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "FP_ENROLL_CREATE")
        ).scalar_one()
        assert entry.module == "fingerprints"
        assert entry.entity_id == str(enrollment_id)

    def test_signing_without_signer_returns_400(self, client, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        enrollment_id = self._create(client, admin_headers).json()["id"]

        response = client.patch(f"/fingerprints/{enrollment_id}/status", json={
            "status": "signed",
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_status_change(self, client, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        enrollment_id = self._create(client, admin_headers).json()["id"]

        response = client.patch(f"/fingerprints/{enrollment_id}/status", json={
            "status": "signed", "hr_signer_name": "Pat HR",
        }, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["hr_signer_name"] == "Pat HR"
        events = client.get(
            f"/fingerprints/{enrollment_id}/events", headers=admin_headers
        ).json()["items"]
        assert events[0]["type"] == "STATUS_CHANGE"
        assert events[0]["before"]["status"] == "assigned"
        assert events[0]["after"]["status"] == "signed"

    def test_print_is_recorded(self, client, db_session, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        created = self._create(client, admin_headers).json()

        response = client.post(f"/fingerprints/{created['id']}/print", headers=admin_headers)

        assert response.status_code == 202
        assert response.json() == {"doc_number": created["doc_number"]}
        assert db_session.execute(
            select(AuditLog).where(AuditLog.action == "FP_ENROLL_PRINT")
        ).scalar_one().after == {"doc_number": created["doc_number"]}

    def test_staff_print_needs_print_action(
        self, client, create_module, grant_staff, admin_headers, staff_headers
    ):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        grant_staff("fingerprints", ["read"])
        enrollment_id = self._create(client, admin_headers).json()["id"]

        assert client.get(
            f"/fingerprints/{enrollment_id}", headers=staff_headers
        ).status_code == 200
        assert client.post(
            f"/fingerprints/{enrollment_id}/print", headers=staff_headers
        ).status_code == 403

    def test_missing_enrollment_returns_404(self, client, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        assert client.get("/fingerprints/999", headers=admin_headers).status_code == 404

    def test_update_fields_is_recorded(self, client, db_session, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        enrollment_id = self._create(client, admin_headers).json()["id"]

        response = client.patch(f"/fingerprints/{enrollment_id}", json={
            "attendance_employee_no": " A-18 ", "it_remarks": "reader 2",
        }, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["attendance_employee_no"] == "A-18"
        assert response.json()["status"] == "assigned"

        events = client.get(
            f"/fingerprints/{enrollment_id}/events", headers=admin_headers
        ).json()["items"]
        assert [e["type"] for e in events] == ["UPDATE", "CREATE"]

        entry = db_session.execute(
            select(AuditLog).where(AuditLog.action == "FP_ENROLL_UPDATE")
        ).scalar_one()
        assert entry.before["attendance_employee_no"] == "A-17"
        assert entry.after["attendance_employee_no"] == "A-18"

    def test_cancelled_cannot_be_reopened(self, client, create_module, admin_headers):
        create_module("fingerprints", actions=FINGERPRINT_ACTIONS)
        enrollment_id = self._create(client, admin_headers).json()["id"]

        response = client.patch(f"/fingerprints/{enrollment_id}/status", json={
            "status": "cancelled",
        }, headers=admin_headers)
        assert response.status_code == 200

        response = client.patch(f"/fingerprints/{enrollment_id}/status", json={
            "status": "assigned",
        }, headers=admin_headers)
        assert response.status_code == 400
        assert client.get(
            f"/fingerprints/{enrollment_id}", headers=admin_headers
        ).json()["status"] == "cancelled"
