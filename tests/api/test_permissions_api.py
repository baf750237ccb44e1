"""
Tests for module and staff permission endpoints.
"""

from sqlalchemy import select

from itam.models.audit_log import AuditLog


class TestModules:

    def test_admin_creates_module_with_read(self, client, admin_headers):
        response = client.post("/modules", json={
            "key": "licenses",
            "name": "Licenses",
            "actions": ["create", "create", "update"],
        }, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["actions"] == ["read", "create", "update"]

    def test_duplicate_key_returns_409(self, client, create_module, admin_headers):
        create_module("licenses")
        response = client.post("/modules", json={
            "key": "licenses",
            "name": "Licenses again",
        }, headers=admin_headers)
        assert response.status_code == 409

    def test_staff_cannot_create_module(self, client, staff_headers):
        response = client.post("/modules", json={
            "key": "licenses",
            "name": "Licenses",
        }, headers=staff_headers)
        assert response.status_code == 403

    def test_inactive_modules_hidden_from_non_admins(
        self, client, create_module, admin_headers, staff_headers
    ):
        create_module("assets")
        create_module("legacy", is_active=False)

        staff_keys = {m["key"] for m in client.get("/modules", headers=staff_headers).json()}
        admin_keys = {m["key"] for m in client.get("/modules", headers=admin_headers).json()}

        assert staff_keys == {"assets"}
        assert admin_keys == {"assets", "legacy"}

    def test_deactivating_module_revokes_staff_access(
        self, client, create_module, grant_staff, admin_headers, staff_headers
    ):
        module = create_module("assets")
        grant_staff("assets", ["read", "create"])
        asset = {"asset_tag": "LT-001", "name": "Laptop", "category": "laptop"}
        assert client.post("/assets", json=asset, headers=staff_headers).status_code == 201

        response = client.patch(
            f"/modules/{module.id}", json={"is_active": False}, headers=admin_headers
        )
        assert response.status_code == 200

        asset["asset_tag"] = "LT-002"
        assert client.post("/assets", json=asset, headers=staff_headers).status_code == 403


class TestStaffPermissions:

    def test_upsert_filters_undeclared_actions(self, client, create_module, admin_headers):
        create_module("assets", actions=["read", "create", "update"])
        response = client.put("/permissions/staff", json={
            "module_key": "assets",
            "actions": ["read", "create", "launch"],
        }, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "role": "staff",
            "module_key": "assets",
            "actions": ["read", "create"],
        }

    def test_upsert_unknown_module_returns_404(self, client, admin_headers):
        response = client.put("/permissions/staff", json={
            "module_key": "nothing",
            "actions": ["read"],
        }, headers=admin_headers)
        assert response.status_code == 404

    def test_upsert_is_visible_immediately(self, client, create_module, admin_headers):
        create_module("assets")
        client.put("/permissions/staff", json={
            "module_key": "assets", "actions": ["read"],
        }, headers=admin_headers)
        assert client.get(
            "/permissions/staff/assets", headers=admin_headers
        ).json()["actions"] == ["read"]

        client.put("/permissions/staff", json={
            "module_key": "assets", "actions": ["read", "update"],
        }, headers=admin_headers)
        assert client.get(
            "/permissions/staff/assets", headers=admin_headers
        ).json()["actions"] == ["read", "update"]

    def test_upsert_is_audited(self, client, db_session, create_module, admin_headers):
        create_module("assets")
        client.put("/permissions/staff", json={
            "module_key": "assets", "actions": ["read"],
        }, headers=admin_headers)
        client.put("/permissions/staff", json={
            "module_key": "assets", "actions": ["read", "create"],
        }, headers=admin_headers)

        entries = db_session.execute(
            select(AuditLog).where(AuditLog.action == "PERMISSION_SET").order_by(AuditLog.id)
        ).scalars().all()
        assert len(entries) == 2
        assert entries[0].before is None
        assert entries[1].before["actions"] == ["read"]
        assert entries[1].after["actions"] == ["read", "create"]
        assert entries[1].entity_id == "staff:assets"

    def test_list_staff_grants(self, client, create_module, grant_staff, admin_headers):
        create_module("assets")
        create_module("employees", actions=["read", "create"])
        grant_staff("employees", ["read"])

        grants = {g["module_key"]: g for g in client.get(
            "/permissions/staff", headers=admin_headers
        ).json()}

        assert grants["employees"]["staff_actions"] == ["read"]
        assert grants["assets"]["staff_actions"] == []

    def test_non_admin_cannot_manage(self, client, create_module, auditor_headers):
        create_module("assets")
        assert client.get("/permissions/staff", headers=auditor_headers).status_code == 403
        response = client.put("/permissions/staff", json={
            "module_key": "assets", "actions": ["read"],
        }, headers=auditor_headers)
        assert response.status_code == 403
