"""HTTP tests — auth boundary, employee endpoints, admin endpoints, error format."""

from __future__ import annotations

import uuid
from datetime import date

from vacation_backend.common.constants import VacationStatus
from tests.conftest import balance_of, bearer, create_access_token, create_user, create_vacation

MON = date(2024, 1, 1)
FRI = date(2024, 1, 5)


# ═════════════════════════════════════════════════════════════════════
# SYSTEM / AUTH
# ═════════════════════════════════════════════════════════════════════


class TestSystem:

    async def test_health(self, client):
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestAuthBoundary:

    async def test_missing_token(self, client):
        resp = await client.get("/api/v1/users/me")
        assert resp.status_code == 401

    async def test_expired_token(self, client, employee):
        token = create_access_token(employee.id, expired=True)
        resp = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    async def test_wrong_token_type(self, client, employee):
        token = create_access_token(employee.id, token_type="refresh")
        resp = await client.get(
            "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 401

    async def test_unknown_user(self, client):
        resp = await client.get(
            "/api/v1/users/me",
            headers={"Authorization": f"Bearer {create_access_token(uuid.uuid4())}"},
        )
        assert resp.status_code == 401

    async def test_me(self, client, employee, auth_headers):
        resp = await client.get("/api/v1/users/me", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == str(employee.id)
        assert body["remaining_days"] == 25
        assert body["is_admin"] is False

    async def test_me_admin_flag(self, client, admin_headers):
        resp = await client.get("/api/v1/users/me", headers=admin_headers)
        assert resp.json()["is_admin"] is True


# ═════════════════════════════════════════════════════════════════════
# EMPLOYEE ENDPOINTS
# ═════════════════════════════════════════════════════════════════════


class TestEmployeeEndpoints:

    async def test_availability(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/vacations/availability",
            params={"start": "2024-01-01", "end": "2024-01-05"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["requested_days"] == 5
        assert body["remaining_days"] == 25
        assert body["available"] is True

    async def test_availability_reversed_range(self, client, auth_headers):
        resp = await client.get(
            "/api/v1/vacations/availability",
            params={"start": "2024-01-05", "end": "2024-01-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/invalid-range")

    async def test_create_request(self, client, db, employee, auth_headers):
        resp = await client.post(
            "/api/v1/vacations/requests",
            json={"start_date": "2024-01-01", "end_date": "2024-01-05"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["request"]["status"] == "pending"
        assert body["request"]["chargeable_days"] == 5
        assert body["request"]["user_id"] == str(employee.id)
        assert await balance_of(db, employee.id) == 25

    async def test_create_reversed_range(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/vacations/requests",
            json={"start_date": "2024-01-05", "end_date": "2024-01-01"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["type"].endswith("/invalid-range")
        assert resp.headers["content-type"].startswith("application/problem+json")

    async def test_create_past_date(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/vacations/requests",
            json={"start_date": "2023-11-30", "end_date": "2023-12-04"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/past-date")

    async def test_create_weekend_only(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/vacations/requests",
            json={"start_date": "2024-01-06", "end_date": "2024-01-07"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/no-working-days")

    async def test_create_bad_payload(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/vacations/requests",
            json={"start_date": "not-a-date"},
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["type"].endswith("/validation-error")

    async def test_my_requests(self, client, db, employee, auth_headers):
        await create_vacation(db, employee, MON, FRI)
        other = await create_user(db)
        await create_vacation(db, other, MON, FRI)

        resp = await client.get("/api/v1/vacations/mine", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["meta"]["total"] == 1
        assert body["data"][0]["user_id"] == str(employee.id)

    async def test_role_view_own_role(self, client, db, employee, auth_headers):
        await create_vacation(db, employee, MON, FRI, status=VacationStatus.approved)
        resp = await client.get("/api/v1/vacations/role/copista", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()[0]["user"]["name"] == "Ana Copista"

    async def test_role_view_other_role_forbidden(self, client, auth_headers):
        resp = await client.get("/api/v1/vacations/role/oficial", headers=auth_headers)
        assert resp.status_code == 403

    async def test_role_view_admin(self, client, admin_headers):
        resp = await client.get("/api/v1/vacations/role/oficial", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == []


# ═════════════════════════════════════════════════════════════════════
# ADMIN ENDPOINTS
# ═════════════════════════════════════════════════════════════════════


class TestAdminEndpoints:

    async def test_employee_cannot_approve(self, client, db, employee, auth_headers):
        req = await create_vacation(db, employee, MON, FRI)
        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}/approve", headers=auth_headers,
        )
        assert resp.status_code == 403

    async def test_copista_flow(self, client, db, employee, admin_headers):
        second = await create_user(db, role="copista", remaining_days=25)
        first_req = await create_vacation(db, employee, MON, FRI)
        second_req = await create_vacation(db, second, date(2024, 1, 3), date(2024, 1, 10))

        resp = await client.get("/api/v1/admin/vacations/pending", headers=admin_headers)
        assert [r["id"] for r in resp.json()] == [str(first_req.id), str(second_req.id)]

        resp = await client.put(
            f"/api/v1/admin/vacations/{first_req.id}/approve", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["remaining_days"] == 20

        resp = await client.put(
            f"/api/v1/admin/vacations/{second_req.id}/approve", headers=admin_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["type"].endswith("/role-capacity-exceeded")

        resp = await client.delete(
            f"/api/v1/admin/vacations/{first_req.id}", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["days_restored"] == 5
        assert await balance_of(db, employee.id) == 25

        resp = await client.put(
            f"/api/v1/admin/vacations/{second_req.id}/approve", headers=admin_headers,
        )
        assert resp.status_code == 200

    async def test_insufficient_balance(self, client, db, admin_headers):
        poor = await create_user(db, remaining_days=1)
        req = await create_vacation(db, poor, MON, FRI)
        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}/approve", headers=admin_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["type"].endswith("/insufficient-balance")
        assert await balance_of(db, poor.id) == 1

    async def test_reject_then_reject_again(self, client, db, employee, admin_headers):
        req = await create_vacation(db, employee, MON, FRI)
        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}/reject", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["request"]["status"] == "rejected"

        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}/reject", headers=admin_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["type"].endswith("/not-pending")

    async def test_unknown_request(self, client, admin_headers):
        resp = await client.put(
            f"/api/v1/admin/vacations/{uuid.uuid4()}/approve", headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_create_on_behalf(self, client, db, employee, admin, admin_headers):
        resp = await client.post(
            "/api/v1/admin/vacations",
            json={
                "user_id": str(employee.id),
                "start_date": "2023-11-06",
                "end_date": "2023-11-10",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["request"]["status"] == "approved"
        assert body["request"]["approved_by"] == str(admin.id)
        assert body["remaining_days"] == 20

    async def test_edit(self, client, db, employee, admin_headers):
        req = await create_vacation(db, employee, MON, FRI)
        await client.put(f"/api/v1/admin/vacations/{req.id}/approve", headers=admin_headers)

        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}",
            json={"start_date": "2024-01-01", "end_date": "2024-01-02"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["remaining_days"] == 23

    async def test_edit_failure_rolls_back(self, client, db, employee, admin_headers):
        req = await create_vacation(db, employee, MON, FRI)
        await client.put(f"/api/v1/admin/vacations/{req.id}/approve", headers=admin_headers)
        poor = await create_user(db, remaining_days=0)

        resp = await client.put(
            f"/api/v1/admin/vacations/{req.id}",
            json={
                "start_date": "2024-01-01",
                "end_date": "2024-01-05",
                "user_id": str(poor.id),
            },
            headers=admin_headers,
        )
        assert resp.status_code == 409
        assert await balance_of(db, employee.id) == 20
        assert await balance_of(db, poor.id) == 0

    async def test_grouped_listing(self, client, db, employee, admin_headers):
        await create_vacation(db, employee, MON, FRI)
        resp = await client.get("/api/v1/admin/vacations", headers=admin_headers)
        assert resp.status_code == 200
        assert [g["role"] for g in resp.json()] == ["copista"]

    async def test_holiday_changes_new_requests(self, client, db, admin_headers):
        await client.post(
            "/api/v1/holidays",
            json={"date": "2024-01-03", "name": "Fiesta local"},
            headers=admin_headers,
        )
        user = await create_user(db, remaining_days=25)
        resp = await client.get(
            "/api/v1/vacations/availability",
            params={"start": "2024-01-01", "end": "2024-01-05"},
            headers=bearer(user),
        )
        assert resp.json()["requested_days"] == 4
