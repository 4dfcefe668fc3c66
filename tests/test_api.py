"""
HTTP tests for the delivery, auth and admin routes.
"""

import unittest

from fastapi.testclient import TestClient

from database.connection import get_db
from main import app
from models.user import User
from services.auth import create_token_for_user
from tests.base import DatabaseTestCase


class ApiTestCase(DatabaseTestCase):
    """Routes the app's sessions to the per-test database."""

    def setUp(self):
        super().setUp()

        def override_get_db():
            db = self.SessionFactory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        self.user = self.make_user("user")
        self.other_user = self.make_user("user")
        self.operator = self.make_user("operator")
        self.admin = self.make_user("admin")
        self.hospital = self.make_hospital()
        self.village = self.make_village()
        self.medicine = self.make_medicine()

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    def headers(self, caller):
        user = self.db.get(User, caller.id)
        return {"Authorization": f"Bearer {create_token_for_user(user)}"}

    def create_delivery(self, caller=None, **overrides):
        body = {
            "hospital_id": self.hospital.id,
            "village_id": self.village.id,
            "medicine_type_id": self.medicine.id,
            "priority": "high",
        }
        body.update(overrides)
        return self.client.post("/api/deliveries", json=body, headers=self.headers(caller or self.user))


class TestDeliveryRoutes(ApiTestCase):

    def test_requires_authentication(self):
        response = self.client.get("/api/deliveries")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error_code"], "UNAUTHENTICATED")

    def test_rejects_garbage_token(self):
        response = self.client.get("/api/deliveries", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(response.status_code, 401)

    def test_create_delivery(self):
        response = self.create_delivery()

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["priority"], "high")
        self.assertEqual(body["distance_km"], 25.0)
        self.assertEqual(body["eta_minutes"], 80)
        self.assertEqual(body["requester_user_id"], self.user.id)

    def test_create_missing_fields(self):
        response = self.create_delivery(village_id=None)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "INVALID_ARGUMENT")

    def test_create_unknown_village(self):
        response = self.create_delivery(village_id="missing")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error_code"], "NOT_FOUND")

    def test_operator_cannot_create(self):
        response = self.create_delivery(caller=self.operator)
        self.assertEqual(response.status_code, 403)

    def test_invalid_priority(self):
        response = self.create_delivery(priority="whenever")
        self.assertEqual(response.status_code, 422)

    def test_full_flow(self):
        self.make_drone("Alpha", battery_level=60)
        best = self.make_drone("Bravo", battery_level=90)
        self.make_drone("Charlie", battery_level=40, status="maintenance")
        delivery_id = self.create_delivery().json()["id"]

        assigned = self.client.patch(f"/api/deliveries/{delivery_id}/assign", headers=self.headers(self.operator))
        self.assertEqual(assigned.status_code, 200)
        self.assertEqual(assigned.json()["drone_id"], best.id)
        self.assertEqual(assigned.json()["status"], "preparing")

        again = self.client.patch(f"/api/deliveries/{delivery_id}/assign", headers=self.headers(self.admin))
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["error_code"], "CONFLICT")

        in_transit = self.client.patch(
            f"/api/deliveries/{delivery_id}/status",
            json={"status": "in-transit"},
            headers=self.headers(self.operator)
        )
        self.assertEqual(in_transit.json()["status"], "in-transit")

        cancel = self.client.delete(f"/api/deliveries/{delivery_id}", headers=self.headers(self.user))
        self.assertEqual(cancel.status_code, 409)

        delivered = self.client.patch(
            f"/api/deliveries/{delivery_id}/status",
            json={"status": "delivered"},
            headers=self.headers(self.operator)
        )
        self.assertEqual(delivered.status_code, 200)
        self.assertIsNotNone(delivered.json()["actual_arrival"])

        drone = self.reload(best)
        self.assertEqual(drone.status, "available")
        self.assertTrue(75 <= drone.battery_level <= 85)

    def test_assign_without_drones(self):
        self.make_drone("Grounded", status="maintenance")
        delivery_id = self.create_delivery(priority="emergency").json()["id"]

        response = self.client.patch(f"/api/deliveries/{delivery_id}/assign", headers=self.headers(self.operator))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "RESOURCE_EXHAUSTED")
        detail = self.client.get(f"/api/deliveries/{delivery_id}", headers=self.headers(self.user))
        self.assertEqual(detail.json()["status"], "pending")

    def test_user_cannot_assign(self):
        delivery_id = self.create_delivery().json()["id"]

        response = self.client.patch(f"/api/deliveries/{delivery_id}/assign", headers=self.headers(self.user))

        self.assertEqual(response.status_code, 403)

    def test_invalid_status_value(self):
        delivery_id = self.create_delivery().json()["id"]

        response = self.client.patch(
            f"/api/deliveries/{delivery_id}/status",
            json={"status": "teleported"},
            headers=self.headers(self.operator)
        )

        self.assertEqual(response.status_code, 400)

    def test_status_unknown_delivery(self):
        response = self.client.patch(
            "/api/deliveries/missing/status",
            json={"status": "delivered"},
            headers=self.headers(self.operator)
        )
        self.assertEqual(response.status_code, 404)

    def test_create_with_numeric_ids(self):
        response = self.create_delivery(hospital_id=1)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error_code"], "NOT_FOUND")

    def test_get_delivery_detail(self):
        drone = self.make_drone("Detail", battery_level=88)
        delivery_id = self.create_delivery().json()["id"]
        self.client.patch(f"/api/deliveries/{delivery_id}/assign", headers=self.headers(self.operator))

        response = self.client.get(f"/api/deliveries/{delivery_id}", headers=self.headers(self.user))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["id"], delivery_id)
        self.assertEqual(body["status"], "preparing")
        self.assertEqual(body["hospital_name"], "District Hospital")
        self.assertEqual(body["village_name"], "Hill Village")
        self.assertEqual(body["medicine_name"], "Vaccines")
        self.assertEqual(body["drone_id"], drone.id)
        self.assertEqual(body["drone_name"], "Detail")
        self.assertEqual(body["battery_level"], 88)
        self.assertEqual(body["user_name"], "Test user")
        self.assertEqual(body["operator_name"], "Test operator")

    def test_get_unassigned_delivery_detail(self):
        delivery_id = self.create_delivery().json()["id"]

        body = self.client.get(f"/api/deliveries/{delivery_id}", headers=self.headers(self.user)).json()

        self.assertIsNone(body["drone_name"])
        self.assertIsNone(body["battery_level"])
        self.assertIsNone(body["operator_name"])
        self.assertIsNone(body["village_lat"])

    def test_get_other_users_delivery(self):
        delivery_id = self.create_delivery().json()["id"]

        response = self.client.get(f"/api/deliveries/{delivery_id}", headers=self.headers(self.other_user))

        self.assertEqual(response.status_code, 403)

    def test_list_is_scoped_for_users(self):
        mine = self.create_delivery().json()["id"]
        self.create_delivery(caller=self.other_user)

        response = self.client.get("/api/deliveries", headers=self.headers(self.user))

        self.assertEqual([d["id"] for d in response.json()], [mine])
        admin_view = self.client.get("/api/deliveries", headers=self.headers(self.admin))
        self.assertEqual(len(admin_view.json()), 2)

    def test_cancel_by_owner(self):
        delivery_id = self.create_delivery().json()["id"]

        response = self.client.delete(f"/api/deliveries/{delivery_id}", headers=self.headers(self.user))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["status"], "cancelled")

    def test_cancel_by_stranger(self):
        delivery_id = self.create_delivery().json()["id"]

        response = self.client.delete(f"/api/deliveries/{delivery_id}", headers=self.headers(self.other_user))

        self.assertEqual(response.status_code, 403)


class TestAuthRoutes(ApiTestCase):

    def test_register_login_me(self):
        registered = self.client.post("/api/auth/register", json={
            "email": "nurse@example.com",
            "password": "Secret123!",
            "name": "Field Nurse",
        })
        self.assertEqual(registered.status_code, 201)
        self.assertEqual(registered.json()["user"]["role"], "user")

        login = self.client.post("/api/auth/login", json={
            "email": "nurse@example.com",
            "password": "Secret123!",
        })
        self.assertEqual(login.status_code, 200)
        token = login.json()["access_token"]

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(me.json()["email"], "nurse@example.com")

    def test_duplicate_registration(self):
        body = {"email": "dup@example.com", "password": "Secret123!", "name": "Dup", "role": "operator"}
        self.assertEqual(self.client.post("/api/auth/register", json=body).status_code, 201)

        response = self.client.post("/api/auth/register", json=body)

        self.assertEqual(response.status_code, 409)

    def test_unknown_role(self):
        response = self.client.post("/api/auth/register", json={
            "email": "x@example.com", "password": "Secret123!", "name": "X", "role": "pilot"
        })
        self.assertEqual(response.status_code, 422)

    def test_wrong_password(self):
        self.client.post("/api/auth/register", json={
            "email": "pw@example.com", "password": "Secret123!", "name": "Pw"
        })

        response = self.client.post("/api/auth/login", json={"email": "pw@example.com", "password": "nope"})

        self.assertEqual(response.status_code, 401)


class TestAdminAndPublicRoutes(ApiTestCase):

    def test_admin_manages_fleet(self):
        created = self.client.post(
            "/api/admin/drones",
            json={"name": "Garuda-9", "model": "MedLift X4", "battery_level": 95},
            headers=self.headers(self.admin)
        )
        self.assertEqual(created.status_code, 201)
        drone_id = created.json()["id"]

        updated = self.client.put(
            f"/api/admin/drones/{drone_id}",
            json={"status": "charging"},
            headers=self.headers(self.admin)
        )
        self.assertEqual(updated.json()["status"], "charging")

        listed = self.client.get("/api/admin/drones?status=charging", headers=self.headers(self.admin))
        self.assertEqual([d["id"] for d in listed.json()], [drone_id])

        deleted = self.client.delete(f"/api/admin/drones/{drone_id}", headers=self.headers(self.admin))
        self.assertEqual(deleted.status_code, 200)

    def test_admin_cannot_set_delivering(self):
        response = self.client.post(
            "/api/admin/drones",
            json={"name": "Cheat", "status": "delivering"},
            headers=self.headers(self.admin)
        )
        self.assertEqual(response.status_code, 422)

    def test_update_with_null_status(self):
        drone = self.make_drone("Nullable")

        response = self.client.put(
            f"/api/admin/drones/{drone.id}",
            json={"status": None},
            headers=self.headers(self.admin)
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "INVALID_ARGUMENT")
        self.assertEqual(self.reload(drone).status, "available")

    def test_operator_cannot_manage_fleet(self):
        response = self.client.post(
            "/api/admin/drones", json={"name": "Nope"}, headers=self.headers(self.operator)
        )
        self.assertEqual(response.status_code, 403)

    def test_public_lookups(self):
        self.make_drone("Visible")

        hospitals = self.client.get("/api/public/hospitals")
        drones = self.client.get("/api/public/drones")

        self.assertEqual([h["id"] for h in hospitals.json()], [self.hospital.id])
        self.assertEqual([d["name"] for d in drones.json()], ["Visible"])
        self.assertEqual(len(self.client.get("/api/public/villages").json()), 1)
        self.assertEqual(len(self.client.get("/api/public/medicine-types").json()), 1)

    def test_health(self):
        response = self.client.get("/api/health")

        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("X-Request-ID", response.headers)


if __name__ == "__main__":
    unittest.main()
