"""
Integration tests for ledger routes (/api/*).

Covers:
- /api/user, /api/users
- /api/activities (list, record, validation, recent, by id)
- /api/rewards (list, recent, by id)
- /api/progress, /api/impact, /api/catalog
"""
import pytest


def _activity(**overrides):
    body = {
        "category": "Transport",
        "activity_type": "Bike",
        "quantity": 5,
        "unit": "miles",
        "activity_date": "2026-10-01T09:00:00Z",
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# /api/user
# ---------------------------------------------------------------------------
class TestUser:
    def test_default_user_state(self, client):
        resp = client.get("/api/user")
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == "default-user"
        assert data["total_points"] == 0
        assert data["level"] == 1

    def test_create_user(self, client):
        resp = client.post("/api/users", json={"username": "Fern", "email": "fern@greenmove.test"})
        assert resp.status_code == 201
        assert resp.json()["username"] == "Fern"

    def test_create_user_bad_email(self, client):
        resp = client.post("/api/users", json={"username": "Fern", "email": "fern"})
        assert resp.status_code == 400

    def test_default_username_cannot_be_registered(self, client):
        resp = client.post("/api/users", json={"username": "EcoWarrior", "email": "x@greenmove.test"})
        assert resp.status_code == 400
        assert client.get("/api/user").json()["username"] == "EcoWarrior"

    def test_create_user_duplicate(self, client):
        client.post("/api/users", json={"username": "Fern", "email": "fern@greenmove.test"})
        resp = client.post("/api/users", json={"username": "Fern", "email": "f2@greenmove.test"})
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# /api/activities
# ---------------------------------------------------------------------------
class TestRecordActivity:
    def test_record_returns_activity_rewards_and_user(self, client):
        resp = client.post("/api/activities", json=_activity())
        assert resp.status_code == 201
        data = resp.json()
        assert data["activity"]["carbon_saved"] == pytest.approx(4.5)
        assert data["activity"]["points_earned"] == 50
        assert [r["title"] for r in data["rewards"]] == ["First Steps"]
        assert data["user"]["total_points"] == 75

    def test_location_and_notes(self, client):
        resp = client.post("/api/activities", json=_activity(
            notes="to the office", location={"lat": 40.7, "lng": -74.0, "name": "Hudson"},
        ))
        activity = resp.json()["activity"]
        assert activity["notes"] == "to the office"
        assert activity["location"]["name"] == "Hudson"

    def test_unknown_type_uses_fallback(self, client):
        resp = client.post("/api/activities", json=_activity(activity_type="Unicycle", quantity=4))
        assert resp.status_code == 201
        assert resp.json()["activity"]["points_earned"] == 20

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity_rejected(self, client, quantity):
        resp = client.post("/api/activities", json=_activity(quantity=quantity))
        assert resp.status_code == 422

    def test_missing_category_rejected(self, client):
        body = _activity()
        del body["category"]
        assert client.post("/api/activities", json=body).status_code == 422

    def test_bad_date_rejected(self, client):
        resp = client.post("/api/activities", json=_activity(activity_date="yesterday"))
        assert resp.status_code == 422

    def test_bad_latitude_rejected(self, client):
        resp = client.post("/api/activities", json=_activity(location={"lat": 123, "lng": 0}))
        assert resp.status_code == 422


class TestListActivities:
    def test_list_and_get(self, client):
        created = client.post("/api/activities", json=_activity()).json()["activity"]
        listed = client.get("/api/activities").json()
        assert [a["id"] for a in listed] == [created["id"]]
        assert client.get(f"/api/activities/{created['id']}").json()["id"] == created["id"]

    def test_get_missing(self, client):
        assert client.get("/api/activities/nope").status_code == 404

    def test_recent_default_limit(self, client):
        for day in range(1, 8):
            client.post("/api/activities", json=_activity(
                quantity=1, activity_date=f"2026-10-0{day}T09:00:00Z",
            ))
        recent = client.get("/api/activities/recent").json()
        assert len(recent) == 5
        assert recent[0]["activity_date"].startswith("2026-10-07")

    def test_recent_limit_validated(self, client):
        assert client.get("/api/activities/recent?limit=0").status_code == 400


# ---------------------------------------------------------------------------
# /api/rewards
# ---------------------------------------------------------------------------
class TestRewards:
    def test_rewards_listed(self, client):
        client.post("/api/activities", json=_activity())
        rewards = client.get("/api/rewards").json()
        assert len(rewards) == 1
        assert rewards[0]["points_awarded"] == 25

    def test_no_duplicates_after_many_submissions(self, client):
        for _ in range(5):
            client.post("/api/activities", json=_activity(category="Food", activity_type="Plant-based Meal"))
        titles = [r["title"] for r in client.get("/api/rewards").json()]
        assert len(titles) == len(set(titles))

    def test_recent_rewards_limit(self, client):
        client.post("/api/activities", json=_activity(
            category="Food", activity_type="Plant-based Meal", quantity=22, unit="meals",
        ))
        assert len(client.get("/api/rewards/recent").json()) == 3

    def test_get_reward(self, client):
        reward = client.post("/api/activities", json=_activity()).json()["rewards"][0]
        assert client.get(f"/api/rewards/{reward['id']}").json()["title"] == "First Steps"

    def test_get_missing_reward(self, client):
        assert client.get("/api/rewards/nope").status_code == 404


# ---------------------------------------------------------------------------
# /api/progress, /api/impact, /api/catalog
# ---------------------------------------------------------------------------
class TestSummaries:
    def test_progress(self, client):
        client.post("/api/activities", json=_activity(quantity=7))
        client.post("/api/activities", json=_activity(quantity=2))
        data = client.get("/api/progress").json()
        assert data["level"] == 2
        assert data["total_points"] == 165

    def test_impact(self, client):
        client.post("/api/activities", json=_activity())
        data = client.get("/api/impact").json()
        assert data["total_activities"] == 1
        assert data["by_category"][0]["name"] == "Transport"

    def test_catalog(self, client):
        data = client.get("/api/catalog").json()
        assert len(data) == 5
        assert data[0]["category"] == "Transport"


# ---------------------------------------------------------------------------
# Audit trail wiring
# ---------------------------------------------------------------------------
class TestAuditWiring:
    def test_submission_written_to_audit_log(self, ledger, monkeypatch, tmp_path):
        import greenmove.infrastructure.audit as audit_mod
        from fastapi import FastAPI
        from fastapi.testclient import TestClient
        from greenmove.api.routes.ledger_routes import router, init_routes

        monkeypatch.setattr(audit_mod, "LOG_DIR", tmp_path)
        monkeypatch.setattr(audit_mod, "LOG_FILE", tmp_path / "audit.log")
        app = FastAPI()
        init_routes(ledger, audit=True)
        app.include_router(router)

        TestClient(app).post("/api/activities", json=_activity())
        lines = (tmp_path / "audit.log").read_text().splitlines()
        assert len(lines) == 2
