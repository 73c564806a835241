"""
Integration tests for the HTTP API: auth, profile, tracking and medical history.
"""

from fastapi.testclient import TestClient
from jose import jwt

from fittrack.config import settings
from fittrack.main import create_app


class TestServiceEndpoints:

    def test_root(self, client):
        data = client.get("/").json()
        assert data["app"] == "FitTrack"
        assert data["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestAuthAPI:

    def test_register_login_me(self, client):
        response = client.post("/auth/register", json={
            "username": "alice", "password": "password1", "email": "alice@example.com",
        })
        assert response.status_code == 201
        user = response.json()
        assert "hashed_password" not in user
        assert user["username"] == "alice"

        response = client.post("/auth/login", data={"username": "alice", "password": "password1"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
        assert me["user_id"] == user["user_id"]

    def test_duplicate_username(self, client):
        client.post("/auth/register", json={"username": "bob", "password": "password1"})
        response = client.post("/auth/register", json={"username": "bob", "password": "password2"})
        assert response.status_code == 400

    def test_wrong_password(self, client):
        client.post("/auth/register", json={"username": "carol", "password": "password1"})
        response = client.post("/auth/login", data={"username": "carol", "password": "nope-nope"})
        assert response.status_code == 401

    def test_protected_routes_need_a_token(self, client):
        # HTTPBearer answers 403 on older FastAPI releases and 401 on newer ones
        assert client.get("/tracking/weight").status_code in (401, 403)
        response = client.get("/tracking/weight", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_tokens_use_the_app_secret_key(self, test_settings, storage, fake_llm):
        test_settings.secret_key = "app-specific-secret"
        client = TestClient(create_app(settings=test_settings, storage=storage, llm_provider=fake_llm, news_client=None))
        client.post("/auth/register", json={"username": "erin", "password": "password1"})
        token = client.post("/auth/login", data={"username": "erin", "password": "password1"}).json()["access_token"]

        claims = jwt.decode(token, "app-specific-secret", algorithms=[test_settings.algorithm])
        assert claims["username"] == "erin"
        assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200

        forged = jwt.encode(
            {"sub": claims["sub"], "username": "erin"},
            settings.secret_key,
            algorithm=test_settings.algorithm,
        )
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401


class TestProfileAPI:

    def test_update_profile(self, client, auth_headers):
        response = client.put("/user/profile", json={
            "gender": "female", "dob": "1990-04-12T00:00:00Z", "height_cm": 168, "weight_kg": 60,
        }, headers=auth_headers)
        assert response.status_code == 200

        profile = client.get("/user/profile", headers=auth_headers).json()
        assert profile["dob"] == "1990-04-12"
        assert profile["weight_kg"] == 60
        assert profile["username"] == "testuser"

    def test_password_change(self, client, auth_headers):
        client.put("/user/profile", json={"password": "newpassword"}, headers=auth_headers)
        assert client.post("/auth/login", data={"username": "testuser", "password": "testpass123"}).status_code == 401
        assert client.post("/auth/login", data={"username": "testuser", "password": "newpassword"}).status_code == 200

    def test_invalid_profile_values(self, client, auth_headers):
        response = client.put("/user/profile", json={"height_cm": -3}, headers=auth_headers)
        assert response.status_code == 422


class TestTrackingAPI:

    def test_weight_and_sleep(self, client, auth_headers):
        assert client.post("/tracking/weight", json={"date": "2024-01-01", "weight": 70.2}, headers=auth_headers).status_code == 201
        assert client.post("/tracking/weight", json={"date": "2024-01-03", "weight": 69.8}, headers=auth_headers).status_code == 201

        rows = client.get("/tracking/weight", params={"start": "2024-01-02"}, headers=auth_headers).json()
        assert [r["weight"] for r in rows] == [69.8]

        response = client.post("/tracking/sleep", json={"date": "2024-01-01", "duration_hours": 7, "quality": "good"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["quality"] == "Good"

    def test_invalid_inputs(self, client, auth_headers):
        assert client.post("/tracking/weight", json={"date": "someday", "weight": 70}, headers=auth_headers).status_code == 422
        assert client.post("/tracking/weight", json={"date": "2024-01-01", "weight": 0}, headers=auth_headers).status_code == 422
        assert client.post("/tracking/sleep", json={"date": "2024-01-01", "duration_hours": 25, "quality": "Good"}, headers=auth_headers).status_code == 422
        assert client.get("/tracking/weight", params={"start": "bad"}, headers=auth_headers).status_code == 422

    def test_rows_are_private(self, client, auth_headers, other_auth_headers):
        client.post("/tracking/weight", json={"date": "2024-01-01", "weight": 70.2}, headers=auth_headers)
        assert client.get("/tracking/weight", headers=other_auth_headers).json() == []

    def test_calories_update_latest_row_of_date(self, client, auth_headers):
        first = client.post("/tracking/calories", json={"date": "2024-01-01", "calories_consumed": 1800}, headers=auth_headers).json()
        assert first["net"] == 1800
        client.post("/tracking/calories", json={"date": "2024-01-01", "calories_consumed": 2000, "calories_burned": 300}, headers=auth_headers)

        response = client.put("/tracking/calories/2024-01-01", json={"calories_burned": 500}, headers=auth_headers)
        assert response.status_code == 200
        updated = response.json()
        assert updated["calories_consumed"] == 2000
        assert updated["calories_burned"] == 500
        assert updated["net"] == 1500

        rows = client.get("/tracking/calories", headers=auth_headers).json()
        assert sorted(r["calories_burned"] for r in rows) == [0, 500]

    def test_calories_update_missing_date(self, client, auth_headers):
        response = client.put("/tracking/calories/2024-02-01", json={"calories_burned": 5}, headers=auth_headers)
        assert response.status_code == 404

    def test_activity_calories_use_default_weight(self, client, auth_headers):
        response = client.post("/tracking/activity", json={
            "date": "2024-01-01", "activity_type": "running", "duration_minutes": 30, "intensity": "moderate",
        }, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["calories_burned"] == 291

    def test_activity_calories_use_latest_logged_weight(self, client, auth_headers):
        client.post("/tracking/weight", json={"date": "2024-01-01", "weight": 90}, headers=auth_headers)
        client.post("/tracking/weight", json={"date": "2024-01-05", "weight": 80}, headers=auth_headers)
        response = client.post("/tracking/activity", json={
            "date": "2024-01-06", "activity_type": "hiking", "duration_minutes": 60,
        }, headers=auth_headers)
        # hiking/moderate 6.0 MET at 80 kg for one hour
        assert response.json()["calories_burned"] == 480

    def test_activity_calories_prefer_profile_weight(self, client, auth_headers):
        client.put("/user/profile", json={"weight_kg": 60}, headers=auth_headers)
        client.post("/tracking/weight", json={"date": "2024-01-05", "weight": 80}, headers=auth_headers)
        response = client.post("/tracking/activity", json={
            "date": "2024-01-06", "activity_type": "hiking", "duration_minutes": 60,
        }, headers=auth_headers)
        assert response.json()["calories_burned"] == 360

    def test_unknown_activity_type_is_400(self, client, auth_headers):
        response = client.post("/tracking/activity", json={
            "date": "2024-01-01", "activity_type": "skydiving", "duration_minutes": 30,
        }, headers=auth_headers)
        assert response.status_code == 400
        assert "skydiving" in response.json()["detail"]

    def test_unknown_activity_type_with_fallback(self, test_settings, storage, fake_llm):
        test_settings.calorie_unknown_activity_fallback = True
        client = TestClient(create_app(settings=test_settings, storage=storage, llm_provider=fake_llm, news_client=None))
        client.post("/auth/register", json={"username": "dave", "password": "password1"})
        token = client.post("/auth/login", data={"username": "dave", "password": "password1"}).json()["access_token"]

        response = client.post("/tracking/activity", json={
            "date": "2024-01-01", "activity_type": "skydiving", "duration_minutes": 60,
        }, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 201
        assert response.json()["activity_type"] == "other"
        assert response.json()["calories_burned"] == 280

    def test_estimate_does_not_store(self, client, auth_headers):
        response = client.post("/tracking/activity/estimate", json={
            "activity_type": "running", "duration_minutes": 30, "intensity": "moderate", "weight_kg": 70,
        }, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["calories_burned"] == 291
        assert data["met"] == 8.3
        assert client.get("/tracking/activity", headers=auth_headers).json() == []

    def test_estimate_unknown_intensity(self, client, auth_headers):
        response = client.post("/tracking/activity/estimate", json={
            "activity_type": "running", "duration_minutes": 30, "intensity": "extreme",
        }, headers=auth_headers)
        assert response.status_code == 400

    def test_activity_summary(self, client, auth_headers):
        for activity_type, minutes in (("running", 30), ("cycling", 60)):
            client.post("/tracking/activity", json={
                "date": "2024-01-01", "activity_type": activity_type, "duration_minutes": minutes,
            }, headers=auth_headers)
        client.post("/tracking/activity", json={
            "date": "2024-01-03", "activity_type": "yoga", "duration_minutes": 45,
        }, headers=auth_headers)

        response = client.get("/tracking/activity/summary", params={"start": "2024-01-01", "end": "2024-01-31"}, headers=auth_headers)
        assert response.status_code == 200
        summaries = response.json()
        assert [s["date"] for s in summaries] == ["2024-01-03", "2024-01-01"]
        assert summaries[1]["total_activities"] == 2
        assert summaries[1]["total_duration"] == 90
        assert summaries[1]["activities_performed"] == ["cycling", "running"]

    def test_activity_summary_bad_range(self, client, auth_headers):
        response = client.get("/tracking/activity/summary", params={"start": "2024-02-01", "end": "2024-01-01"}, headers=auth_headers)
        assert response.status_code == 400
        response = client.get("/tracking/activity/summary", params={"start": "2024-01-01"}, headers=auth_headers)
        assert response.status_code == 422


class TestMedicalAPI:

    def test_crud(self, client, auth_headers, other_auth_headers):
        response = client.post("/medical/history", json={
            "condition": "Hypertension", "diagnosis_date": "2021-06-01", "medications": "Lisinopril",
        }, headers=auth_headers)
        assert response.status_code == 201
        condition = response.json()

        response = client.put(f"/medical/history/{condition['id']}", json={
            "condition": "Hypertension", "diagnosis_date": "2021-06-01", "treatment": "Diet",
        }, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["treatment"] == "Diet"

        assert client.put(f"/medical/history/{condition['id']}", json={
            "condition": "x", "diagnosis_date": "2021-06-01",
        }, headers=other_auth_headers).status_code == 404
        assert client.delete(f"/medical/history/{condition['id']}", headers=other_auth_headers).status_code == 404
        assert client.get("/medical/history", headers=other_auth_headers).json() == []

        assert client.delete(f"/medical/history/{condition['id']}", headers=auth_headers).status_code == 204
        assert client.get("/medical/history", headers=auth_headers).json() == []

    def test_missing_condition(self, client, auth_headers):
        response = client.post("/medical/history", json={"diagnosis_date": "2021-06-01"}, headers=auth_headers)
        assert response.status_code == 422
