"""
Integration tests for Exercise API endpoints

Tests CRUD operations, validation, the owner guard (including its
"invalid token or exercise not found" merge) and userId immutability.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import core.security as security
from models import Exercise


class TestCreateExercise:
    """Test POST /exercises endpoint"""

    def test_create_with_defaults(self, client, make_user, auth_headers):
        user = make_user()

        response = client.post("/exercises", json={"name": "Run"}, headers=auth_headers(user))

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Run"
        assert data["durationMinutes"] == 10
        assert data["currentBpmRecord"] == 0
        assert data["userId"] == str(user.id)
        assert data["history"] == []

    def test_create_with_all_fields(self, client, make_user, auth_headers):
        user = make_user()

        response = client.post(
            "/exercises",
            json={"name": "Row", "durationMinutes": 15, "currentBpmRecord": 150},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["durationMinutes"] == 15
        assert data["currentBpmRecord"] == 150

    def test_owner_comes_from_token_not_body(self, client, make_user, auth_headers):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")

        response = client.post(
            "/exercises",
            json={"name": "Run", "userId": str(bob.id)},
            headers=auth_headers(alice),
        )

        assert response.status_code == 201
        assert response.json()["userId"] == str(alice.id)

    def test_create_requires_auth(self, client, db_session):
        response = client.post("/exercises", json={"name": "Run"})

        assert response.status_code == 401
        assert db_session.query(Exercise).count() == 0

    def test_create_with_invalid_token_is_401(self, client):
        response = client.post("/exercises", json={"name": "Run"}, headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_validation(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        assert client.post("/exercises", json={}, headers=headers).status_code == 422
        assert client.post("/exercises", json={"name": ""}, headers=headers).status_code == 422
        assert client.post("/exercises", json={"name": "   "}, headers=headers).status_code == 422
        assert client.post("/exercises", json={"name": "Run", "durationMinutes": 0}, headers=headers).status_code == 422
        assert client.post("/exercises", json={"name": "Run", "currentBpmRecord": -1}, headers=headers).status_code == 422
        assert client.post("/exercises", json={"name": "Run", "durationMinutes": 1.5}, headers=headers).status_code == 422

    def test_out_of_range_integers_are_rejected(self, client, make_user, auth_headers, db_session):
        headers = auth_headers(make_user())

        for field in ("durationMinutes", "currentBpmRecord"):
            response = client.post("/exercises", json={"name": "Run", field: 2**31}, headers=headers)
            assert response.status_code == 422, field
        assert db_session.query(Exercise).count() == 0


class TestReadExercises:
    """Reads are public"""

    def test_list_all(self, client, make_user, make_exercise):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")
        make_exercise(alice, name="Run")
        make_exercise(bob, name="Swim")

        response = client.get("/exercises")

        assert response.status_code == 200
        assert {e["name"] for e in response.json()} == {"Run", "Swim"}

    def test_list_filtered_by_user(self, client, make_user, make_exercise):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")
        make_exercise(alice, name="Run")
        make_exercise(bob, name="Swim")

        response = client.get(f"/exercises?userId={bob.id}")

        assert response.status_code == 200
        data = response.json()
        assert [e["name"] for e in data] == ["Swim"]
        assert data[0]["userId"] == str(bob.id)

    def test_list_filtered_by_malformed_user_id_is_empty(self, client, make_user, make_exercise):
        make_exercise(make_user())
        assert client.get("/exercises?userId=nope").json() == []

    def test_get_by_id_without_auth(self, client, make_user, make_exercise, make_history):
        exercise = make_exercise(make_user())
        now = datetime.now(timezone.utc)
        make_history(exercise, bpm=100, date=now - timedelta(minutes=5))
        make_history(exercise, bpm=140, date=now)

        response = client.get(f"/exercises/{exercise.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(exercise.id)
        assert [h["bpm"] for h in data["history"]] == [140, 100]

    def test_get_unknown_is_404(self, client):
        assert client.get(f"/exercises/{uuid4()}").status_code == 404
        assert client.get("/exercises/not-a-uuid").status_code == 404


class TestUpdateExercise:
    """Test PATCH /exercises/{id} and its owner guard"""

    def test_partial_update_keeps_other_fields(self, client, make_user, make_exercise, auth_headers):
        user = make_user()
        exercise = make_exercise(user, name="Run", duration_minutes=15, current_bpm_record=120)

        response = client.patch(f"/exercises/{exercise.id}", json={"currentBpmRecord": 160}, headers=auth_headers(user))

        assert response.status_code == 200
        data = response.json()
        assert data["currentBpmRecord"] == 160
        assert data["name"] == "Run"
        assert data["durationMinutes"] == 15

    def test_user_id_cannot_be_changed(self, client, make_user, make_exercise, auth_headers, db_session):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")
        exercise = make_exercise(alice)

        for payload in ({"userId": str(bob.id)}, {"user_id": str(bob.id)}, {"name": "Jog", "userId": str(bob.id)}):
            response = client.patch(f"/exercises/{exercise.id}", json=payload, headers=auth_headers(alice))
            assert response.status_code == 200
            assert response.json()["userId"] == str(alice.id)

        db_session.expire_all()
        assert db_session.get(Exercise, exercise.id).user_id == alice.id

    def test_explicit_null_is_ignored(self, client, make_user, make_exercise, auth_headers):
        user = make_user()
        exercise = make_exercise(user, name="Run")

        response = client.patch(f"/exercises/{exercise.id}", json={"name": None}, headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["name"] == "Run"

    def test_update_validation(self, client, make_user, make_exercise, auth_headers):
        user = make_user()
        exercise = make_exercise(user)

        response = client.patch(f"/exercises/{exercise.id}", json={"durationMinutes": 0}, headers=auth_headers(user))
        assert response.status_code == 422

        for body in ({"name": "   "}, {"name": ""}, {"durationMinutes": 10**20}, {"currentBpmRecord": 2**31}):
            response = client.patch(f"/exercises/{exercise.id}", json=body, headers=auth_headers(user))
            assert response.status_code == 422, body

        stored = client.get(f"/exercises/{exercise.id}").json()
        assert stored["name"] == "Run"
        assert stored["durationMinutes"] == 10
        assert stored["currentBpmRecord"] == 0

    def test_other_users_token_is_forbidden(self, client, make_user, make_exercise, auth_headers, db_session):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")
        exercise = make_exercise(alice, name="Run")

        response = client.patch(f"/exercises/{exercise.id}", json={"name": "Mine now"}, headers=auth_headers(bob))

        assert response.status_code == 403
        assert response.json()["detail"] == "You can only access your own exercises"
        db_session.expire_all()
        assert db_session.get(Exercise, exercise.id).name == "Run"

    def test_unknown_exercise_is_reported_like_a_bad_token(self, client, make_user, auth_headers):
        user = make_user()

        response = client.patch(f"/exercises/{uuid4()}", json={"name": "x"}, headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid token or exercise not found"

    def test_invalid_token_is_forbidden(self, client, make_user, make_exercise):
        exercise = make_exercise(make_user())

        response = client.patch(
            f"/exercises/{exercise.id}", json={"name": "x"}, headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid token or exercise not found"

    def test_expired_token_is_forbidden(self, client, make_user, make_exercise):
        user = make_user()
        exercise = make_exercise(user)
        token = security.create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-1))

        response = client.patch(
            f"/exercises/{exercise.id}", json={"name": "x"}, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 403

    def test_missing_token_is_401(self, client, make_user, make_exercise):
        exercise = make_exercise(make_user())
        assert client.patch(f"/exercises/{exercise.id}", json={"name": "x"}).status_code == 401


class TestDeleteExercise:
    """Test DELETE /exercises/{id}"""

    def test_owner_can_delete(self, client, make_user, make_exercise, auth_headers):
        user = make_user()
        exercise = make_exercise(user)

        response = client.delete(f"/exercises/{exercise.id}", headers=auth_headers(user))

        assert response.status_code == 200
        assert client.get(f"/exercises/{exercise.id}").status_code == 404

    def test_other_user_cannot_delete(self, client, make_user, make_exercise, auth_headers):
        alice = make_user()
        bob = make_user(username="bob", email="bob@x.com")
        exercise = make_exercise(alice)

        response = client.delete(f"/exercises/{exercise.id}", headers=auth_headers(bob))

        assert response.status_code == 403
        assert client.get(f"/exercises/{exercise.id}").status_code == 200

    def test_delete_without_token_is_401(self, client, make_user, make_exercise):
        exercise = make_exercise(make_user())
        assert client.delete(f"/exercises/{exercise.id}").status_code == 401
