"""Tests for the /users endpoints."""

from db import SessionLocal
from models import Note
from routes.users import profile, delete_account
from services.note_service import create_note
from helpers import make_request, invoke, payload, verified_user


class TestProfile:
    def test_get_profile(self):
        user, token = verified_user()

        resp = invoke(profile, make_request("GET", "users/profile", token=token))

        assert resp.status_code == 200
        data = payload(resp)["data"]
        assert data["id"] == str(user.id)
        assert data["email"] == "alice@example.com"
        assert data["isVerified"] is True
        assert "password_hash" not in data
        assert "passwordHash" not in data

    def test_update_profile(self):
        _, token = verified_user()

        resp = invoke(profile, make_request("PUT", "users/profile", {
            "name": "Alice Liddell", "dateOfBirth": "1990-05-04", "avatar": "https://img/a.png",
        }, token=token))

        assert resp.status_code == 200
        data = payload(resp)["data"]
        assert data["name"] == "Alice Liddell"
        assert data["dateOfBirth"] == "1990-05-04"
        assert data["avatar"] == "https://img/a.png"

    def test_empty_values_keep_existing(self):
        _, token = verified_user()

        resp = invoke(profile, make_request("PUT", "users/profile", {"name": ""}, token=token))

        assert payload(resp)["data"]["name"] == "Alice"

    def test_invalid_date(self):
        _, token = verified_user()

        resp = invoke(profile, make_request("PUT", "users/profile", {"dateOfBirth": "04/05/1990"}, token=token))

        assert resp.status_code == 400

    def test_requires_session(self):
        assert invoke(profile, make_request("GET", "users/profile")).status_code == 401


class TestDeleteAccount:
    def test_deletes_user_and_notes(self):
        user, token = verified_user()
        create_note(user.id, "one")
        create_note(user.id, "two")
        other, _ = verified_user("bob@example.com", "Bob")
        create_note(other.id, "bob's")

        resp = invoke(delete_account, make_request("DELETE", "users/account", token=token))

        assert resp.status_code == 200
        assert "Max-Age=0" in resp.headers.get("Set-Cookie")
        with SessionLocal() as db:
            assert db.query(Note).filter(Note.user_id == user.id).count() == 0
            assert db.query(Note).filter(Note.user_id == other.id).count() == 1

        again = invoke(profile, make_request("GET", "users/profile", token=token))
        assert again.status_code == 401
