#!/usr/bin/env python3
"""
End-to-end check against a running Function App:
login -> create note -> list -> update -> delete -> logout.

Usage:
    API_BASE=http://localhost:7071/api python smoke_check.py
Run create_test_account.py first so the credentials below can sign in.
"""
import os
import sys
import requests
from dotenv import load_dotenv

load_dotenv()

API_BASE = os.getenv("API_BASE", "http://localhost:7071/api")
TEST_EMAIL = os.getenv("TEST_EMAIL", "testuser@notes.local")
TEST_PASSWORD = os.getenv("TEST_PASSWORD", "TestNotes2024!")


def login(session):
    print("Step 1: Logging in...")
    response = session.post(
        f"{API_BASE}/auth/login",
        json={"email": TEST_EMAIL, "password": TEST_PASSWORD},
    )
    if response.status_code == 200:
        user = response.json()["data"]["user"]
        print(f"✅ Logged in: {user['email']}")
        return True

    print(f"❌ Failed: {response.status_code} - {response.text}")
    return False


def create_note(session):
    print("\nStep 2: Creating note...")
    response = session.post(
        f"{API_BASE}/notes",
        json={"title": "Smoke check", "content": "created by smoke_check.py"},
    )
    if response.status_code == 201:
        note = response.json()["data"]
        print(f"✅ Note created: {note['id']}")
        return note["id"]

    print(f"❌ Failed: {response.status_code} - {response.text}")
    return None


def list_notes(session, note_id):
    print("\nStep 3: Listing notes...")
    response = session.get(f"{API_BASE}/notes")
    if response.status_code == 200:
        ids = [n["id"] for n in response.json()["data"]]
        if note_id in ids:
            print(f"✅ {len(ids)} note(s), new note present")
            return True

    print(f"❌ Failed: {response.status_code} - {response.text}")
    return False


def complete_note(session, note_id):
    print("\nStep 4: Marking note completed...")
    response = session.put(f"{API_BASE}/notes/{note_id}", json={"completed": True})
    if response.status_code == 200 and response.json()["data"]["completed"]:
        print("✅ Note updated")
        return True

    print(f"❌ Failed: {response.status_code} - {response.text}")
    return False


def delete_note(session, note_id):
    print("\nStep 5: Deleting note...")
    response = session.delete(f"{API_BASE}/notes/{note_id}")
    if response.status_code == 200:
        print("✅ Note deleted")
        return True

    print(f"❌ Failed: {response.status_code} - {response.text}")
    return False


def logout(session):
    print("\nStep 6: Logging out...")
    response = session.post(f"{API_BASE}/auth/logout")
    after = session.get(f"{API_BASE}/notes")
    if response.status_code == 200 and after.status_code == 401:
        print("✅ Logged out, session cookie cleared")
        return True

    print(f"❌ Failed: logout={response.status_code} notes-after={after.status_code}")
    return False


def main():
    print(f"=== Smoke check against {API_BASE} ===\n")
    # requests.Session keeps the httpOnly cookie between calls like a browser
    session = requests.Session()

    if not login(session):
        return 1
    note_id = create_note(session)
    if not note_id:
        return 1
    ok = list_notes(session, note_id) and complete_note(session, note_id) and delete_note(session, note_id)
    if not ok or not logout(session):
        return 1

    print("\n✅ All steps passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
