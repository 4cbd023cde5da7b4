#!/usr/bin/env python3
import os
import sys
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    print("ERROR: DATABASE_URL not found in .env")
    sys.exit(1)

from db import SessionLocal
from models import User, Note
from auth.utils import hash_password

# Test account credentials
TEST_EMAIL = os.getenv("TEST_EMAIL", "testuser@notes.local")
TEST_PASSWORD = os.getenv("TEST_PASSWORD", "TestNotes2024!")
TEST_NAME = "Test User"

print("=== Creating Test Account ===\n")

session = SessionLocal()

# Check if user already exists
existing_user = session.query(User).filter(User.email == TEST_EMAIL).first()

if existing_user:
    print(f"✅ Test user already exists: {TEST_EMAIL}")
    print(f"   User ID: {existing_user.id}")

    # Reset password and make sure the account can sign in
    existing_user.password_hash = hash_password(TEST_PASSWORD)
    existing_user.is_verified = True
    session.commit()
    print("   Password reset and account marked verified")
else:
    # Create a verified account so testers can skip the email code
    user = User(
        email=TEST_EMAIL,
        name=TEST_NAME,
        password_hash=hash_password(TEST_PASSWORD),
        is_verified=True,
    )
    session.add(user)
    session.flush()

    print(f"✅ Created test user: {TEST_EMAIL}")
    print(f"   User ID: {user.id}")

    session.add(Note(
        user_id=user.id,
        title="Welcome",
        content="This is a sample note. Edit or delete it.",
    ))
    session.commit()
    print("   Added a sample note")

print("\n" + "="*50)
print("TEST ACCOUNT CREDENTIALS:")
print("="*50)
print(f"Email:    {TEST_EMAIL}")
print(f"Password: {TEST_PASSWORD}")
print("="*50)
print("\nShare these credentials with your testers!")

session.close()
