"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Cheap bcrypt for tests and no real mail server
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ADMIN_JWT_SECRET", "test_admin_secret")
os.environ.setdefault("MONGO_DB_NAME", "admin_identity_test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from mongomock_motor import AsyncMongoMockClient

from admin_identity.db.admin_repository import AdminRepository
from admin_identity.services import admin_account_service

FIRST_ADMIN_EMAIL = "a@x.com"
FIRST_ADMIN_PASSWORD = "Secret123!"


@pytest.fixture
def db():
    """Fresh in-memory Mongo database per test."""
    return AsyncMongoMockClient()["admin_identity_test"]


@pytest.fixture
def repo(db):
    return AdminRepository(db)


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    outbox = []

    async def fake_send_email(to_email, subject, body):
        outbox.append({"to": to_email, "subject": subject, "body": body})

    monkeypatch.setattr("admin_identity.services.email_service.send_email", fake_send_email)
    return outbox


async def make_first_admin(db, email=FIRST_ADMIN_EMAIL, password=FIRST_ADMIN_PASSWORD):
    await AdminRepository(db).ensure_indexes()
    return await admin_account_service.create_first_admin(db, email, password)
