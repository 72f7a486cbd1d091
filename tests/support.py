"""Shared helpers for the test suite."""

import uuid

from apiforge.db.session import SessionLocal, engine
from apiforge.db.setup import create_base_tables
from apiforge.services.auth_service import auth_service

create_base_tables(engine)


def make_user(role: str):
    """Create a user with ``role``; returns (user_id, bearer token)."""
    db = SessionLocal()
    try:
        suffix = uuid.uuid4().hex[:8]
        username = f"{role.lower()}_{suffix}"
        user = auth_service.create_user(db, username, f"{username}@example.com", "secret123", role)
        return user.id, auth_service.issue_token(user)
    finally:
        db.close()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_name(prefix: str = "Thing") -> str:
    return f"{prefix}{uuid.uuid4().hex[:8]}"
