"""Seed the default admin user from env vars."""

from sqlalchemy.orm import Session
from apiforge.models.user import User
from apiforge.core.security import hash_password
from apiforge.core.config import settings


def seed_admin(db: Session) -> User:
    """Create the default admin user if not already present."""
    existing = db.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if existing:
        print(f"ℹ️  Admin '{settings.ADMIN_USERNAME}' already exists, skipping.")
        return existing

    admin = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        hashed_password=hash_password(settings.ADMIN_PASSWORD),
        role="Admin",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    print(f"✅ Created admin user: {settings.ADMIN_USERNAME}")
    return admin
