"""Auth service — JWT login and user management."""

from typing import Dict, Any

from sqlalchemy.orm import Session

from apiforge.models.user import User
from apiforge.core.security import hash_password, verify_password, create_access_token
from apiforge.core.exceptions import AuthenticationError, NotFoundOrForbidden, ValidationError


class AuthService:
    """Handles authentication and user management."""

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Dict[str, Any]:
        """Authenticate user and return a JWT access token.

        Raises:
            AuthenticationError: If credentials are invalid.
        """
        user = db.query(User).filter(User.username == username).first()
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid username or password")

        return {
            "access_token": AuthService.issue_token(user),
            "token_type": "bearer",
            "user": user,
        }

    @staticmethod
    def create_user(
        db: Session,
        username: str,
        email: str,
        password: str,
        role: str = "Viewer",
    ) -> User:
        """Create a new user."""
        existing = db.query(User).filter((User.username == username) | (User.email == email)).first()
        if existing:
            raise ValidationError("User with this username or email already exists")

        user = User(
            username=username,
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        """Get a user by id."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundOrForbidden(f"User {user_id} not found")
        return user


auth_service = AuthService()
