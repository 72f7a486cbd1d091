"""Auth API router — login, register, me."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apiforge.api.deps import ok
from apiforge.db.session import get_db
from apiforge.schemas.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from apiforge.services.auth_service import auth_service
from apiforge.services.permissions import Identity
from apiforge.core.security import get_current_identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a JWT access token."""
    result = auth_service.authenticate(db, body.username, body.password)
    token = TokenResponse(
        access_token=result["access_token"],
        user=UserOut.model_validate(result["user"]),
    )
    return ok(token.model_dump(mode="json"))


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user with the Viewer role."""
    user = auth_service.create_user(db, body.username, body.email, body.password, "Viewer")
    return ok(UserOut.model_validate(user).model_dump(mode="json"), message="User registered")


@router.get("/me")
async def get_me(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Get current user profile."""
    user = auth_service.get_user(db, identity.id)
    return ok(UserOut.model_validate(user).model_dump(mode="json"))
