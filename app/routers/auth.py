from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import AuthService, get_auth_service, get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.user import LoginRequest, LoginResponse, MessageResponse, UserPublic, VerifyResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    token, user = auth.login(db, body.email, body.password)
    return LoginResponse(token=token, user=UserPublic.model_validate(user))


@router.get("/verify", response_model=VerifyResponse)
def verify(user: User = Depends(get_current_user)):
    return VerifyResponse(user=UserPublic.model_validate(user))


@router.post("/create-demo-user", response_model=MessageResponse)
def create_demo_user(
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """Development only: create the configured demo account. 404 unless enabled with a password."""
    auth.create_demo_user(db)
    return MessageResponse(message="Demo user created")
