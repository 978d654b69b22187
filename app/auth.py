import logging
from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.config import Settings, get_settings
from app.database import get_db
from app.exceptions import FeatureDisabled, InvalidCredentials, Unauthenticated, UserAlreadyExists
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import TokenPayload

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)

def create_access_token(user_id: str, email: str, settings: Settings) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {
        "sub": user_id,
        "email": email,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)

def decode_token(token: str, settings: Settings) -> TokenPayload | None:
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        decoded = TokenPayload(
            sub=payload["sub"],
            email=payload["email"],
            exp=payload["exp"],
            type=payload.get("type", "access"),
        )
    except (JWTError, KeyError, ValueError):
        return None
    if decoded.type != "access":
        return None
    return decoded


class AuthService:
    """Stateless login and token verification against the credential store."""

    def __init__(self, settings: Settings, repository: UserRepository | None = None):
        self._settings = settings
        self._repo = repository or UserRepository()

    def login(self, db: Session, email: str, password: str) -> tuple[str, User]:
        # Same error for unknown email and wrong password so account existence is not revealed.
        user = self._repo.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Login rejected")
            raise InvalidCredentials()
        token = create_access_token(user.id, user.email, self._settings)
        logger.info("Login succeeded for user %s", user.id)
        return token, user

    def verify(self, db: Session, token: str | None) -> User:
        if not token:
            raise Unauthenticated()
        payload = decode_token(token, self._settings)
        if not payload:
            raise Unauthenticated("Invalid or expired token")
        user = self._repo.get_by_id(db, payload.sub)
        if not user:
            raise Unauthenticated("User not found")
        return user

    @property
    def demo_user_enabled(self) -> bool:
        return self._settings.enable_demo_user and bool(self._settings.demo_user_password)

    def create_demo_user(self, db: Session) -> User:
        if not self.demo_user_enabled:
            raise FeatureDisabled()
        email = self._settings.demo_user_email
        if self._repo.get_by_email(db, email):
            raise UserAlreadyExists()
        user = self._repo.create(db, email, hash_password(self._settings.demo_user_password))
        logger.info("Demo user created: %s", user.id)
        return user


def get_auth_service(settings: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(settings)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    token = credentials.credentials if credentials else None
    return auth.verify(db, token)
