from pydantic import BaseModel


class UserPublic(BaseModel):
    """Redacted user view: never carries the password hash."""
    id: str
    email: str

    class Config:
        from_attributes = True


class TokenPayload(BaseModel):
    sub: str  # user id
    email: str
    exp: int
    type: str = "access"


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    user: UserPublic


class VerifyResponse(BaseModel):
    user: UserPublic


class MessageResponse(BaseModel):
    message: str
