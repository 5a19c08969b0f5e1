# app/schemas/user.py
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from app.db.models import UserRole

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: EmailStr
    name: str | None = None
    role: UserRole

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

class AuthResponse(Token):
    message: str
    user: UserOut

class RefreshRequest(BaseModel):
    refresh_token: str

class VerifyRequest(BaseModel):
    id_token: str

class VerifyResponse(BaseModel):
    uid: str
    email: str | None = None
    verified: bool = True

class RoleUpdate(BaseModel):
    role: UserRole
