from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class ProfileResponse(BaseModel):
    id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    role: str = "user"
    ai_credits: Optional[int] = 0
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AccountDeletionResponse(BaseModel):
    success: bool
    message: str
    deletion_date: datetime


class AccountDeletionStatus(BaseModel):
    is_pending_deletion: bool
    deleted_at: Optional[datetime] = None
    permanent_deletion_date: Optional[datetime] = None
