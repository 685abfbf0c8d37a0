from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_service_supabase, get_session_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    AccountDeletionResponse, AccountDeletionStatus
)
from app.modules.auth.service import AuthService, AccountService
from app.modules.settings.service import SettingsService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_auth_service(
    supabase: Client = Depends(get_session_supabase),
    admin_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    """Sign-in and sign-up on a throwaway client; revocation on the service-role client"""
    return AuthService(supabase, admin_supabase)


def get_account_service(supabase: Client = Depends(get_service_supabase)) -> AccountService:
    return AccountService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Register a new user (refused while registrations are disabled)"""
    if not SettingsService(supabase).get_setting_value("enable_user_registration"):
        raise HTTPException(status_code=403, detail="User registration is currently disabled")
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    """Get current authenticated user and their profile (role drives the admin UI)."""
    profile = service.get_profile(current_user["id"])
    return {
        **current_user,
        "profile": profile.model_dump() if profile else None,
        "role": profile.role if profile else "user",
    }


@router.post("/account/delete", response_model=AccountDeletionResponse)
async def soft_delete_account(
    token: str = Depends(get_current_token),
    current_user: Dict = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Mark own account for deletion and sign out"""
    result = service.soft_delete_account(current_user["id"])
    auth_service.logout(token)
    return result


@router.get("/account/deletion-status", response_model=AccountDeletionStatus)
async def account_deletion_status(
    current_user: Dict = Depends(get_current_user_id),
    service: AccountService = Depends(get_account_service)
):
    """Whether own account is pending deletion"""
    return service.get_deletion_status(current_user["id"])
