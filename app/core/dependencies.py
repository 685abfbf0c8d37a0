"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for profile data (role)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Like get_current_user_id, but guests (no or invalid token) get None."""
    if credentials is None:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except HTTPException:
        return None


def get_user_role(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return profiles.role for a user. Uses request-scoped cache when provided."""
    if cache is not None and "role" in cache:
        return cache["role"]
    try:
        result = supabase.table("profiles")\
            .select("role")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        role = result.data[0].get("role") if result.data else None
    except Exception as e:
        logger.error(f"Error getting user role: {e}")
        role = None
    if cache is not None:
        cache["role"] = role
    return role


def is_admin(user_data: Optional[dict], supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    if not user_data:
        return False
    return get_user_role(user_data["id"], supabase, cache) == ADMIN_ROLE


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase)
) -> dict:
    """Dependency that rejects callers whose profile role is not admin"""
    cache = _get_request_cache(request)
    if not is_admin(user_data, supabase, cache):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user_data


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_admin when used)."""
    return _get_request_cache(request)


def check_activity_owner(activity_id: str, user_data: dict, supabase: Client) -> dict:
    """Return the activity row if the user owns it; 404 if missing, 403 otherwise."""
    result = supabase.table("activities")\
        .select("id, user_id, thumbnail")\
        .eq("id", activity_id)\
        .limit(1)\
        .execute()
    if not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    activity = result.data[0]
    if activity.get("user_id") != user_data["id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only modify your own activities"
        )
    return activity
