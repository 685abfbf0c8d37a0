from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.activities.schemas import (
    SaveActivityRequest, SaveActivityResponse, ActivityDetailResponse, AllowedEmailsUpdate,
    CanPlayResult, RecordPlayRequest, RecordPlayResponse, UpdatePlayRecordRequest,
    ActivePlaySession, ActivitySettingsUpdate, UserStats, ActivityResultsResponse,
    SuggestRequest, SuggestedActivity
)
from app.modules.activities.service import ActivityService
from app.modules.settings.service import SettingsService
from app.core.dependencies import (
    get_current_user_id, get_optional_user, check_activity_owner, is_admin, get_access_cache
)
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/activities", tags=["activities"])


def get_activity_service(supabase: Client = Depends(get_service_supabase)) -> ActivityService:
    return ActivityService(supabase)


@router.post("", response_model=SaveActivityResponse, status_code=201)
async def save_activity(
    request: SaveActivityRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Save a generated quiz/quest/lesson/flashcard set as a draft"""
    return service.save_activity(request, user_data["id"])


@router.get("/published")
async def get_published_activities(service: ActivityService = Depends(get_activity_service)):
    """Latest public activities (no auth)"""
    return service.get_published_activities()


@router.get("/me")
async def get_user_activities(
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Activities created by the current user"""
    return service.get_user_activities(user_data["id"])


@router.get("/me/stats", response_model=UserStats)
async def get_user_stats(
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    return service.get_user_stats(user_data["id"])


@router.get("/me/results", response_model=ActivityResultsResponse)
async def get_activity_results(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Paginated play results of the current user"""
    return service.get_activity_results(user_data["id"], page, page_size)


@router.post("/suggestions", response_model=List[SuggestedActivity])
async def get_suggested_activities(
    request: SuggestRequest,
    service: ActivityService = Depends(get_activity_service)
):
    """Public activities related to the given content (no auth)"""
    return service.get_suggested_activities(request.content, request.limit)


@router.put("/plays/{play_record_id}")
async def update_play_record(
    play_record_id: str,
    request: UpdatePlayRecordRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Finish or update one of your play records"""
    service.update_play_record(play_record_id, user_data["id"], request)
    return {"success": True}


@router.get("/{activity_id}", response_model=ActivityDetailResponse)
async def get_activity(
    activity_id: str,
    viewer: Optional[Dict] = Depends(get_optional_user),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Activity with its generated quest, subject to status visibility"""
    return service.get_activity(activity_id, viewer, viewer_is_admin=is_admin(viewer, supabase, cache))


@router.get("/{activity_id}/edit", response_model=ActivityDetailResponse)
async def get_activity_for_edit(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Owner view of an activity, drafts included"""
    return service.get_activity_for_edit(activity_id, user_data["id"])


@router.put("/{activity_id}", response_model=SaveActivityResponse)
async def update_activity(
    activity_id: str,
    request: SaveActivityRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Replace an activity's content (owner only)"""
    check_activity_owner(activity_id, user_data, supabase)
    return service.update_activity(activity_id, request)


@router.delete("/{activity_id}", status_code=204)
async def delete_activity(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Delete an activity and its thumbnail (owner only)"""
    activity = check_activity_owner(activity_id, user_data, supabase)
    service.delete_activity(activity)
    return None


@router.post("/{activity_id}/publish")
async def publish_activity(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Make an activity public (owner only)"""
    check_activity_owner(activity_id, user_data, supabase)
    public_enabled = SettingsService(supabase).get_setting_value("enable_public_activities") is not False
    service.publish_activity(activity_id, public_enabled)
    return {"success": True}


@router.put("/{activity_id}/settings")
async def update_activity_settings(
    activity_id: str,
    update: ActivitySettingsUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Replay limit, time limit, availability window and age range (owner only)"""
    check_activity_owner(activity_id, user_data, supabase)
    service.update_activity_settings(activity_id, update)
    return {"success": True}


@router.get("/{activity_id}/allowed-emails", response_model=List[str])
async def get_allowed_emails(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    check_activity_owner(activity_id, user_data, supabase)
    return service.get_allowed_emails(activity_id)


@router.put("/{activity_id}/allowed-emails", response_model=List[str])
async def update_allowed_emails(
    activity_id: str,
    update: AllowedEmailsUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Replace the invite list of a private_group activity (owner only)"""
    check_activity_owner(activity_id, user_data, supabase)
    return service.update_allowed_emails(activity_id, update.emails)


@router.post("/{activity_id}/play-count")
async def increment_play_count(
    activity_id: str,
    service: ActivityService = Depends(get_activity_service)
):
    return {"play_count": service.increment_play_count(activity_id)}


@router.get("/{activity_id}/can-play", response_model=CanPlayResult)
async def check_can_play(
    activity_id: str,
    viewer: Optional[Dict] = Depends(get_optional_user),
    service: ActivityService = Depends(get_activity_service)
):
    """Replay limit and availability check; guests only get the availability window"""
    return service.check_can_play(activity_id, viewer["id"] if viewer else None)


@router.post("/{activity_id}/plays", response_model=RecordPlayResponse, status_code=201)
async def record_play(
    activity_id: str,
    request: RecordPlayRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    return service.record_play(activity_id, user_data["id"], request)


@router.get("/{activity_id}/plays")
async def get_play_history(
    activity_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Your play records for an activity, newest first"""
    return service.get_play_history(activity_id, user_data["id"])


@router.get("/{activity_id}/session", response_model=Optional[ActivePlaySession])
async def get_active_play_session(
    activity_id: str,
    play_record_id: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: ActivityService = Depends(get_activity_service)
):
    """Current unfinished play with remaining time, or null"""
    return service.get_active_play_session(activity_id, user_data["id"], play_record_id)
