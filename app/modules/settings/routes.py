from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.settings.schemas import (
    SystemSettings, SystemSettingsUpdate, SingleSettingUpdate, PublicSiteSettings,
    StorageStats, ClearResult, AIUsageLogCreate, AIUsageStats, AIUsageChart, ChartRange,
    UsageTotals, MonthUsage, CreditSettings, CreditSettingsUpdate, CreditPreview,
    CreditPreviewRequest, CreditCheck, CreditCheckRequest, CreditDeductRequest,
    CreditAddRequest, CreditBalance, ProfitPreviewRequest, TierProfit
)
from app.modules.settings.credits import CreditService
from app.modules.settings.service import SettingsService
from app.modules.settings.usage import AIUsageService
from app.core.dependencies import require_admin, get_current_user_id, get_optional_user
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/settings", tags=["settings"])


def get_settings_service(supabase: Client = Depends(get_service_supabase)) -> SettingsService:
    return SettingsService(supabase)


def get_credit_service(supabase: Client = Depends(get_service_supabase)) -> CreditService:
    return CreditService(supabase)


def get_usage_service(supabase: Client = Depends(get_service_supabase)) -> AIUsageService:
    return AIUsageService(supabase)


@router.get("/public", response_model=PublicSiteSettings)
async def get_public_site_settings(service: SettingsService = Depends(get_settings_service)):
    """Site name, description and maintenance state (no auth)"""
    return service.get_public_site_settings()


@router.get("/ai-enabled")
async def ai_generation_enabled(service: SettingsService = Depends(get_settings_service)):
    return {"enabled": service.is_ai_generation_enabled()}


@router.post("/ai-usage", status_code=204)
async def log_ai_usage(
    log: AIUsageLogCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: SettingsService = Depends(get_settings_service)
):
    service.log_ai_usage(log, user_data["id"])
    return None


@router.get("", response_model=SystemSettings)
async def get_settings(
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    """All system settings (admin)"""
    return service.get_settings()


@router.put("", response_model=SystemSettings)
async def update_settings(
    update: SystemSettingsUpdate,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    """Partial update of system settings (admin)"""
    return service.update_settings(update, user_data["id"])


@router.patch("/key", response_model=SystemSettings)
async def update_single_setting(
    update: SingleSettingUpdate,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return service.update_single_setting(update.key, update.value, user_data["id"])


@router.get("/storage-stats", response_model=StorageStats)
async def get_storage_stats(
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_storage_stats()


@router.get("/database-stats", response_model=Dict[str, int])
async def get_database_stats(
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_database_stats()


@router.post("/maintenance/clear-reports", response_model=ClearResult)
async def clear_resolved_reports(
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    """Delete resolved reports (admin)"""
    return service.clear_resolved_reports()


@router.post("/maintenance/clear-play-records", response_model=ClearResult)
async def clear_old_play_records(
    days_old: int = 90,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service)
):
    """Delete play records older than days_old (admin)"""
    return service.clear_old_play_records(days_old)


@router.post("/maintenance/clear-ai-usage", response_model=ClearResult)
async def clear_old_ai_usage_logs(
    days_old: int = 90,
    user_data: Dict = Depends(require_admin),
    service: AIUsageService = Depends(get_usage_service)
):
    """Delete AI usage logs older than days_old (admin)"""
    return service.clear_old_ai_usage_logs(days_old)


# ============================================
# AI usage statistics (admin)
# ============================================

@router.get("/ai-usage/stats", response_model=AIUsageStats)
async def get_ai_usage_stats(
    days: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_admin),
    service: AIUsageService = Depends(get_usage_service)
):
    return service.get_ai_usage_stats(days)


@router.get("/ai-usage/chart", response_model=AIUsageChart)
async def get_daily_ai_usage_chart(
    time_range: ChartRange = "week",
    user_data: Dict = Depends(require_admin),
    service: AIUsageService = Depends(get_usage_service)
):
    """Requests and tokens per day, or per month for the year range"""
    return service.get_daily_ai_usage_chart(time_range)


@router.get("/ai-usage/today", response_model=UsageTotals)
async def get_today_ai_usage(
    user_data: Dict = Depends(require_admin),
    service: AIUsageService = Depends(get_usage_service)
):
    return service.get_today_ai_usage()


@router.get("/ai-usage/month", response_model=MonthUsage)
async def get_current_month_ai_usage(
    user_data: Dict = Depends(require_admin),
    service: AIUsageService = Depends(get_usage_service)
):
    return service.get_current_month_ai_usage()


# ============================================
# Credits
# ============================================

@router.get("/credits", response_model=CreditSettings)
async def get_credit_settings(
    user_data: Dict = Depends(require_admin),
    service: CreditService = Depends(get_credit_service)
):
    return service.get_credit_settings()


@router.put("/credits", response_model=CreditSettings)
async def update_credit_settings(
    update: CreditSettingsUpdate,
    user_data: Dict = Depends(require_admin),
    service: CreditService = Depends(get_credit_service)
):
    """Token ratios, tier pricing and conversion rates (admin)"""
    return service.update_credit_settings(update, user_data["id"])


@router.post("/credits/preview", response_model=CreditPreview)
async def preview_credit_cost(
    request: CreditPreviewRequest,
    viewer: Optional[Dict] = Depends(get_optional_user),
    service: CreditService = Depends(get_credit_service)
):
    """Estimated credit cost for the caller's tier; guests are priced as `user`"""
    return service.preview_credit_cost(
        request.content, request.mode, request.easy_explain_enabled, viewer["id"] if viewer else None
    )


@router.post("/credits/check", response_model=CreditCheck)
async def check_user_credits(
    request: CreditCheckRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service)
):
    return service.check_user_credits(user_data["id"], request.required)


@router.post("/credits/deduct", response_model=CreditBalance)
async def deduct_credits(
    request: CreditDeductRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service)
):
    return service.deduct_credits(user_data["id"], request.amount, request.action)


@router.post("/credits/add", response_model=CreditBalance)
async def add_credits(
    request: CreditAddRequest,
    user_data: Dict = Depends(require_admin),
    service: CreditService = Depends(get_credit_service)
):
    """Grant credits to a user (admin)"""
    return service.add_credits(request.user_id, request.amount, request.reason)


@router.post("/credits/profit-preview", response_model=List[TierProfit])
async def get_profit_preview_all_tiers(
    request: ProfitPreviewRequest,
    user_data: Dict = Depends(require_admin),
    service: CreditService = Depends(get_credit_service)
):
    return service.get_profit_preview_all_tiers(request.input_tokens, request.output_tokens)
