import logging
from datetime import timedelta
from supabase import Client
from app.config import settings as app_settings
from app.core.utils import utc_now, utc_now_iso
from app.modules.settings.models import (
    DEFAULT_SETTINGS, PUBLIC_SETTING_KEYS, STORAGE_BUCKETS, STORAGE_LIMIT_MB, DATABASE_STAT_TABLES
)
from app.modules.settings.schemas import (
    SystemSettings, SystemSettingsUpdate, PublicSiteSettings,
    BucketStats, StorageStats, ClearResult, AIUsageLogCreate
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _load_stored(self, keys: Optional[List[str]] = None) -> Dict[str, Any]:
        query = self.supabase.table("system_settings").select("key, value")
        if keys:
            query = query.in_("key", keys)
        result = query.execute()
        return {row["key"]: row["value"] for row in (result.data or [])}

    def get_settings(self) -> SystemSettings:
        """Stored values merged over defaults"""
        try:
            stored = self._load_stored()
            merged = dict(DEFAULT_SETTINGS)
            for key, value in stored.items():
                if key in merged and value is not None:
                    merged[key] = value
            return SystemSettings(**merged)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upsert_values(self, values: Dict[str, Any], user_id: Optional[str]) -> None:
        now = utc_now_iso()
        rows = [
            {"key": key, "value": value, "updated_at": now, "updated_by": user_id}
            for key, value in values.items()
        ]
        self.supabase.table("system_settings")\
            .upsert(rows, on_conflict="key")\
            .execute()

    def update_settings(self, update: SystemSettingsUpdate, user_id: str) -> SystemSettings:
        try:
            values = update.model_dump(exclude_none=True)
            if values:
                self.upsert_values(values, user_id)
                logger.info(f"System settings updated by {user_id}: {sorted(values)}")
            return self.get_settings()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_single_setting(self, key: str, value: Any, user_id: str) -> SystemSettings:
        if key not in DEFAULT_SETTINGS:
            raise HTTPException(status_code=400, detail=f"Unknown setting key: {key}")
        try:
            update = SystemSettingsUpdate(**{key: value})
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid value for {key}: {e.errors()[0]['msg']}")
        return self.update_settings(update, user_id)

    def get_setting_value(self, key: str) -> Any:
        """Stored value for a key, falling back to the default (also on read errors)"""
        try:
            stored = self._load_stored([key])
        except Exception as e:
            logger.warning(f"Failed to read setting {key}, using default: {e}")
            stored = {}
        value = stored.get(key)
        if value is None:
            return DEFAULT_SETTINGS.get(key)
        return value

    def is_ai_generation_enabled(self) -> bool:
        return self.get_setting_value("enable_ai_generation") is not False

    def is_maintenance_mode(self) -> bool:
        return self.get_setting_value("maintenance_mode") is True

    def get_public_site_settings(self) -> PublicSiteSettings:
        try:
            stored = self._load_stored(list(PUBLIC_SETTING_KEYS))
        except Exception as e:
            logger.warning(f"Failed to read public settings, using defaults: {e}")
            stored = {}
        values = {key: stored.get(key, DEFAULT_SETTINGS[key]) for key in PUBLIC_SETTING_KEYS}
        return PublicSiteSettings(**values)

    def get_storage_stats(self) -> StorageStats:
        """File counts and sizes per bucket, walking one folder level (paths are {user_id}/{file})"""
        try:
            buckets = []
            for bucket in STORAGE_BUCKETS:
                file_count = 0
                total_bytes = 0
                storage = self.supabase.storage.from_(bucket)
                for entry in storage.list() or []:
                    if entry.get("id") is None:
                        # Folder: list its files
                        for item in storage.list(entry["name"]) or []:
                            file_count += 1
                            total_bytes += (item.get("metadata") or {}).get("size", 0)
                    else:
                        file_count += 1
                        total_bytes += (entry.get("metadata") or {}).get("size", 0)
                buckets.append(BucketStats(bucket=bucket, file_count=file_count, total_bytes=total_bytes))

            total_bytes = sum(b.total_bytes for b in buckets)
            total_size_mb = round(total_bytes / (1024 * 1024), 2)
            return StorageStats(
                buckets=buckets,
                total_files=sum(b.file_count for b in buckets),
                total_size_mb=total_size_mb,
                storage_limit_mb=STORAGE_LIMIT_MB,
                usage_percent=round(total_size_mb / STORAGE_LIMIT_MB * 100, 2),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get storage stats: {str(e)}")

    def get_database_stats(self) -> Dict[str, int]:
        try:
            stats = {}
            for table in DATABASE_STAT_TABLES:
                result = self.supabase.table(table)\
                    .select("id", count="exact", head=True)\
                    .execute()
                stats[table] = result.count or 0
            return stats
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to get database stats: {str(e)}")

    def clear_resolved_reports(self) -> ClearResult:
        try:
            result = self.supabase.table("reports")\
                .delete()\
                .eq("status", "resolved")\
                .execute()
            deleted = len(result.data or [])
            logger.info(f"Cleared {deleted} resolved reports")
            return ClearResult(success=True, deleted=deleted)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to clear reports: {str(e)}")

    def clear_old_play_records(self, days_old: int = 90) -> ClearResult:
        if days_old < 1:
            raise HTTPException(status_code=400, detail="days_old must be at least 1")
        try:
            cutoff = (utc_now() - timedelta(days=days_old)).isoformat()
            result = self.supabase.table("activity_play_records")\
                .delete()\
                .lt("played_at", cutoff)\
                .execute()
            deleted = len(result.data or [])
            logger.info(f"Cleared {deleted} play records older than {days_old} days")
            return ClearResult(success=True, deleted=deleted)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to clear play records: {str(e)}")

    def log_ai_usage(self, log: AIUsageLogCreate, user_id: Optional[str]) -> None:
        """Best-effort usage log; failures never break the AI call being logged"""
        try:
            self.supabase.table("ai_usage_logs").insert({
                "user_id": user_id,
                "action": log.action,
                "input_tokens": log.input_tokens,
                "output_tokens": log.output_tokens,
                "total_tokens": log.input_tokens + log.output_tokens,
                "model": log.model or app_settings.gemini_model,
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to log AI usage: {e}")
