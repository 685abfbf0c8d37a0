"""
Tests for system settings, AI gating and maintenance actions.
"""

import pytest
from fastapi import HTTPException

from app.modules.settings.schemas import AIUsageLogCreate, SystemSettingsUpdate
from app.modules.settings.service import SettingsService


class TestSettings:
    def test_stored_values_override_defaults(self, supabase):
        supabase.queue("system_settings", [
            {"key": "site_name", "value": "My Academy"},
            {"key": "unknown_key", "value": 1},
            {"key": "maintenance_mode", "value": None},
        ])
        settings = SettingsService(supabase).get_settings()

        assert settings.site_name == "My Academy"
        assert settings.maintenance_mode is False
        assert settings.enable_ai_generation is True

    def test_update_upserts_only_given_keys(self, supabase):
        SettingsService(supabase).update_settings(SystemSettingsUpdate(maintenance_mode=True), "admin-1")

        upsert = supabase.queries("system_settings")[0]
        rows, = supabase.args_of(upsert, "upsert")[0]
        assert [(r["key"], r["value"], r["updated_by"]) for r in rows] == [("maintenance_mode", True, "admin-1")]

    def test_unknown_single_key(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SettingsService(supabase).update_single_setting("theme", "dark", "admin-1")
        assert exc.value.status_code == 400

    def test_wrongly_typed_single_value(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SettingsService(supabase).update_single_setting("maintenance_mode", "nope", "admin-1")
        assert exc.value.status_code == 400
        assert "maintenance_mode" in exc.value.detail
        assert supabase.queries("system_settings") == []

    def test_ai_generation_flag(self, supabase):
        supabase.queue("system_settings", [{"key": "enable_ai_generation", "value": False}])
        service = SettingsService(supabase)

        assert service.is_ai_generation_enabled() is False
        assert service.is_ai_generation_enabled() is True

    def test_public_settings_survive_read_errors(self, supabase):
        supabase.fail("system_settings", RuntimeError("offline"))
        public = SettingsService(supabase).get_public_site_settings()

        assert public.site_name == "QzVert"
        assert public.maintenance_mode is False


class TestMaintenance:
    def test_clear_play_records_requires_positive_days(self, supabase):
        with pytest.raises(HTTPException) as exc:
            SettingsService(supabase).clear_old_play_records(0)
        assert exc.value.status_code == 400

    def test_clear_resolved_reports(self, supabase):
        supabase.queue("reports", [{"id": "r1"}, {"id": "r2"}])
        result = SettingsService(supabase).clear_resolved_reports()

        assert result.deleted == 2
        assert ("status", "resolved") in supabase.args_of(supabase.queries("reports")[0], "eq")

    def test_ai_usage_log_totals_tokens(self, supabase):
        SettingsService(supabase).log_ai_usage(
            AIUsageLogCreate(action="summarize", input_tokens=100, output_tokens=20), "user-1"
        )
        row = supabase.args_of(supabase.queries("ai_usage_logs")[0], "insert")[0][0]
        assert row["total_tokens"] == 120
        assert row["model"] == "gemini-2.0-flash"

    def test_ai_usage_log_never_raises(self, supabase):
        supabase.fail("ai_usage_logs", RuntimeError("insert failed"))
        SettingsService(supabase).log_ai_usage(AIUsageLogCreate(action="craft"), None)
