"""
Tests for credit estimates, tier pricing and balance changes.
"""

import pytest
from fastapi import HTTPException

from app.modules.settings.credits import CreditService, calculate_credits, estimate_tokens, normalize_tier
from app.modules.settings.models import DEFAULT_CREDIT_SETTINGS
from app.modules.settings.schemas import CreditSettings, CreditSettingsUpdate, TokenEstimation

DEFAULTS = CreditSettings(**DEFAULT_CREDIT_SETTINGS)


def tokens(input_tokens, output_tokens):
    return TokenEstimation(
        input_tokens=input_tokens,
        estimated_output_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
        mode="summarize",
        easy_explain_applied=False,
    )


def fixed_pricing():
    values = dict(DEFAULT_CREDIT_SETTINGS)
    values["tier_pricing_config"] = {**values["tier_pricing_config"], "mode": "fixed"}
    return CreditSettings(**values)


class TestEstimates:
    def test_input_is_a_quarter_of_the_characters(self):
        estimate = estimate_tokens("a" * 401, "original", False, DEFAULTS.token_estimation_ratios)

        assert estimate.input_tokens == 101
        assert estimate.estimated_output_tokens == 0
        assert estimate.total_tokens == 101

    def test_mode_ratio(self):
        estimate = estimate_tokens("a" * 400, "summarize", False, DEFAULTS.token_estimation_ratios)
        assert estimate.estimated_output_tokens == 30

    def test_easy_explain_only_for_summaries_and_lessons(self):
        ratios = DEFAULTS.token_estimation_ratios

        summary = estimate_tokens("a" * 400, "summarize", True, ratios)
        translation = estimate_tokens("a" * 400, "translate", True, ratios)

        assert summary.estimated_output_tokens == 36
        assert summary.easy_explain_applied
        assert translation.estimated_output_tokens == 110
        assert not translation.easy_explain_applied

    def test_normalize_tier(self):
        assert normalize_tier(" Pro ") == "pro"
        assert normalize_tier("moderator") == "user"
        assert normalize_tier(None) == "user"


class TestCalculateCredits:
    def test_markup_pricing(self):
        result = calculate_credits(tokens(1_000_000, 1_000_000), "user", DEFAULTS)

        assert result.actual_cost_usd == pytest.approx(0.5)
        assert result.actual_cost_thb == pytest.approx(17.5)
        assert result.final_cost_thb == pytest.approx(35.0)
        assert result.profit_margin_thb == pytest.approx(17.5)
        assert result.credits_required == 350
        assert result.pricing_mode == "markup"

    def test_tiers_pay_less_markup(self):
        user = calculate_credits(tokens(1_000_000, 1_000_000), "user", DEFAULTS)
        pro = calculate_credits(tokens(1_000_000, 1_000_000), "pro", DEFAULTS)

        assert pro.credits_required == 228
        assert pro.credits_required < user.credits_required

    def test_fixed_pricing_per_thousand_tokens(self):
        result = calculate_credits(tokens(60_000, 40_000), "pro", fixed_pricing())

        assert result.tier_markup == 0.025
        assert result.final_cost_thb == pytest.approx(2.5)
        assert result.credits_required == 25

    def test_never_less_than_one_credit(self):
        assert calculate_credits(tokens(10, 0), "user", DEFAULTS).credits_required == 1
        assert calculate_credits(tokens(10, 0), "admin", DEFAULTS).credits_required == 1


class TestCreditSettings:
    def test_stored_values_override_defaults_once_per_instance(self, supabase):
        supabase.queue("system_settings", [{"key": "usd_to_thb_rate", "value": 36}])
        service = CreditService(supabase)

        first = service.get_credit_settings()
        second = service.get_credit_settings()

        assert first.usd_to_thb_rate == 36
        assert first.credit_conversion_rate == 10
        assert second is first
        assert len(supabase.queries("system_settings")) == 1

    def test_invalid_stored_values_fall_back_to_defaults(self, supabase):
        supabase.queue("system_settings", [{"key": "tier_pricing_config", "value": {"mode": "auction"}}])

        settings = CreditService(supabase).get_credit_settings()

        assert settings.tier_pricing_config.mode == "markup"

    def test_update_upserts_and_reloads(self, supabase):
        service = CreditService(supabase)
        service.get_credit_settings()

        service.update_credit_settings(CreditSettingsUpdate(credit_conversion_rate=20), "admin-1")

        upsert = supabase.queries("system_settings")[1]
        rows, = supabase.args_of(upsert, "upsert")[0]
        assert [(r["key"], r["value"]) for r in rows] == [("credit_conversion_rate", 20.0)]
        assert len(supabase.queries("system_settings")) == 3


class TestPreview:
    def test_guest_is_priced_as_user(self, supabase):
        preview = CreditService(supabase).preview_credit_cost("a" * 400, "summarize")

        assert preview.user_role == "user"
        assert preview.user_credits == 0
        assert not preview.is_admin
        assert supabase.queries("profiles") == []

    def test_signed_in_caller_uses_profile(self, supabase):
        supabase.queue("profiles", [{"id": "user-1", "role": "admin", "ai_credits": 12}])

        preview = CreditService(supabase).preview_credit_cost("a" * 400, "lesson", user_id="user-1")

        assert preview.user_role == "admin"
        assert preview.user_credits == 12
        assert preview.is_admin
        assert preview.tokens.estimated_output_tokens == 150

    def test_profit_preview_covers_every_tier(self, supabase):
        previews = CreditService(supabase).get_profit_preview_all_tiers(1_000_000, 1_000_000)

        assert [p.tier for p in previews] == ["user", "plus", "pro", "ultra", "admin"]
        assert previews[0].charge_thb == pytest.approx(35.0)
        assert previews[-1].profit_thb == pytest.approx(0)


class TestBalances:
    def test_admin_always_has_enough(self, supabase):
        supabase.queue("profiles", [{"id": "admin-1", "role": "admin", "ai_credits": 0}])

        check = CreditService(supabase).check_user_credits("admin-1", 50)

        assert check.has_enough
        assert check.current_balance == 0

    def test_missing_profile_has_nothing(self, supabase):
        check = CreditService(supabase).check_user_credits("ghost", 1)
        assert not check.has_enough

    def test_deduct(self, supabase):
        supabase.queue("profiles", [{"id": "user-1", "role": "user", "ai_credits": 30}])

        balance = CreditService(supabase).deduct_credits("user-1", 10, "generate_quiz")

        assert balance.new_balance == 20
        update = supabase.queries("profiles")[1]
        assert supabase.args_of(update, "update") == [({"ai_credits": 20},)]

    def test_deduct_insufficient(self, supabase):
        supabase.queue("profiles", [{"id": "user-1", "role": "user", "ai_credits": 5}])

        with pytest.raises(HTTPException) as exc:
            CreditService(supabase).deduct_credits("user-1", 10)
        assert exc.value.status_code == 402
        assert exc.value.detail == "Insufficient credits"
        assert len(supabase.queries("profiles")) == 1

    def test_admin_is_not_charged(self, supabase):
        supabase.queue("profiles", [{"id": "admin-1", "role": "admin", "ai_credits": 7}])

        balance = CreditService(supabase).deduct_credits("admin-1", 100)

        assert balance.new_balance == 7
        assert len(supabase.queries("profiles")) == 1

    def test_usage_charge_is_capped_at_balance(self, supabase):
        supabase.queue("profiles", [{"id": "user-1", "role": "user", "ai_credits": 3}])

        balance = CreditService(supabase).charge_for_usage("user-1", 1_000_000, 1_000_000, "summarize")

        assert balance.new_balance == 0

    def test_add_credits(self, supabase):
        supabase.queue("profiles", [{"id": "user-2", "role": "user", "ai_credits": None}])

        balance = CreditService(supabase).add_credits("user-2", 25, "promo")

        assert balance.new_balance == 25

    def test_add_credits_unknown_user(self, supabase):
        with pytest.raises(HTTPException) as exc:
            CreditService(supabase).add_credits("ghost", 25)
        assert exc.value.status_code == 404
        assert exc.value.detail == "User not found"
