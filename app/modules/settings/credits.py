"""
Credit accounting for AI generation.

Token counts are estimated from the content length, priced with the Gemini
per-token rates, converted to THB and marked up (or fixed-priced) per tier.
The THB charge is converted to whole credits, never fewer than one.
Balances live in profiles.ai_credits; admins are never charged.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.modules.settings.models import CHARS_PER_TOKEN, CREDIT_SETTING_KEYS, DEFAULT_CREDIT_SETTINGS, TIERS
from app.modules.settings.schemas import (
    CreditBalance, CreditCalculation, CreditCheck, CreditPreview, CreditProcessMode,
    CreditSettings, CreditSettingsUpdate, TierProfit, TokenEstimation, TokenEstimationRatios
)
from app.modules.settings.service import SettingsService

logger = logging.getLogger(__name__)

ADMIN_TIER = "admin"


def ceil_units(value: float) -> int:
    """Ceiling that ignores float noise such as 100 * 0.3 == 30.000000000000004"""
    return math.ceil(round(value, 9))


def normalize_tier(role: Optional[str]) -> str:
    """Profile role as a pricing tier; unknown roles price as `user`"""
    tier = (role or "").strip().lower()
    return tier if tier in TIERS else "user"


def estimate_tokens(
    content: str,
    mode: CreditProcessMode,
    easy_explain_enabled: bool,
    ratios: TokenEstimationRatios
) -> TokenEstimation:
    input_tokens = ceil_units(len(content) / CHARS_PER_TOKEN)
    output_ratio = {
        "original": 0,
        "summarize": ratios.summarize,
        "lesson": ratios.lesson,
        "translate": ratios.translate,
    }[mode]
    output_tokens = ceil_units(input_tokens * output_ratio)

    easy_explain_applied = easy_explain_enabled and mode in ("summarize", "lesson")
    if easy_explain_applied:
        output_tokens = ceil_units(output_tokens * (1 + ratios.easy_explain_modifier))

    return TokenEstimation(
        input_tokens=input_tokens,
        estimated_output_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
        mode=mode,
        easy_explain_applied=easy_explain_applied,
    )


def api_cost_usd(input_tokens: int, output_tokens: int, settings: CreditSettings) -> float:
    return input_tokens / 1_000_000 * settings.gemini_input_price \
        + output_tokens / 1_000_000 * settings.gemini_output_price


def tier_charge_thb(actual_cost_thb: float, total_tokens: int, tier: str, settings: CreditSettings) -> Tuple[float, float]:
    """(charge in THB, markup percent or fixed THB per 1K tokens that produced it)"""
    config = settings.tier_pricing_config
    pricing = config.tiers.get(tier) or config.tiers["user"]
    if config.mode == "markup":
        return actual_cost_thb * (1 + pricing.markup / 100), pricing.markup
    return total_tokens / 1000 * pricing.fixed, pricing.fixed


def credits_for_charge(charge_thb: float, settings: CreditSettings) -> int:
    return max(1, ceil_units(charge_thb * settings.credit_conversion_rate))


def calculate_credits(tokens: TokenEstimation, role: str, settings: CreditSettings) -> CreditCalculation:
    actual_cost_usd = api_cost_usd(tokens.input_tokens, tokens.estimated_output_tokens, settings)
    actual_cost_thb = actual_cost_usd * settings.usd_to_thb_rate
    final_cost_thb, tier_markup = tier_charge_thb(
        actual_cost_thb, tokens.total_tokens, normalize_tier(role), settings
    )
    return CreditCalculation(
        tokens=tokens,
        actual_cost_usd=actual_cost_usd,
        actual_cost_thb=actual_cost_thb,
        tier_markup=tier_markup,
        final_cost_thb=final_cost_thb,
        credits_required=credits_for_charge(final_cost_thb, settings),
        profit_margin_thb=final_cost_thb - actual_cost_thb,
        pricing_mode=settings.tier_pricing_config.mode,
    )


class CreditService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self._settings: Optional[CreditSettings] = None

    # ============================================
    # Settings
    # ============================================

    def get_credit_settings(self) -> CreditSettings:
        """Stored credit settings over the defaults; read once per service instance"""
        if self._settings is not None:
            return self._settings
        try:
            result = self.supabase.table("system_settings")\
                .select("key, value")\
                .in_("key", list(CREDIT_SETTING_KEYS))\
                .execute()
            stored = {row["key"]: row["value"] for row in (result.data or [])}
        except Exception as e:
            logger.warning(f"Failed to read credit settings, using defaults: {e}")
            stored = {}

        merged: Dict[str, Any] = {
            key: stored.get(key) or default for key, default in DEFAULT_CREDIT_SETTINGS.items()
        }
        try:
            self._settings = CreditSettings(**merged)
        except Exception as e:
            logger.warning(f"Stored credit settings are invalid, using defaults: {e}")
            self._settings = CreditSettings(**DEFAULT_CREDIT_SETTINGS)
        return self._settings

    def update_credit_settings(self, update: CreditSettingsUpdate, user_id: str) -> CreditSettings:
        try:
            values = update.model_dump(exclude_none=True)
            if values:
                SettingsService(self.supabase).upsert_values(values, user_id)
                logger.info(f"Credit settings updated by {user_id}: {sorted(values)}")
            self._settings = None
            return self.get_credit_settings()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update credit settings: {str(e)}")

    # ============================================
    # Estimates
    # ============================================

    def estimate_tokens(self, content: str, mode: CreditProcessMode, easy_explain_enabled: bool = False) -> TokenEstimation:
        return estimate_tokens(content, mode, easy_explain_enabled, self.get_credit_settings().token_estimation_ratios)

    def calculate_credits(self, tokens: TokenEstimation, role: str) -> CreditCalculation:
        return calculate_credits(tokens, role, self.get_credit_settings())

    def preview_credit_cost(
        self,
        content: str,
        mode: CreditProcessMode,
        easy_explain_enabled: bool = False,
        user_id: Optional[str] = None
    ) -> CreditPreview:
        """Estimated cost for the caller's tier with their balance; guests price as `user`"""
        profile = self._get_profile(user_id) if user_id else None
        tier = normalize_tier(profile.get("role")) if profile else "user"
        balance = (profile.get("ai_credits") or 0) if profile else 0

        calculation = self.calculate_credits(self.estimate_tokens(content, mode, easy_explain_enabled), tier)
        return CreditPreview(
            **calculation.model_dump(),
            user_role=tier,
            user_credits=balance,
            is_admin=tier == ADMIN_TIER,
        )

    def get_profit_preview_all_tiers(self, input_tokens: int, output_tokens: int) -> List[TierProfit]:
        """Cost, charge, profit and credits of one request for every tier (admin)"""
        settings = self.get_credit_settings()
        actual_cost_thb = api_cost_usd(input_tokens, output_tokens, settings) * settings.usd_to_thb_rate
        previews = []
        for tier in TIERS:
            charge_thb, _ = tier_charge_thb(actual_cost_thb, input_tokens + output_tokens, tier, settings)
            previews.append(TierProfit(
                tier=tier,
                actual_cost_thb=actual_cost_thb,
                charge_thb=charge_thb,
                profit_thb=charge_thb - actual_cost_thb,
                credits=credits_for_charge(charge_thb, settings),
            ))
        return previews

    # ============================================
    # Balances
    # ============================================

    def _get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("profiles")\
                .select("id, role, ai_credits")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch profile: {str(e)}")

    def _set_balance(self, user_id: str, balance: int) -> None:
        self.supabase.table("profiles")\
            .update({"ai_credits": balance})\
            .eq("id", user_id)\
            .execute()

    def check_user_credits(self, user_id: Optional[str], required: int) -> CreditCheck:
        profile = self._get_profile(user_id) if user_id else None
        if not profile:
            return CreditCheck(has_enough=False, current_balance=0, required=required)
        balance = profile.get("ai_credits") or 0
        is_admin = normalize_tier(profile.get("role")) == ADMIN_TIER
        return CreditCheck(has_enough=is_admin or balance >= required, current_balance=balance, required=required)

    def require_credits(self, user_id: str, required: int) -> CreditCheck:
        check = self.check_user_credits(user_id, required)
        if not check.has_enough:
            raise HTTPException(status_code=402, detail="Insufficient credits")
        return check

    def deduct_credits(self, user_id: str, amount: int, action: Optional[str] = None) -> CreditBalance:
        try:
            profile = self._get_profile(user_id)
            if not profile:
                raise HTTPException(status_code=404, detail="Profile not found")
            balance = profile.get("ai_credits") or 0
            if normalize_tier(profile.get("role")) == ADMIN_TIER:
                return CreditBalance(success=True, new_balance=balance)
            if balance < amount:
                raise HTTPException(status_code=402, detail="Insufficient credits")

            new_balance = balance - amount
            self._set_balance(user_id, new_balance)
            logger.info(f"Deducted {amount} credits from {user_id} for {action or 'unspecified'}")
            return CreditBalance(success=True, new_balance=new_balance)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to deduct credits: {str(e)}")

    def charge_for_usage(self, user_id: str, input_tokens: int, output_tokens: int, action: str) -> CreditBalance:
        """Charge the caller for tokens already spent, capped at their balance"""
        profile = self._get_profile(user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")
        tier = normalize_tier(profile.get("role"))
        balance = profile.get("ai_credits") or 0
        if tier == ADMIN_TIER:
            return CreditBalance(success=True, new_balance=balance)

        settings = self.get_credit_settings()
        actual_cost_thb = api_cost_usd(input_tokens, output_tokens, settings) * settings.usd_to_thb_rate
        charge_thb, _ = tier_charge_thb(actual_cost_thb, input_tokens + output_tokens, tier, settings)
        amount = min(credits_for_charge(charge_thb, settings), balance)
        if amount <= 0:
            return CreditBalance(success=True, new_balance=balance)
        try:
            self._set_balance(user_id, balance - amount)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to deduct credits: {str(e)}")
        logger.info(f"Charged {amount} credits to {user_id} for {action}")
        return CreditBalance(success=True, new_balance=balance - amount)

    def add_credits(self, user_id: str, amount: int, reason: Optional[str] = None) -> CreditBalance:
        """Grant (or with a negative amount, take back) credits (admin)"""
        try:
            profile = self._get_profile(user_id)
            if not profile:
                raise HTTPException(status_code=404, detail="User not found")
            new_balance = (profile.get("ai_credits") or 0) + amount
            self._set_balance(user_id, new_balance)
            logger.info(f"Added {amount} credits to {user_id}" + (f": {reason}" if reason else ""))
            return CreditBalance(success=True, new_balance=new_balance)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to add credits: {str(e)}")
