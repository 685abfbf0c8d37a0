from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal

Tier = Literal["user", "plus", "pro", "ultra", "admin"]
AIUsageAction = Literal[
    "summarize", "craft", "translate",
    "generate_quiz", "generate_quest", "generate_lesson", "deep_lesson",
]


class SystemSettings(BaseModel):
    site_name: str
    site_description: str
    maintenance_mode: bool
    maintenance_message: str
    ai_credits_per_user: int
    ai_credits_per_generation: int
    tier_monthly_credits: Dict[Tier, int]
    tier_package_price: Dict[Tier, int]
    enable_public_activities: bool
    enable_user_registration: bool
    enable_ai_generation: bool
    require_email_verification: bool


class SystemSettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    site_description: Optional[str] = None
    maintenance_mode: Optional[bool] = None
    maintenance_message: Optional[str] = None
    ai_credits_per_user: Optional[int] = Field(default=None, ge=0)
    ai_credits_per_generation: Optional[int] = Field(default=None, ge=0)
    tier_monthly_credits: Optional[Dict[Tier, int]] = None
    tier_package_price: Optional[Dict[Tier, int]] = None
    enable_public_activities: Optional[bool] = None
    enable_user_registration: Optional[bool] = None
    enable_ai_generation: Optional[bool] = None
    require_email_verification: Optional[bool] = None


class SingleSettingUpdate(BaseModel):
    key: str
    value: Any


class PublicSiteSettings(BaseModel):
    site_name: str
    site_description: str
    maintenance_mode: bool
    maintenance_message: str


class BucketStats(BaseModel):
    bucket: str
    file_count: int
    total_bytes: int


class StorageStats(BaseModel):
    buckets: List[BucketStats]
    total_files: int
    total_size_mb: float
    storage_limit_mb: int
    usage_percent: float


class ClearResult(BaseModel):
    success: bool
    deleted: int


class AIUsageLogCreate(BaseModel):
    action: AIUsageAction
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    model: Optional[str] = None


# ============================================
# AI usage statistics
# ============================================

ChartRange = Literal["week", "month", "year"]


class UsagePoint(BaseModel):
    date: str
    requests: int
    tokens: int


class AIUsageStats(BaseModel):
    total_requests: int
    total_input_tokens: int
    total_output_tokens: int
    total_tokens: int
    requests_by_action: Dict[str, int]
    tokens_by_action: Dict[str, int]
    daily_usage: List[UsagePoint]
    estimated_cost: float


class UsageChartSummary(BaseModel):
    total_requests: int
    total_tokens: int
    estimated_cost: float


class AIUsageChart(BaseModel):
    data: List[UsagePoint]
    summary: UsageChartSummary


class UsageTotals(BaseModel):
    requests: int
    tokens: int


class MonthUsage(UsageTotals):
    month_name: str


# ============================================
# Credits
# ============================================

CreditProcessMode = Literal["original", "summarize", "lesson", "translate"]
PricingMode = Literal["markup", "fixed"]


class TokenEstimationRatios(BaseModel):
    summarize: float = Field(ge=0)
    lesson: float = Field(ge=0)
    translate: float = Field(ge=0)
    easy_explain_modifier: float = Field(ge=0)


class TierPricing(BaseModel):
    markup: float = Field(ge=0)
    fixed: float = Field(ge=0)


class TierPricingConfig(BaseModel):
    mode: PricingMode
    tiers: Dict[Tier, TierPricing]


class CreditSettings(BaseModel):
    token_estimation_ratios: TokenEstimationRatios
    tier_pricing_config: TierPricingConfig
    credit_conversion_rate: float = Field(gt=0)
    usd_to_thb_rate: float = Field(gt=0)
    gemini_input_price: float = Field(ge=0)
    gemini_output_price: float = Field(ge=0)


class CreditSettingsUpdate(BaseModel):
    token_estimation_ratios: Optional[TokenEstimationRatios] = None
    tier_pricing_config: Optional[TierPricingConfig] = None
    credit_conversion_rate: Optional[float] = Field(default=None, gt=0)
    usd_to_thb_rate: Optional[float] = Field(default=None, gt=0)
    gemini_input_price: Optional[float] = Field(default=None, ge=0)
    gemini_output_price: Optional[float] = Field(default=None, ge=0)


class TokenEstimation(BaseModel):
    input_tokens: int
    estimated_output_tokens: int
    total_tokens: int
    mode: CreditProcessMode
    easy_explain_applied: bool


class CreditCalculation(BaseModel):
    tokens: TokenEstimation
    actual_cost_usd: float
    actual_cost_thb: float
    tier_markup: float
    final_cost_thb: float
    credits_required: int
    profit_margin_thb: float
    pricing_mode: PricingMode


class CreditPreview(CreditCalculation):
    user_role: Tier
    user_credits: int
    is_admin: bool


class CreditPreviewRequest(BaseModel):
    content: str
    mode: CreditProcessMode
    easy_explain_enabled: bool = False


class CreditCheckRequest(BaseModel):
    required: int = Field(ge=0)


class CreditCheck(BaseModel):
    has_enough: bool
    current_balance: int
    required: int


class CreditDeductRequest(BaseModel):
    amount: int = Field(gt=0)
    action: Optional[str] = None


class CreditAddRequest(BaseModel):
    user_id: str
    amount: int
    reason: Optional[str] = None


class CreditBalance(BaseModel):
    success: bool
    new_balance: int


class ProfitPreviewRequest(BaseModel):
    input_tokens: int = Field(ge=0)
    output_tokens: int = Field(ge=0)


class TierProfit(BaseModel):
    tier: Tier
    actual_cost_thb: float
    charge_thb: float
    profit_thb: float
    credits: int
