import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List

from fastapi import HTTPException
from supabase import Client

from app.core.utils import parse_timestamp, utc_now
from app.modules.settings.credits import CreditService, api_cost_usd
from app.modules.settings.models import AI_USAGE_ACTIONS, CHART_RANGE_DAYS
from app.modules.settings.schemas import (
    AIUsageChart, AIUsageStats, ChartRange, ClearResult, MonthUsage,
    UsageChartSummary, UsagePoint, UsageTotals
)

logger = logging.getLogger(__name__)


def utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def usage_points(logs: Iterable[Dict], days: int, today: date) -> List[UsagePoint]:
    """Requests and tokens per UTC day ending today, oldest first, zero-filled"""
    buckets: "OrderedDict[str, List[int]]" = OrderedDict()
    for offset in range(days - 1, -1, -1):
        buckets[(today - timedelta(days=offset)).isoformat()] = [0, 0]
    for log in logs:
        key = parse_timestamp(log["created_at"]).date().isoformat()
        if key in buckets:
            buckets[key][0] += 1
            buckets[key][1] += log.get("total_tokens") or 0
    return [UsagePoint(date=key, requests=requests, tokens=tokens) for key, (requests, tokens) in buckets.items()]


def monthly_points(points: Iterable[UsagePoint]) -> List[UsagePoint]:
    """Daily points folded into YYYY-MM points"""
    months: "OrderedDict[str, UsagePoint]" = OrderedDict()
    for point in points:
        month = months.setdefault(point.date[:7], UsagePoint(date=point.date[:7], requests=0, tokens=0))
        month.requests += point.requests
        month.tokens += point.tokens
    return sorted(months.values(), key=lambda point: point.date)


class AIUsageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.credits = CreditService(supabase)

    def _fetch_logs(self, since: datetime, columns: str = "*") -> List[Dict]:
        result = self.supabase.table("ai_usage_logs")\
            .select(columns)\
            .gte("created_at", since.isoformat())\
            .order("created_at")\
            .execute()
        return result.data or []

    def _estimated_cost(self, input_tokens: int, output_tokens: int) -> float:
        """USD at the configured Gemini prices, rounded to 4 decimals"""
        return round(api_cost_usd(input_tokens, output_tokens, self.credits.get_credit_settings()), 4)

    def get_ai_usage_stats(self, days: int = 30) -> AIUsageStats:
        try:
            logs = self._fetch_logs(utc_now() - timedelta(days=days))
            requests_by_action = {action: 0 for action in AI_USAGE_ACTIONS}
            tokens_by_action = {action: 0 for action in AI_USAGE_ACTIONS}
            daily: "OrderedDict[str, UsagePoint]" = OrderedDict()
            input_tokens = output_tokens = 0

            for log in logs:
                action = log.get("action") or "unknown"
                total = log.get("total_tokens") or 0
                requests_by_action[action] = requests_by_action.get(action, 0) + 1
                tokens_by_action[action] = tokens_by_action.get(action, 0) + total
                input_tokens += log.get("input_tokens") or 0
                output_tokens += log.get("output_tokens") or 0

                day = parse_timestamp(log["created_at"]).date().isoformat()
                point = daily.setdefault(day, UsagePoint(date=day, requests=0, tokens=0))
                point.requests += 1
                point.tokens += total

            return AIUsageStats(
                total_requests=len(logs),
                total_input_tokens=input_tokens,
                total_output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
                requests_by_action=requests_by_action,
                tokens_by_action=tokens_by_action,
                daily_usage=list(daily.values()),
                estimated_cost=self._estimated_cost(input_tokens, output_tokens),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch usage data: {str(e)}")

    def get_daily_ai_usage_chart(self, time_range: ChartRange = "week") -> AIUsageChart:
        """Zero-filled usage per day (per month for a year) with totals"""
        days = CHART_RANGE_DAYS[time_range]
        today = utc_now().date()
        try:
            logs = self._fetch_logs(
                utc_midnight(today - timedelta(days=days - 1)),
                "input_tokens, output_tokens, total_tokens, created_at",
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch usage data: {str(e)}")

        points = usage_points(logs, days, today)
        summary = UsageChartSummary(
            total_requests=sum(point.requests for point in points),
            total_tokens=sum(point.tokens for point in points),
            estimated_cost=self._estimated_cost(
                sum(log.get("input_tokens") or 0 for log in logs),
                sum(log.get("output_tokens") or 0 for log in logs),
            ),
        )
        if time_range == "year":
            points = monthly_points(points)
        return AIUsageChart(data=points, summary=summary)

    def get_today_ai_usage(self) -> UsageTotals:
        try:
            result = self.supabase.table("ai_usage_logs")\
                .select("total_tokens", count="exact")\
                .gte("created_at", utc_midnight(utc_now().date()).isoformat())\
                .execute()
            rows = result.data or []
            return UsageTotals(
                requests=result.count if result.count is not None else len(rows),
                tokens=sum(row.get("total_tokens") or 0 for row in rows),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch usage data: {str(e)}")

    def get_current_month_ai_usage(self) -> MonthUsage:
        now = utc_now()
        try:
            logs = self._fetch_logs(utc_midnight(now.date().replace(day=1)), "total_tokens")
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch usage data: {str(e)}")
        return MonthUsage(
            requests=len(logs),
            tokens=sum(log.get("total_tokens") or 0 for log in logs),
            month_name=now.strftime("%b %Y"),
        )

    def clear_old_ai_usage_logs(self, days_old: int = 90) -> ClearResult:
        if days_old < 1:
            raise HTTPException(status_code=400, detail="days_old must be at least 1")
        try:
            cutoff = (utc_now() - timedelta(days=days_old)).isoformat()
            result = self.supabase.table("ai_usage_logs")\
                .delete()\
                .lt("created_at", cutoff)\
                .execute()
            deleted = len(result.data or [])
            logger.info(f"Cleared {deleted} AI usage logs older than {days_old} days")
            return ClearResult(success=True, deleted=deleted)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to clear AI usage logs: {str(e)}")
