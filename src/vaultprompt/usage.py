"""Usage tracking for profitability monitoring.

Every generation is recorded, including those of unlimited subscribers, with
the credit cost it would have had, so subscription revenue can be compared
with actual usage.
"""

import threading
from collections import deque
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from .models import UsageRecord

SUBSCRIPTION_PRICE_USD = 47
ESTIMATED_COST_PER_PROMPT_USD = 0.01


class UnlimitedStats(BaseModel):
    total_prompts: int
    total_credit_value: int
    average_cost_per_prompt: float
    prompts_this_month: int
    prompts_this_week: int


class ProfitabilityMetrics(BaseModel):
    total_unlimited_users: int
    total_unlimited_prompts: int
    total_credit_value: int
    average_prompts_per_user: float
    average_cost_per_prompt: float
    estimated_monthly_revenue: float
    estimated_monthly_cost: float


class UsageTracker:
    """Bounded history of usage records, oldest dropped first."""

    def __init__(self, limit: int = 1000) -> None:
        self._records: deque[UsageRecord] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def track(self, record: UsageRecord) -> None:
        with self._lock:
            self._records.append(record)

    def history(self) -> list[UsageRecord]:
        with self._lock:
            return list(self._records)

    def unlimited_stats(
        self,
        user_id: str,
        now: datetime | None = None,
    ) -> UnlimitedStats:
        """Usage of one unlimited subscriber.

        Args:
            user_id: The subscriber.
            now: Reference time for the month/week windows; defaults to UTC now.
                Naive datetimes are taken to be UTC.

        Returns:
            UnlimitedStats: Totals and windowed counts.

        """
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        week_start = now - timedelta(days=7)

        records = [r for r in self.history() if r.user_id == user_id and r.is_unlimited]
        total_value = sum(r.credit_cost for r in records)
        average = total_value / len(records) if records else 0.0

        return UnlimitedStats(
            total_prompts=len(records),
            total_credit_value=total_value,
            average_cost_per_prompt=round(average, 2),
            prompts_this_month=sum(1 for r in records if r.timestamp >= month_start),
            prompts_this_week=sum(1 for r in records if r.timestamp >= week_start),
        )

    def profitability_metrics(self) -> ProfitabilityMetrics:
        """Subscription revenue against estimated model spend."""
        records = [r for r in self.history() if r.is_unlimited]
        users = {r.user_id for r in records}
        total_value = sum(r.credit_cost for r in records)

        return ProfitabilityMetrics(
            total_unlimited_users=len(users),
            total_unlimited_prompts=len(records),
            total_credit_value=total_value,
            average_prompts_per_user=(
                round(len(records) / len(users), 2) if users else 0.0
            ),
            average_cost_per_prompt=(
                round(total_value / len(records), 2) if records else 0.0
            ),
            estimated_monthly_revenue=len(users) * SUBSCRIPTION_PRICE_USD,
            estimated_monthly_cost=round(
                len(records) * ESTIMATED_COST_PER_PROMPT_USD,
                2,
            ),
        )
