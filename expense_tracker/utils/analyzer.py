from __future__ import annotations

import calendar
import json
import math
import statistics
from collections import defaultdict
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from expense_tracker.models.transaction import Category, TransactionType

DEFAULT_BUDGETS = {
    "Food": 15000.0,
    "Transportation": 8000.0,
    "Entertainment": 5000.0,
    "Health": 5000.0,
    "Shopping": 10000.0,
    "Bills": 7000.0,
    "Education": 3000.0,
}

ENCOURAGEMENT = "Keep tracking your expenses to maintain good financial habits!"


@dataclass
class SpendingAggregates:
    """Summary statistics over one user's transaction list."""

    category_breakdown: Dict[str, float] = field(default_factory=dict)
    total_spent: float = 0.0
    total_income: float = 0.0
    weekday_split: Dict[str, float] = field(default_factory=lambda: {"weekday": 0.0, "weekend": 0.0})
    monthly_trend: Dict[str, float] = field(default_factory=dict)
    transaction_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp into a naive UTC datetime, or None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def shift_months(now: datetime, months: int) -> datetime:
    """Move ``now`` by a number of calendar months, clamping the day."""
    month_index = now.month - 1 + months
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _amount(tx: Dict[str, Any]) -> float:
    try:
        value = abs(float(tx.get("amount", 0) or 0))
    except (TypeError, ValueError):
        return 0.0
    # NaN and infinities count as zero
    return value if math.isfinite(value) else 0.0


def _type(tx: Dict[str, Any]) -> str:
    tx_type = tx.get("type")
    if tx_type in (TransactionType.INCOME.value, TransactionType.EXPENSE.value):
        return tx_type
    return TransactionType.EXPENSE.value


def _clean(transactions: Any) -> List[Dict[str, Any]]:
    if not isinstance(transactions, list):
        return []
    return [tx for tx in transactions if isinstance(tx, dict)]


class SpendingAnalyzer:
    """
    Pure analytics over transaction lists: aggregation, rule-based insights,
    and simple statistical predictions. Shared by the AI routes and the
    dashboard analytics endpoint.
    """

    def __init__(
        self,
        budget_config_path: Optional[str | Path] = None,
        monthly_budget: float = 50000.0,
        high_spend_threshold: float = 40000.0,
        large_category_threshold: float = 15000.0,
    ) -> None:
        self.monthly_budget = monthly_budget
        self._high_spend_threshold = high_spend_threshold
        self._large_category_threshold = large_category_threshold
        self._budgets = self._load_budgets(budget_config_path)

    @staticmethod
    def _load_budgets(path: Optional[str | Path]) -> Dict[str, float]:
        if not path:
            return dict(DEFAULT_BUDGETS)

        budget_file = Path(path)
        if not budget_file.exists():
            return dict(DEFAULT_BUDGETS)

        with budget_file.open() as fp:
            return json.load(fp)

    def load_budgets(self, overrides: Optional[Dict[str, float]] = None) -> Dict[str, float]:
        merged = dict(self._budgets)
        if overrides:
            merged.update(overrides)
        return merged

    # Aggregation

    def category_breakdown(self, transactions: Any) -> Dict[str, float]:
        breakdown: Dict[str, float] = defaultdict(float)
        for tx in _clean(transactions):
            if _type(tx) != TransactionType.EXPENSE.value:
                continue
            breakdown[tx.get("category") or Category.OTHERS.value] += _amount(tx)
        return dict(breakdown)

    def totals(self, transactions: Any) -> Tuple[float, float]:
        """Returns (total_spent, total_income)."""
        spent = income = 0.0
        for tx in _clean(transactions):
            if _type(tx) == TransactionType.INCOME.value:
                income += _amount(tx)
            else:
                spent += _amount(tx)
        return spent, income

    def weekday_split(self, transactions: Any, now: Optional[datetime] = None) -> Dict[str, float]:
        now = now or datetime.utcnow()
        split = {"weekday": 0.0, "weekend": 0.0}
        for tx in _clean(transactions):
            if _type(tx) != TransactionType.EXPENSE.value:
                continue
            created = parse_timestamp(tx.get("created_at")) or now
            # Saturday or Sunday
            key = "weekend" if created.weekday() >= 5 else "weekday"
            split[key] += _amount(tx)
        return split

    def monthly_trend(
        self,
        transactions: Any,
        category: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, float]:
        now = now or datetime.utcnow()
        trend: Dict[str, float] = defaultdict(float)
        for tx in _clean(transactions):
            if _type(tx) != TransactionType.EXPENSE.value:
                continue
            if category and (tx.get("category") or Category.OTHERS.value) != category:
                continue
            created = parse_timestamp(tx.get("created_at")) or now
            trend[created.strftime("%Y-%m")] += _amount(tx)
        return dict(sorted(trend.items()))

    def compute_aggregates(
        self,
        transactions: Any,
        now: Optional[datetime] = None,
        category: Optional[str] = None,
    ) -> SpendingAggregates:
        now = now or datetime.utcnow()
        spent, income = self.totals(transactions)
        return SpendingAggregates(
            category_breakdown=self.category_breakdown(transactions),
            total_spent=spent,
            total_income=income,
            weekday_split=self.weekday_split(transactions, now),
            monthly_trend=self.monthly_trend(transactions, category, now),
            transaction_count=len(_clean(transactions)),
        )

    # Insights

    def rule_based_insights(self, aggregates: SpendingAggregates) -> List[Dict[str, str]]:
        insights: List[Dict[str, str]] = []
        breakdown = aggregates.category_breakdown

        if breakdown:
            # max() keeps the first category on ties
            top_category = max(breakdown, key=breakdown.get)
            insights.append({
                "type": "prediction",
                "message": f"Your highest spending category this month is {top_category} (₹{breakdown[top_category]:.2f})",
                "category": top_category,
            })

        spent, income = aggregates.total_spent, aggregates.total_income
        if spent > income:
            insights.append({
                "type": "alert",
                "message": "You're spending more than your income this month. Consider reviewing your expenses.",
                "category": "general",
            })
        elif income - spent > income * 0.2:
            insights.append({
                "type": "success",
                "message": "Great job! You're saving more than 20% of your income.",
                "category": "general",
            })

        split = aggregates.weekday_split
        if split.get("weekend", 0) > split.get("weekday", 0) * 0.4:
            insights.append({
                "type": "alert",
                "message": "You tend to spend more on weekends. Consider setting a weekend budget.",
                "category": "general",
            })

        return insights

    def default_insights(self, aggregates: SpendingAggregates) -> List[Dict[str, str]]:
        """Rule-based insights plus fixed-threshold alerts; never empty."""
        insights = self.rule_based_insights(aggregates)

        if aggregates.total_spent > self._high_spend_threshold:
            insights.append({
                "type": "alert",
                "message": f"You've spent ₹{aggregates.total_spent:.0f} this month, which is quite high. Consider reviewing your expenses.",
                "category": "general",
            })

        breakdown = aggregates.category_breakdown
        if breakdown:
            top_category = max(breakdown, key=breakdown.get)
            if breakdown[top_category] > self._large_category_threshold:
                insights.append({
                    "type": "prediction",
                    "message": f"Your top spending category is {top_category} with ₹{breakdown[top_category]:.0f}.",
                    "category": top_category,
                })

        insights.append({"type": "success", "message": ENCOURAGEMENT, "category": "general"})
        return insights

    # Predictions

    def predict_remaining(self, aggregates: SpendingAggregates, now: Optional[datetime] = None) -> int:
        """Projects the rest of the month's spending from the daily average so far."""
        now = now or datetime.utcnow()
        if aggregates.transaction_count == 0:
            return 0

        days_in_month = calendar.monthrange(now.year, now.month)[1]
        days_passed = now.day
        days_remaining = days_in_month - days_passed
        if days_remaining <= 0:
            return 0

        avg_daily_spend = aggregates.total_spent / days_passed
        return round_half_up(avg_daily_spend * days_remaining)

    def predict_next_period(self, history: Any, category: Optional[str] = None) -> float:
        """
        Average monthly spend. ``history`` is either a monthly trend mapping,
        already filtered when it was built, or a transaction list, which is
        turned into a trend for ``category`` first.
        """
        if isinstance(history, list):
            history = self.monthly_trend(history, category)
        amounts = list((history or {}).values()) if isinstance(history, dict) else []
        if not amounts:
            return 0.0
        return statistics.fmean(amounts)

    def budget_status(self, total_spent: float, monthly_budget: Optional[float] = None) -> Tuple[float, str]:
        budget = self.monthly_budget if monthly_budget is None else monthly_budget
        used = total_spent * 100 / budget if total_spent > 0 and budget > 0 else 0.0
        if used > 100:
            status = "over_budget"
        elif used > 80:
            status = "approaching_limit"
        else:
            status = "within_budget"
        return used, status
