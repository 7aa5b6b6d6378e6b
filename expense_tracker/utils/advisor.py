"""
Spending Advisor
AI-backed insights, predictions and chat, each degrading to the
deterministic SpendingAnalyzer when the AI backend cannot answer
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from expense_tracker.models.ai import InsightsPayload
from expense_tracker.utils.ai_client import GenerativeAIClient
from expense_tracker.utils.analyzer import SpendingAggregates, SpendingAnalyzer, round_half_up

logger = logging.getLogger(__name__)

UNAVAILABLE_REPLY = "I'm sorry, AI features are currently unavailable. Please check your API configuration."
FAILED_REPLY = "I'm sorry, I couldn't process your question right now. Please try again later."

INSIGHTS_PROMPT = """
Analyze this user's spending pattern and provide 3 key insights:

Total Monthly Spend: ₹{total_spent}
Category Breakdown: {breakdown}
Budgets: {budgets}

Provide insights in this JSON format:
{{
  "insights": [
    {{
      "type": "alert|success|prediction",
      "message": "Brief insight message",
      "category": "category_name"
    }}
  ]
}}

Focus on:
- Budget overruns or good savings
- Unusual spending patterns
- Predictions based on trends
"""

PREDICTION_PROMPT = """
Based on this spending history, predict next month's spending:
{trend}

Return only a number (predicted amount in rupees) without currency symbol.
"""

CHAT_PROMPT = """
You are a personal financial advisor AI. Answer the user's query about their expenses.

User Query: "{query}"

User's Financial Data:
- Total Spent: ₹{total_spent}
- Category Spending: {breakdown}
- Recent Transactions: {recent}
- User Context: {context}

Provide a helpful, conversational response. Be specific with numbers and actionable advice.
Keep the response under 100 words and friendly in tone.
"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class Prediction:
    predicted_amount: float
    source: str  # "ai" or "average"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_insights(text: str) -> Optional[List[Dict[str, str]]]:
    """Parse the model's JSON reply; None when it is not the expected shape."""
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        payload = InsightsPayload.model_validate(json.loads(cleaned))
    except (ValueError, ValidationError):
        return None
    return [insight.model_dump() for insight in payload.insights]


def parse_amount(text: str) -> float:
    """Keep digits and dots only; anything unparsable counts as 0."""
    digits = re.sub(r"[^\d.]", "", text or "")
    try:
        return float(digits)
    except ValueError:
        return 0.0


class SpendingAdvisor:
    def __init__(self, client: GenerativeAIClient, analyzer: SpendingAnalyzer) -> None:
        self.client = client
        self.analyzer = analyzer

    def generate_insights(
        self,
        aggregates: SpendingAggregates,
        budgets: Optional[Dict[str, float]] = None,
    ) -> List[Dict[str, str]]:
        if not self.client.is_available():
            return self.analyzer.default_insights(aggregates)

        prompt = INSIGHTS_PROMPT.format(
            total_spent=round(aggregates.total_spent, 2),
            breakdown=json.dumps(aggregates.category_breakdown),
            budgets=json.dumps(budgets or {}),
        )
        try:
            text = self.client.generate(prompt)
        except Exception as e:
            logger.error(f"AI insights generation failed: {str(e)}")
            return self.analyzer.default_insights(aggregates)

        insights = parse_insights(text)
        if not insights:
            logger.warning("AI insights response was not valid insight JSON, using rule-based insights")
            return self.analyzer.default_insights(aggregates)
        return insights

    def predict_spending(self, monthly_trend: Dict[str, float]) -> Prediction:
        average = round_half_up(self.analyzer.predict_next_period(monthly_trend))
        if not self.client.is_available():
            return Prediction(predicted_amount=average, source="average")

        try:
            text = self.client.generate(PREDICTION_PROMPT.format(trend=json.dumps(monthly_trend)))
        except Exception as e:
            logger.error(f"AI prediction failed: {str(e)}")
            return Prediction(predicted_amount=average, source="average")

        return Prediction(predicted_amount=parse_amount(text), source="ai")

    def chat(
        self,
        query: str,
        transactions: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        timestamp = datetime.utcnow().isoformat()
        if not self.client.is_available():
            return {"query": query, "response": UNAVAILABLE_REPLY, "timestamp": timestamp}

        if not isinstance(transactions, list):
            logger.info("Invalid transactions data for chat, defaulting to empty list")
            transactions = []

        spent, _ = self.analyzer.totals(transactions)
        recent = [
            {k: tx.get(k) for k in ("text", "amount", "category", "type", "created_at")}
            for tx in transactions[:10]
            if isinstance(tx, dict)
        ]
        prompt = CHAT_PROMPT.format(
            query=query,
            total_spent=round(spent, 2),
            breakdown=json.dumps(self.analyzer.category_breakdown(transactions)),
            recent=json.dumps(recent, default=str),
            context=json.dumps(context or {}, default=str),
        )
        try:
            reply = self.client.generate(prompt).strip()
        except Exception as e:
            logger.error(f"AI chat failed for '{query}': {str(e)}", exc_info=True)
            return {"query": query, "response": FAILED_REPLY, "timestamp": timestamp}

        return {"query": query, "response": reply, "timestamp": timestamp}
