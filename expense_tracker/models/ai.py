import math
from typing import Dict, List, Literal

from pydantic import BaseModel, Field, field_validator

from expense_tracker.models.transaction import CATEGORY_NAMES


class CategorizeRequest(BaseModel):
    description: str = Field(min_length=1)
    amount: float = Field(allow_inf_nan=False)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value


class ChatRequest(BaseModel):
    query: str = Field(min_length=1)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Query is required")
        return value


class Insight(BaseModel):
    type: Literal["alert", "success", "prediction"]
    message: str = Field(min_length=1)
    category: str = "general"


class InsightsPayload(BaseModel):
    """Shape the model is asked to reply with for AI insights."""

    insights: List[Insight]


class BudgetsUpdate(BaseModel):
    budgets: Dict[str, float]  # Category name -> monthly amount

    @field_validator("budgets")
    @classmethod
    def valid_budgets(cls, value: Dict[str, float]) -> Dict[str, float]:
        for category, amount in value.items():
            if category not in CATEGORY_NAMES:
                raise ValueError(f"Unknown category: {category}")
            if not math.isfinite(amount):
                raise ValueError(f"Budget for {category} must be a number")
            if amount < 0:
                raise ValueError(f"Budget for {category} must be positive")
        return value
