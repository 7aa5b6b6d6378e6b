from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from expense_tracker.models.transaction import EXPENSE_CATEGORY_NAMES, Category
from expense_tracker.utils.ai_client import GenerativeAIClient

logger = logging.getLogger(__name__)

AI_CONFIDENCE = 0.9
OFF_LIST_CONFIDENCE = 0.5
KEYWORD_CONFIDENCE = 0.7
NO_MATCH_CONFIDENCE = 0.3

# Ordered: the first group with a matching keyword wins
KEYWORD_RULES = (
    (Category.FOOD, ("food", "restaurant", "zomato", "swiggy")),
    (Category.TRANSPORTATION, ("uber", "taxi", "bus", "transport")),
    (Category.ENTERTAINMENT, ("netflix", "movie", "entertainment")),
    (Category.BILLS, ("bill", "electricity", "water")),
    (Category.SHOPPING, ("amazon", "shop", "store")),
)

CATEGORIZE_PROMPT = """
Analyze this expense and categorize it:
Description: "{description}"
Amount: ₹{amount}

Choose the MOST appropriate category from: {categories}

Return ONLY the category name, nothing else.
"""


@dataclass(frozen=True)
class CategorySuggestion:
    category: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def fallback_categorize(description: Optional[str], amount: Optional[float] = None) -> CategorySuggestion:
    """Keyword heuristics used whenever the AI backend cannot answer."""
    desc = (description or "").lower()
    for category, keywords in KEYWORD_RULES:
        if any(keyword in desc for keyword in keywords):
            suggestion = CategorySuggestion(category.value, KEYWORD_CONFIDENCE)
            break
    else:
        suggestion = CategorySuggestion(Category.OTHERS.value, NO_MATCH_CONFIDENCE)

    logger.debug(f"Fallback category for '{description}': {suggestion}")
    return suggestion


class ExpenseCategorizer:
    """Suggests a category for an expense, preferring the AI backend."""

    def __init__(self, client: GenerativeAIClient) -> None:
        self.client = client

    def categorize(self, description: str, amount: Optional[float] = None) -> CategorySuggestion:
        if not self.client.is_available():
            logger.warning(f"AI not available, using fallback categorization for: {description}")
            return fallback_categorize(description, amount)

        prompt = CATEGORIZE_PROMPT.format(
            description=description,
            amount=amount,
            categories=", ".join(EXPENSE_CATEGORY_NAMES),
        )
        try:
            category = self.client.generate(prompt).strip()
        except Exception as e:
            logger.error(f"AI categorization failed for '{description}': {str(e)}")
            return fallback_categorize(description, amount)

        logger.info(f"AI raw category response: {category}")
        if category in EXPENSE_CATEGORY_NAMES:
            return CategorySuggestion(category, AI_CONFIDENCE)

        logger.warning(f"Invalid AI category: {category}, falling back to Others")
        return CategorySuggestion(Category.OTHERS.value, OFF_LIST_CONFIDENCE)
