from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

AI_SUGGEST = "AI_SUGGEST"


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    EDUCATION = "Education"
    INCOME = "Income"
    OTHERS = "Others"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


CATEGORY_NAMES = [c.value for c in Category]
# Labels the categorizer may suggest; Income is only ever set explicitly
EXPENSE_CATEGORY_NAMES = [c.value for c in Category if c is not Category.INCOME]


def signed_amount(amount: float, transaction_type: str) -> float:
    """Expenses are stored negative and income positive, whatever sign the client sent."""
    magnitude = abs(float(amount))
    if transaction_type == TransactionType.INCOME.value:
        return magnitude
    return -magnitude


class TransactionCreate(BaseModel):
    text: str = Field(min_length=1)
    amount: float = Field(allow_inf_nan=False)
    type: TransactionType = TransactionType.EXPENSE
    category: Optional[str] = None  # omitted or AI_SUGGEST -> categorizer

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: float) -> float:
        if value == 0:
            raise ValueError("Amount is required")
        return value

    @field_validator("category")
    @classmethod
    def known_category(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == AI_SUGGEST:
            return value
        if value not in CATEGORY_NAMES:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORY_NAMES)}")
        return value


class TransactionUpdate(BaseModel):
    text: Optional[str] = None
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    type: Optional[TransactionType] = None
    category: Optional[Category] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Description cannot be empty")
        return value

    @field_validator("amount")
    @classmethod
    def amount_not_zero(cls, value: Optional[float]) -> Optional[float]:
        if value == 0:
            raise ValueError("Amount cannot be zero")
        return value


class TransactionInDB(BaseModel):
    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    text: str
    amount: float = Field(allow_inf_nan=False)
    category: Category = Category.OTHERS
    type: TransactionType = TransactionType.EXPENSE
    ai_suggested: bool = False
    ai_confidence: float = Field(default=0.0, ge=0, le=1)
    original_category: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class TransactionPublic(BaseModel):
    transaction_id: str
    text: str
    amount: float
    category: str
    type: str
    ai_suggested: bool = False
    ai_confidence: float = 0.0
    original_category: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


def build_update_fields(existing: dict, update: TransactionUpdate) -> dict:
    """
    Work out the attributes to write for an owner's edit of ``existing``.
    Moving the category away from an AI suggestion records the suggestion
    in original_category and clears ai_suggested.
    """
    fields = {}
    if update.text is not None:
        fields["text"] = update.text

    new_type = update.type.value if update.type is not None else existing.get("type", TransactionType.EXPENSE.value)
    if update.type is not None:
        fields["type"] = new_type
    if update.amount is not None or update.type is not None:
        amount = update.amount if update.amount is not None else existing.get("amount", 0)
        fields["amount"] = signed_amount(amount, new_type)

    if update.category is not None and update.category.value != existing.get("category"):
        fields["category"] = update.category.value
        if existing.get("ai_suggested"):
            fields["ai_suggested"] = False
            fields["original_category"] = existing.get("category")

    if fields:
        fields["updated_at"] = datetime.utcnow().isoformat()
    return fields
