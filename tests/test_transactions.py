import pytest
from pydantic import ValidationError

from expense_tracker.models.ai import BudgetsUpdate, CategorizeRequest
from expense_tracker.models.transaction import (
    TransactionCreate,
    TransactionUpdate,
    build_update_fields,
    signed_amount,
)

ai_food = {
    "transaction_id": "t-1",
    "user_id": "user-1",
    "text": "Swiggy dinner",
    "amount": -300,
    "category": "Food",
    "type": "expense",
    "ai_suggested": True,
    "ai_confidence": 0.9,
    "original_category": None,
}


def test_signed_amount():
    assert signed_amount(120, "expense") == -120
    assert signed_amount(-120, "expense") == -120
    assert signed_amount(-5000, "income") == 5000


def test_override_ai_category():
    fields = build_update_fields(ai_food, TransactionUpdate(category="Shopping"))
    assert fields["category"] == "Shopping"
    assert fields["ai_suggested"] is False
    assert fields["original_category"] == "Food"
    assert "updated_at" in fields


def test_same_category_is_not_an_override():
    assert build_update_fields(ai_food, TransactionUpdate(category="Food")) == {}


def test_manual_category_change_keeps_flags():
    manual = dict(ai_food, ai_suggested=False)
    fields = build_update_fields(manual, TransactionUpdate(category="Bills"))
    assert fields["category"] == "Bills"
    assert "ai_suggested" not in fields
    assert "original_category" not in fields


def test_type_change_rederives_sign():
    fields = build_update_fields(ai_food, TransactionUpdate(type="income"))
    assert fields["type"] == "income"
    assert fields["amount"] == 300


def test_amount_change_keeps_existing_type_sign():
    fields = build_update_fields(ai_food, TransactionUpdate(amount=450))
    assert fields["amount"] == -450
    assert "type" not in fields


def test_create_validation():
    with pytest.raises(ValidationError):
        TransactionCreate(text="   ", amount=10)
    with pytest.raises(ValidationError):
        TransactionCreate(text="Lunch", amount=0)
    with pytest.raises(ValidationError):
        TransactionCreate(text="Lunch", amount=10, category="Groceries")

    created = TransactionCreate(text=" Lunch ", amount=10, category="AI_SUGGEST")
    assert created.text == "Lunch"
    assert created.type.value == "expense"


def test_update_rejects_unknown_category():
    with pytest.raises(ValidationError):
        TransactionUpdate(category="Groceries")


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_amounts_rejected(amount):
    with pytest.raises(ValidationError):
        TransactionCreate(text="Lunch", amount=amount)
    with pytest.raises(ValidationError):
        TransactionUpdate(amount=amount)
    with pytest.raises(ValidationError):
        CategorizeRequest(description="Lunch", amount=amount)
    with pytest.raises(ValidationError):
        BudgetsUpdate(budgets={"Food": amount})
