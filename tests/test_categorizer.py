from types import SimpleNamespace

import pytest

from expense_tracker.utils.ai_client import AIServiceError, GenerativeAIClient
from expense_tracker.utils.categorizer import CategorySuggestion, ExpenseCategorizer, fallback_categorize


@pytest.mark.parametrize("description", ["Swiggy dinner", "ZOMATO order", "Lunch at restaurant", "street food"])
def test_fallback_food_keywords(description):
    assert fallback_categorize(description, 250) == CategorySuggestion("Food", 0.7)


@pytest.mark.parametrize(
    "description, category",
    [
        ("Uber to airport", "Transportation"),
        ("Netflix subscription", "Entertainment"),
        ("Electricity bill", "Bills"),
        ("Amazon order", "Shopping"),
    ],
)
def test_fallback_keyword_groups(description, category):
    assert fallback_categorize(description) == CategorySuggestion(category, 0.7)


def test_fallback_first_group_wins():
    # Matches both the food and shopping groups
    assert fallback_categorize("food store").category == "Food"


@pytest.mark.parametrize("description", ["Gym membership", "random thing", "", None])
def test_fallback_no_match(description):
    assert fallback_categorize(description) == CategorySuggestion("Others", 0.3)


def test_ai_valid_label(fake_ai):
    client = fake_ai("  Health \n")
    result = ExpenseCategorizer(client).categorize("Pharmacy", 400)
    assert result == CategorySuggestion("Health", 0.9)
    assert "Pharmacy" in client.prompts[0]
    assert "Income" not in client.prompts[0]


def test_ai_off_list_label(fake_ai):
    result = ExpenseCategorizer(fake_ai("Groceries")).categorize("Big basket", 900)
    assert result == CategorySuggestion("Others", 0.5)


def test_ai_failure_matches_fallback(fake_ai):
    categorizer = ExpenseCategorizer(fake_ai(RuntimeError("quota exceeded")))
    assert categorizer.categorize("Swiggy dinner", 300) == fallback_categorize("Swiggy dinner", 300)

    categorizer = ExpenseCategorizer(fake_ai(AIServiceError("Empty response from AI backend")))
    assert categorizer.categorize("misc", 10) == fallback_categorize("misc", 10)


def test_ai_unavailable_uses_fallback(fake_ai):
    client = fake_ai(available=False)
    result = ExpenseCategorizer(client).categorize("Uber ride", 150)
    assert result == CategorySuggestion("Transportation", 0.7)
    assert client.prompts == []


def test_suggestion_to_dict():
    assert CategorySuggestion("Food", 0.7).to_dict() == {"category": "Food", "confidence": 0.7}


@pytest.mark.parametrize("reply", [None, "", "  \n"])
def test_empty_ai_reply_uses_fallback(reply):
    client = GenerativeAIClient(api_key=None)
    response = SimpleNamespace(text=reply)
    client._client = SimpleNamespace(models=SimpleNamespace(generate_content=lambda model, contents: response))

    with pytest.raises(AIServiceError):
        client.generate("prompt")
    result = ExpenseCategorizer(client).categorize("Swiggy dinner", 300)
    assert result == fallback_categorize("Swiggy dinner", 300) == CategorySuggestion("Food", 0.7)
