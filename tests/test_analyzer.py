from datetime import datetime

from expense_tracker.utils.analyzer import SpendingAggregates, SpendingAnalyzer, shift_months

# 2025-11-01 is a Saturday, 2025-11-04 a Tuesday
sample_transactions = [
    {"category": "Food", "type": "expense", "amount": -250.0, "created_at": "2025-11-01T12:00:00Z"},
    {"category": "Bills", "type": "expense", "amount": -1000.0, "created_at": "2025-11-03T12:00:00"},
    {"category": "Food", "type": "expense", "amount": -150.0, "created_at": "2025-11-04T12:00:00"},
    {"category": "Shopping", "type": "expense", "amount": -1200.0, "created_at": "2025-10-15T12:00:00"},
    {"category": "Income", "type": "income", "amount": 5000.0, "created_at": "2025-11-02T09:00:00"},
]

now = datetime(2025, 11, 10, 12, 0, 0)


def test_category_breakdown_is_expense_only():
    analyzer = SpendingAnalyzer()
    result = analyzer.category_breakdown(sample_transactions)
    assert result == {"Food": 400.0, "Bills": 1000.0, "Shopping": 1200.0}


def test_breakdown_sums_to_total_spent():
    analyzer = SpendingAnalyzer()
    aggregates = analyzer.compute_aggregates(sample_transactions, now)
    assert sum(aggregates.category_breakdown.values()) == aggregates.total_spent
    assert aggregates.total_spent == 2600.0
    assert aggregates.total_income == 5000.0
    assert aggregates.transaction_count == 5


def test_empty_list_gives_zero_aggregates():
    analyzer = SpendingAnalyzer()
    aggregates = analyzer.compute_aggregates([], now)
    assert aggregates == SpendingAggregates()
    assert aggregates.weekday_split == {"weekday": 0.0, "weekend": 0.0}


def test_malformed_input_is_tolerated():
    analyzer = SpendingAnalyzer()
    assert analyzer.compute_aggregates(None, now).total_spent == 0
    assert analyzer.compute_aggregates("not a list", now).category_breakdown == {}

    messy = [
        {"category": "Food", "type": "expense"},
        {"category": "Food", "type": "expense", "amount": "abc"},
        {"type": "bogus", "amount": -20},
        "junk",
    ]
    aggregates = analyzer.compute_aggregates(messy, now)
    assert aggregates.category_breakdown == {"Food": 0.0, "Others": 20.0}
    assert aggregates.total_spent == 20.0
    assert aggregates.transaction_count == 3


def test_weekend_split_and_insight():
    analyzer = SpendingAnalyzer()
    transactions = [
        {"category": "Food", "type": "expense", "amount": -100, "created_at": "2025-11-01T10:00:00"},  # Saturday
        {"category": "Food", "type": "expense", "amount": -50, "created_at": "2025-11-04T10:00:00"},  # Tuesday
    ]
    aggregates = analyzer.compute_aggregates(transactions, now)
    assert aggregates.weekday_split == {"weekday": 50.0, "weekend": 100.0}

    messages = [i["message"] for i in analyzer.rule_based_insights(aggregates)]
    assert any("weekends" in m for m in messages)


def test_monthly_trend_with_category_filter():
    analyzer = SpendingAnalyzer()
    assert analyzer.monthly_trend(sample_transactions) == {"2025-10": 1200.0, "2025-11": 1400.0}
    assert analyzer.monthly_trend(sample_transactions, category="Food") == {"2025-11": 400.0}


def test_top_category_ties_keep_first():
    analyzer = SpendingAnalyzer()
    aggregates = SpendingAggregates(
        category_breakdown={"Bills": 300.0, "Food": 300.0},
        total_spent=600.0,
        total_income=0.0,
    )
    headline = analyzer.rule_based_insights(aggregates)[0]
    assert headline["category"] == "Bills"


def test_overspend_and_savings_are_exclusive():
    analyzer = SpendingAnalyzer()
    overspent = analyzer.rule_based_insights(SpendingAggregates(total_spent=500.0, total_income=100.0))
    assert [i["type"] for i in overspent] == ["alert"]
    assert "more than your income" in overspent[0]["message"]

    saving = analyzer.rule_based_insights(SpendingAggregates(total_spent=100.0, total_income=1000.0))
    assert [i["type"] for i in saving] == ["success"]

    modest = analyzer.rule_based_insights(SpendingAggregates(total_spent=900.0, total_income=1000.0))
    assert modest == []


def test_default_insights_thresholds():
    analyzer = SpendingAnalyzer(high_spend_threshold=1000, large_category_threshold=500)
    aggregates = SpendingAggregates(
        category_breakdown={"Shopping": 1200.0},
        total_spent=1200.0,
        total_income=5000.0,
    )
    insights = analyzer.default_insights(aggregates)
    messages = [i["message"] for i in insights]
    assert any("quite high" in m for m in messages)
    headline = {
        "type": "prediction",
        "message": "Your top spending category is Shopping with ₹1200.",
        "category": "Shopping",
    }
    assert headline in insights
    assert insights[-1]["message"].startswith("Keep tracking")


def test_default_insights_never_empty():
    analyzer = SpendingAnalyzer()
    insights = analyzer.default_insights(SpendingAggregates())
    assert len(insights) == 1
    assert insights[0]["type"] == "success"


def test_predict_remaining():
    analyzer = SpendingAnalyzer()
    aggregates = SpendingAggregates(total_spent=1000.0, transaction_count=4)
    # 30-day month, 10 days passed -> 100/day for 20 days
    assert analyzer.predict_remaining(aggregates, now) == 2000
    # 1000 / 3 * 27 = 9000
    assert analyzer.predict_remaining(aggregates, datetime(2025, 11, 3)) == 9000


def test_predict_remaining_zero_cases():
    analyzer = SpendingAnalyzer()
    aggregates = SpendingAggregates(total_spent=1000.0, transaction_count=4)
    assert analyzer.predict_remaining(aggregates, datetime(2025, 11, 30, 18, 0)) == 0
    assert analyzer.predict_remaining(SpendingAggregates(), now) == 0


def test_predict_next_period():
    analyzer = SpendingAnalyzer()
    assert analyzer.predict_next_period({"2025-09": 100.0, "2025-10": 300.0}) == 200.0
    assert analyzer.predict_next_period({}) == 0


def test_predict_next_period_from_transactions():
    analyzer = SpendingAnalyzer()
    assert analyzer.predict_next_period(sample_transactions) == 1300.0
    assert analyzer.predict_next_period(sample_transactions, category="Food") == 400.0
    assert analyzer.predict_next_period(sample_transactions, category="Health") == 0
    assert analyzer.predict_next_period(None) == 0


def test_non_finite_amounts_count_as_zero():
    analyzer = SpendingAnalyzer()
    transactions = [
        {"category": "Food", "type": "expense", "amount": float("nan"), "created_at": "2025-11-04T10:00:00"},
        {"category": "Food", "type": "expense", "amount": "nan", "created_at": "2025-11-04T10:00:00"},
        {"category": "Bills", "type": "expense", "amount": float("-inf"), "created_at": "2025-11-04T10:00:00"},
        {"category": "Bills", "type": "expense", "amount": -75, "created_at": "2025-11-04T10:00:00"},
        {"category": "Income", "type": "income", "amount": "Infinity", "created_at": "2025-11-04T10:00:00"},
    ]
    aggregates = analyzer.compute_aggregates(transactions, now)
    assert aggregates.category_breakdown == {"Food": 0.0, "Bills": 75.0}
    assert sum(aggregates.category_breakdown.values()) == aggregates.total_spent == 75.0
    assert aggregates.total_income == 0.0
    assert aggregates.weekday_split == {"weekday": 75.0, "weekend": 0.0}
    assert analyzer.predict_remaining(aggregates, now) == 150


def test_budget_status():
    analyzer = SpendingAnalyzer()
    assert analyzer.budget_status(57, 100) == (57.0, "within_budget")
    assert analyzer.budget_status(85, 100) == (85.0, "approaching_limit")
    assert analyzer.budget_status(130, 100) == (130.0, "over_budget")
    assert analyzer.budget_status(0, 100) == (0.0, "within_budget")


def test_load_budgets_merges_overrides(tmp_path):
    config = tmp_path / "budgets.json"
    config.write_text('{"Food": 300, "Bills": 900}')
    analyzer = SpendingAnalyzer(config)
    assert analyzer.load_budgets({"Food": 500}) == {"Food": 500, "Bills": 900}


def test_shift_months_clamps_day():
    assert shift_months(datetime(2025, 5, 31), -3) == datetime(2025, 2, 28)
    assert shift_months(datetime(2025, 1, 15), -6) == datetime(2024, 7, 15)
