import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from expense_tracker.core.config import settings
from expense_tracker.core.security import get_current_user_id
from expense_tracker.db import dynamo
from expense_tracker.models.ai import CategorizeRequest, ChatRequest
from expense_tracker.models.transaction import CATEGORY_NAMES, Category, TransactionType
from expense_tracker.utils.advisor import SpendingAdvisor
from expense_tracker.utils.ai_client import get_ai_client
from expense_tracker.utils.analyzer import SpendingAnalyzer, month_start, parse_timestamp, round_half_up, shift_months
from expense_tracker.utils.categorizer import ExpenseCategorizer

router = APIRouter()
logger = logging.getLogger(__name__)

spending_analyzer = SpendingAnalyzer(
    settings.BUDGETS_JSON,
    monthly_budget=settings.MONTHLY_BUDGET,
    high_spend_threshold=settings.HIGH_SPEND_THRESHOLD,
    large_category_threshold=settings.LARGE_CATEGORY_THRESHOLD,
)
categorizer = ExpenseCategorizer(get_ai_client())
advisor = SpendingAdvisor(get_ai_client(), spending_analyzer)


def _load_transactions(user_id: str, since: datetime, limit: Optional[int] = None):
    transactions = dynamo.get_transactions_for_user(user_id, since=since.isoformat(), limit=limit)
    if transactions is None:
        raise HTTPException(status_code=500, detail="Failed to load transactions")
    return transactions


@router.post("/categorize")
def categorize_expense(request: CategorizeRequest, user_id: str = Depends(get_current_user_id)) -> Dict:
    """Suggest a category for an expense description."""
    try:
        suggestion = categorizer.categorize(request.description, request.amount)
        return {
            "suggested_category": suggestion.category,
            "confidence": suggestion.confidence,
            "message": f"AI suggests: {suggestion.category}",
        }
    except Exception as e:
        logger.error(f"Categorization error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "message": "AI categorization failed",
                "suggested_category": Category.OTHERS.value,
                "confidence": 0.1,
            },
        )


@router.get("/insights")
def get_insights(user_id: str = Depends(get_current_user_id)) -> Dict:
    """AI-powered spending insights over the last 30 days."""
    now = datetime.utcnow()
    transactions = _load_transactions(user_id, now - timedelta(days=30))

    user = dynamo.get_user_by_id(user_id) or {}
    budgets = spending_analyzer.load_budgets(user.get("budgets"))

    aggregates = spending_analyzer.compute_aggregates(transactions, now)
    insights = advisor.generate_insights(aggregates, budgets)
    logger.info(f"Generated {len(insights)} insights for user {user_id}")

    return {
        "insights": insights,
        "total_transactions": len(transactions),
        "analysis_period": "Last 30 days",
    }


@router.post("/chat")
def chat_with_expenses(request: ChatRequest, user_id: str = Depends(get_current_user_id)) -> Dict:
    """Answer a natural-language question about recent spending."""
    transactions = _load_transactions(user_id, shift_months(datetime.utcnow(), -3), limit=50)
    context = {"total_transactions": len(transactions), "user_id": user_id}
    return advisor.chat(request.query, transactions, context)


@router.get("/predictions")
def get_predictions(
    category: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """Predict next month's spending from the last six months of expenses."""
    if category and category not in CATEGORY_NAMES:
        raise HTTPException(status_code=400, detail="Invalid category")

    now = datetime.utcnow()
    transactions = [
        tx for tx in _load_transactions(user_id, shift_months(now, -6))
        if tx.get("type") == TransactionType.EXPENSE.value
    ]
    trend = spending_analyzer.monthly_trend(transactions, category, now)
    prediction = advisor.predict_spending(trend)

    return {
        "predicted_amount": prediction.predicted_amount,
        "source": prediction.source,
        "category": category or "overall",
        "monthly_trend": trend,
        "period": "next month",
    }


@router.get("/analytics")
def get_analytics(user_id: str = Depends(get_current_user_id)) -> Dict:
    """Dashboard analytics for the current month with three months of trend."""
    try:
        now = datetime.utcnow()
        transactions = _load_transactions(user_id, shift_months(now, -3))

        current_month = month_start(now)
        current_month_transactions = [
            tx for tx in transactions
            if (parse_timestamp(tx.get("created_at")) or now) >= current_month
        ]

        aggregates = spending_analyzer.compute_aggregates(current_month_transactions, now)
        trend = spending_analyzer.monthly_trend(transactions, now=now)
        insights = spending_analyzer.default_insights(aggregates)
        remaining = spending_analyzer.predict_remaining(aggregates, now)
        budget_used, budget_status = spending_analyzer.budget_status(aggregates.total_spent)

        return {
            "summary": {
                "total_spent": round_half_up(aggregates.total_spent),
                "total_income": round_half_up(aggregates.total_income),
                "balance": round_half_up(aggregates.total_income - aggregates.total_spent),
                "transaction_count": aggregates.transaction_count,
                "budget_used": round(budget_used, 2),
                "monthly_budget": spending_analyzer.monthly_budget,
            },
            "category_breakdown": aggregates.category_breakdown,
            "monthly_trend": trend,
            "insights": {
                "messages": [insight["message"] for insight in insights],
                "items": insights,
                "period": "current_month",
                "generated_at": now.isoformat(),
            },
            "predictions": {
                "remaining_month_spending": remaining,
                "budget_status": budget_status,
                "projected_month_end": round_half_up(aggregates.total_spent + remaining),
            },
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Analytics error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate analytics")
