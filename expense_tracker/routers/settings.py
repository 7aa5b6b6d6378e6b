"""
Settings Router
Per-user category budgets fed into AI insights
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from expense_tracker.core.security import get_current_user_id
from expense_tracker.db import dynamo
from expense_tracker.models.ai import BudgetsUpdate
from expense_tracker.routers.ai import spending_analyzer

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/budgets")
def get_budgets(user_id: str = Depends(get_current_user_id)) -> Dict:
    """
    Get the current user's budgets merged over the configured defaults.
    """
    user = dynamo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return {
        "budgets": spending_analyzer.load_budgets(user.get("budgets")),
        "custom": user.get("budgets") or {},
    }


@router.put("/budgets")
def update_budgets(update: BudgetsUpdate, user_id: str = Depends(get_current_user_id)) -> Dict:
    success = dynamo.update_user_budgets(user_id, update.budgets)
    if not success:
        raise HTTPException(status_code=500, detail="Failed to save budgets")

    logger.info(f"Updated budgets for user {user_id}: {sorted(update.budgets)}")
    return {
        "success": True,
        "message": "Budgets updated successfully",
        "budgets": spending_analyzer.load_budgets(update.budgets),
    }
