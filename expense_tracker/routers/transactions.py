import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from expense_tracker.core.security import get_current_user_id
from expense_tracker.db import dynamo
from expense_tracker.models.transaction import (
    AI_SUGGEST,
    Category,
    TransactionCreate,
    TransactionInDB,
    TransactionPublic,
    TransactionType,
    TransactionUpdate,
    build_update_fields,
    signed_amount,
)
from expense_tracker.utils.ai_client import get_ai_client
from expense_tracker.utils.categorizer import ExpenseCategorizer

router = APIRouter()
logger = logging.getLogger(__name__)
categorizer = ExpenseCategorizer(get_ai_client())


def get_owned_transaction(transaction_id: str, user_id: str) -> dict:
    transaction = dynamo.get_transaction(transaction_id)
    if not transaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    if transaction.get("user_id") != user_id:
        logger.warning(f"User {user_id} attempted to access transaction {transaction_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return transaction


@router.get("/", response_model=List[TransactionPublic])
def list_transactions(
    days: Optional[int] = Query(default=None, ge=1),
    user_id: str = Depends(get_current_user_id),
):
    since = (datetime.utcnow() - timedelta(days=days)).isoformat() if days else None
    transactions = dynamo.get_transactions_for_user(user_id, since=since)
    if transactions is None:
        raise HTTPException(status_code=500, detail="Failed to load transactions")
    logger.info(f"Found {len(transactions)} transactions for user {user_id}")
    return transactions


@router.post("/", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate, user_id: str = Depends(get_current_user_id)):
    ai_suggested = False
    ai_confidence = 0.0
    category = transaction.category

    if category is None and transaction.type == TransactionType.INCOME:
        category = Category.INCOME.value
    elif category is None or category == AI_SUGGEST:
        suggestion = categorizer.categorize(transaction.text, abs(transaction.amount))
        category = suggestion.category
        ai_suggested = True
        ai_confidence = suggestion.confidence

    transaction_db = TransactionInDB(
        user_id=user_id,
        text=transaction.text,
        amount=signed_amount(transaction.amount, transaction.type.value),
        category=category,
        type=transaction.type,
        ai_suggested=ai_suggested,
        ai_confidence=ai_confidence,
    )
    item = transaction_db.model_dump(mode="json")
    if not dynamo.put_transaction(item):
        raise HTTPException(status_code=500, detail="Failed to save transaction")

    logger.info(f"Saved transaction {transaction_db.transaction_id} for user {user_id}")
    return TransactionPublic(**item)


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(
    transaction_id: str,
    transaction_update: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
):
    existing = get_owned_transaction(transaction_id, user_id)

    fields = build_update_fields(existing, transaction_update)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = dynamo.update_transaction(transaction_id, fields)
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update transaction")

    return TransactionPublic(**updated)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)):
    get_owned_transaction(transaction_id, user_id)
    if not dynamo.delete_transaction(transaction_id):
        raise HTTPException(status_code=500, detail="Failed to delete transaction")
    return None
