"""
Health Check Router
Liveness plus DynamoDB and AI backend status
"""
from fastapi import APIRouter
from datetime import datetime
import logging

from expense_tracker.core.config import settings
from expense_tracker.db import dynamo
from expense_tracker.utils.ai_client import get_ai_client

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.utcnow().isoformat()
    }


def _table_status(table, name: str) -> dict:
    try:
        table.scan(Limit=1)
        return {"name": name, "status": "accessible", "region": settings.DYNAMO_REGION}
    except Exception as e:
        logger.error(f"DynamoDB check failed for {name}: {str(e)}")
        return {"name": name, "status": "error", "error": str(e)}


@router.get("/status")
def services_status():
    """
    Check DynamoDB table reachability and whether the AI backend is configured.
    """
    tables = {
        "users": _table_status(dynamo.users_table, settings.DYNAMO_TABLE_USERS),
        "transactions": _table_status(dynamo.transactions_table, settings.DYNAMO_TABLE_TRANSACTIONS),
    }
    dynamodb_status = {
        "connected": all(table["status"] == "accessible" for table in tables.values()),
        "tables": tables,
    }

    ai_status = {
        "connected": get_ai_client().is_available(),
        "model": settings.GEMINI_MODEL,
    }

    services = {"dynamodb": dynamodb_status, "ai": ai_status}
    return {
        "timestamp": datetime.utcnow().isoformat(),
        "services": services,
        # Without AI the API still works on fallbacks
        "overall_status": "healthy" if all(s["connected"] for s in services.values()) else "degraded",
    }
