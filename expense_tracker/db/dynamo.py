import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from expense_tracker.core.config import settings

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource("dynamodb", region_name=settings.DYNAMO_REGION)

# Get table references
users_table = dynamodb.Table(settings.DYNAMO_TABLE_USERS)
transactions_table = dynamodb.Table(settings.DYNAMO_TABLE_TRANSACTIONS)

USER_EMAIL_INDEX = "email-index"
USER_CREATED_INDEX = "user-created-index"


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def get_user_by_email(email: str):
    """Query the Users table by email (assumes a GSI exists on email)."""
    try:
        response = users_table.query(
            IndexName=USER_EMAIL_INDEX,
            KeyConditionExpression=Key("email").eq(email.lower())
        )
        return _from_dynamo(response["Items"][0]) if response["Items"] else None
    except ClientError as e:
        logger.error(f"get_user_by_email failed: {_error_message(e)}")
        return None


def get_user_by_id(user_id: str):
    """Get user by user_id from the Users table."""
    try:
        response = users_table.get_item(Key={"user_id": user_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_user_by_id failed: {_error_message(e)}")
        return None


def put_user(user_item: dict):
    """Insert a new user into the Users table."""
    try:
        users_table.put_item(Item=_convert_for_dynamo(user_item))
        return True
    except ClientError as e:
        logger.error(f"put_user failed: {_error_message(e)}")
        return False


def update_user_budgets(user_id: str, budgets: Dict[str, float]):
    """Store per-category monthly budgets on the user record."""
    try:
        users_table.update_item(
            Key={"user_id": user_id},
            UpdateExpression="SET #b = :b",
            ExpressionAttributeNames={"#b": "budgets"},
            ExpressionAttributeValues=_convert_for_dynamo({":b": budgets}),
            ConditionExpression="attribute_exists(user_id)",
        )
        return True
    except ClientError as e:
        logger.error(f"update_user_budgets failed: {_error_message(e)}")
        return False


def put_transaction(transaction_item: dict):
    """Insert a transaction."""
    try:
        transactions_table.put_item(Item=_convert_for_dynamo(transaction_item))
        return True
    except ClientError as e:
        logger.error(f"put_transaction failed: {_error_message(e)}")
        return False


def get_transaction(transaction_id: str):
    """Fetch a single transaction by id. Callers check ownership."""
    try:
        response = transactions_table.get_item(Key={"transaction_id": transaction_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_transaction failed: {_error_message(e)}")
        return None


def get_transactions_for_user(
    user_id: str,
    since: Optional[str] = None,
    limit: Optional[int] = None,
) -> Optional[List[dict]]:
    """
    Query a user's transactions newest first, optionally only those created
    at or after ``since`` (ISO timestamp). Returns None if the query fails.
    """
    condition = Key("user_id").eq(user_id)
    if since:
        condition = condition & Key("created_at").gte(since)

    query_kwargs = {
        "IndexName": USER_CREATED_INDEX,
        "KeyConditionExpression": condition,
        "ScanIndexForward": False,
    }
    items: List[dict] = []
    try:
        while True:
            if limit:
                query_kwargs["Limit"] = limit - len(items)
            response = transactions_table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key or (limit and len(items) >= limit):
                break
            query_kwargs["ExclusiveStartKey"] = last_key
    except ClientError as e:
        logger.error(f"get_transactions_for_user failed: {_error_message(e)}")
        return None

    return [_from_dynamo(item) for item in items]


def update_transaction(transaction_id: str, updates: dict):
    """
    Apply partial updates to a transaction. Returns the updated item or None.
    """
    if not updates:
        return None

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {}

    for idx, (key, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = key
        expression_attribute_values[value_placeholder] = value

    update_expression = "SET " + ", ".join(update_expression_parts)

    try:
        response = transactions_table.update_item(
            Key={"transaction_id": transaction_id},
            UpdateExpression=update_expression,
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ConditionExpression="attribute_exists(transaction_id)",
            ReturnValues="ALL_NEW",
        )
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None
    except ClientError as e:
        logger.error(f"update_transaction failed: {_error_message(e)}")
        return None


def delete_transaction(transaction_id: str):
    """Delete a transaction. Returns True if an item was removed."""
    try:
        response = transactions_table.delete_item(
            Key={"transaction_id": transaction_id},
            ReturnValues="ALL_OLD",
        )
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_transaction failed: {_error_message(e)}")
        return False


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
