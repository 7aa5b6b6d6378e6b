import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from expense_tracker.core.config import settings
from expense_tracker.core.limiter import limiter
from expense_tracker.core.security import (
    create_access_token,
    get_current_user_id,
    get_password_hash,
    verify_password,
)
from expense_tracker.db import dynamo
from expense_tracker.models.user import UserCreate, UserInDB, UserLogin, UserPublic

router = APIRouter()
logger = logging.getLogger(__name__)


def _token_response(user: dict) -> dict:
    access_token = create_access_token(data={"sub": user["user_id"]})
    user_public = UserPublic(
        user_id=user["user_id"],
        name=user.get("name", ""),
        email=user["email"],
        created_at=user.get("created_at", ""),
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user_public.model_dump(),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.shared_limit(settings.AUTH_RATE_LIMIT, scope="auth")
def register(request: Request, user: UserCreate):
    existing = dynamo.get_user_by_email(user.email)
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")

    user_db = UserInDB(
        name=user.name.strip(),
        email=user.email,
        password_hash=get_password_hash(user.password),
    )

    success = dynamo.put_user(user_db.model_dump(exclude_none=True))
    if not success:
        raise HTTPException(status_code=500, detail="Error saving user")

    logger.info(f"Registered user {user_db.user_id}")
    return _token_response(user_db.model_dump())


@router.get("/me", response_model=UserPublic)
def get_current_user(user_id: str = Depends(get_current_user_id)):
    """Get current user profile"""
    user = dynamo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return UserPublic(
        user_id=user["user_id"],
        name=user.get("name", ""),
        email=user["email"],
        created_at=user.get("created_at", ""),
    )


@router.post("/login")
@limiter.shared_limit(settings.AUTH_RATE_LIMIT, scope="auth")
def login(request: Request, login_data: UserLogin):
    try:
        logger.info(f"Login attempt for email: {login_data.email}")
        user = dynamo.get_user_by_email(login_data.email)

        if not user:
            logger.warning(f"User not found: {login_data.email}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        if not verify_password(login_data.password, user["password_hash"]):
            logger.warning(f"Invalid password for user: {login_data.email}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

        logger.info(f"Login successful for user: {login_data.email}")
        return _token_response(user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Login failed")
