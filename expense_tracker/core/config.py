from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "SmartExpenseTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_TABLE_USERS: str = Field(default="smart-expense-users")
    DYNAMO_TABLE_TRANSACTIONS: str = Field(default="smart-expense-transactions")

    # JWT Authentication
    JWT_SECRET: str = Field(default="b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60  # 1 hour

    # Gemini
    GEMINI_API_KEY: Optional[str] = Field(default=None)
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash")
    AI_TIMEOUT_SECONDS: float = Field(default=15.0)

    # Analytics thresholds (currency units)
    MONTHLY_BUDGET: float = Field(default=50000.0)
    HIGH_SPEND_THRESHOLD: float = Field(default=40000.0)
    LARGE_CATEGORY_THRESHOLD: float = Field(default=15000.0)
    BUDGETS_JSON: str = Field(default="config/budgets.json")

    # Rate limiting for /auth/register and /auth/login
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    AUTH_RATE_LIMIT: str = Field(default="20/minute")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
