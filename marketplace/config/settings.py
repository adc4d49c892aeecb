"""
Application settings using Pydantic BaseSettings.
"""

from typing import List, Optional, Union

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "Marketplace Dispatch Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: Union[str, List[str]] = "*"

    # Database
    POSTGRES_USER: str = "marketplace_user"
    POSTGRES_PASSWORD: str = "marketplace_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "marketplace"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_ECHO: bool = False
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # Redis / Queue
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_REJECT_ON_WORKER_LOST: bool = True
    CELERY_TASK_TIME_LIMIT: int = 300  # 5 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 240  # 4 minutes

    # Routing rules
    ROUTING_WINDOW_HOURS: int = 24
    SLA_APPROACHING_HOURS: int = 20
    DISPATCH_TTL_HOURS: int = 24
    MAX_DISPATCH_CONTRACTORS: int = 5

    # Payments
    PAYMENT_PROVIDER: str = "stripe"
    PAYMENT_CURRENCY: str = "usd"
    PAYMENT_REQUEST_TIMEOUT: int = 30
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None

    # Monitoring
    ENABLE_METRICS: bool = True
    HEALTH_CHECK_TIMEOUT: int = 5
    MONITORING_PAGE_SIZE: int = 50
    MONITORING_MAX_PAGE_SIZE: int = 200

    # Development
    ENABLE_SWAGGER: bool = True

    # Celery Beat Scheduler Configuration
    SLA_EVALUATION_INTERVAL_SECONDS: int = 300  # 5 minutes
    DISPATCH_EXPIRY_SWEEP_INTERVAL_SECONDS: int = 600  # 10 minutes

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        return ["*"]

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> str:
        if isinstance(v, str) and v:
            return v
        # Build from individual components if DATABASE_URL is not provided
        user = info.data.get("POSTGRES_USER")
        password = info.data.get("POSTGRES_PASSWORD")
        host = info.data.get("POSTGRES_SERVER")
        port = info.data.get("POSTGRES_PORT")
        db = info.data.get("POSTGRES_DB")
        return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ["development", "staging", "production", "test"]:
            raise ValueError(
                "Environment must be one of: development, staging, production, test"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("PAYMENT_PROVIDER")
    @classmethod
    def validate_payment_provider(cls, v: str) -> str:
        if v.lower() not in ["stripe", "mock"]:
            raise ValueError("Payment provider must be one of: stripe, mock")
        return v.lower()

    @field_validator("MAX_DISPATCH_CONTRACTORS")
    @classmethod
    def validate_max_dispatch(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_DISPATCH_CONTRACTORS must be at least 1")
        return v

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


# Global settings instance
settings = Settings()
