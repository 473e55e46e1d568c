"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (backend URL, checkout branding, session store)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Course platform REST API
    BACKEND_API_URL: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the course platform REST API"
    )
    BACKEND_TIMEOUT: float = Field(
        default=30.0,
        description="Backend request timeout in seconds"
    )

    # Checkout widget
    PAYMENT_CURRENCY: str = Field(
        default="INR",
        description="Currency used for payment orders"
    )
    CHECKOUT_NAME: str = Field(
        default="SAP ABAP Academy",
        description="Merchant name shown in the checkout widget"
    )
    CHECKOUT_IMAGE: str = Field(
        default="/logo.png",
        description="Logo shown in the checkout widget"
    )
    CHECKOUT_THEME_COLOR: str = Field(
        default="#4f46e5",
        description="Checkout widget theme colour"
    )
    CHECKOUT_SCRIPT_URL: str = Field(
        default="https://checkout.razorpay.com/v1/checkout.js",
        description="Checkout widget script the browser loads"
    )

    # Session storage
    SESSION_BACKEND: Literal["memory", "mongo"] = Field(
        default="memory",
        description="Where user/token pairs are kept"
    )
    MONGODB_URL: Optional[str] = Field(
        default=None,
        description="MongoDB connection URI (mongo session backend only)"
    )
    MONGODB_DB_NAME: str = Field(
        default="enrollease",
        description="MongoDB database name"
    )
    SESSION_TTL_DAYS: int = Field(
        default=30,
        description="Days before an idle stored session is dropped"
    )

    # In-memory wizard state
    WIZARD_IDLE_MINUTES: int = Field(
        default=60,
        description="Minutes before an untouched enrollment wizard is dropped"
    )
    CHECKOUT_TTL_MINUTES: int = Field(
        default=30,
        description="Minutes a checkout may stay open without a result"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("BACKEND_API_URL")
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.BACKEND_API_URL:
        errors.append("BACKEND_API_URL is required")

    if settings.SESSION_BACKEND == "mongo" and not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required when SESSION_BACKEND is 'mongo'")

    # Production-specific validations
    if settings.is_production:
        if settings.SESSION_BACKEND != "mongo":
            errors.append("SESSION_BACKEND must be 'mongo' in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
