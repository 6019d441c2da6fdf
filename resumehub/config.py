"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    get_settings() caches a single instance. Tests that need different
    values build their own Settings and pass it to create_app().
    """

    # Database settings
    DATABASE_URL: str = "sqlite:///./resumehub.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Security settings
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Login lockout
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # Redis for rate limiting, keys are namespaced per tenant
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_PREFIX: str = "resumehub"
    RATE_LIMIT_ENABLED: bool = True

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Tenant resolution
    # None means "allowed everywhere except production"
    TENANT_QUERY_PARAM_ENABLED: Optional[bool] = None

    # Event delivery worker pool
    EVENT_WORKERS: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def tenant_query_param_allowed(self) -> bool:
        """Whether ?tenant=<id> may select a tenant when no host matches."""
        if self.TENANT_QUERY_PARAM_ENABLED is not None:
            return self.TENANT_QUERY_PARAM_ENABLED
        return self.ENVIRONMENT != "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
