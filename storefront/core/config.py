"""Storefront Client Configuration"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Storefront API
    api_base_url: str = "http://localhost:8001"
    request_timeout_seconds: float = 30.0

    # Reads (cart, orders, shipping quote) get a single bounded retry
    read_retry_attempts: int = 1
    retry_backoff_seconds: float = 1.0
    retry_backoff_max_seconds: float = 30.0

    # Local persisted state
    local_storage_path: str = ".storefront/local_storage.json"
    cart_storage_key: str = "storefront_cart"
    token_storage_key: str = "access_token"

    # Server cart cache
    cart_stale_seconds: float = 30 * 60

    # Pricing
    tax_rate: Decimal = Decimal("0.18")
    currency: str = "INR"

    # Session
    merge_guest_cart_on_login: bool = True

    # Gateway (only needed by the simulated gateway in development)
    gateway_key_secret: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
