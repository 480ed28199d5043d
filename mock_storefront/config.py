"""Mock Storefront Configuration"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class MockSettings(BaseSettings):
    """Mock server settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="MOCK_STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False
    port: int = 8001

    # Payment gateway credentials (test mode)
    gateway_key_id: str = "rzp_test_mockstorefront"
    gateway_key_secret: str = "mock-gateway-secret"
    # Largest gateway order, in the smallest currency unit
    gateway_max_amount: int = 100_000_000

    # Access tokens issued by the mock auth service
    jwt_secret: str = "mock-storefront-jwt-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Pricing
    currency: str = "INR"
    tax_rate: Decimal = Decimal("0.18")
    shipping_charge: int = 80
    # Subtotal at which shipping becomes free; disabled when unset
    free_shipping_threshold: Optional[int] = None


@lru_cache()
def get_settings() -> MockSettings:
    """Get cached settings instance"""
    return MockSettings()


settings = get_settings()
