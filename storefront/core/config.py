"""Storefront Configuration"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8001
    currency: str = "INR"
    seed_catalog: bool = True

    # Stock
    low_stock_threshold: int = 5
    # Unknown (not yet subscribed) stock counts as available
    assume_in_stock_when_unknown: bool = True

    # Cart persistence
    cart_storage_path: str = ".storefront/local_storage.json"
    cart_storage_key: str = "storefront_cart"

    # Every call into the document store or the pincode API is bounded by this
    io_timeout_seconds: float = 10.0

    # Postal code reference
    pincode_api_base_url: str = "https://api.postalpincode.in"
    pincode_offline: bool = False
    pincode_cache_ttl_seconds: int = 24 * 60 * 60
    # Default seller delivery area around their base PIN code
    delivery_radius_km: float = 20.0


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
