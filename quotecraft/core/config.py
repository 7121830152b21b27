from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    BASE_DELIVERY_FEE: float = 75.00

    DISTANCE_TIER_1_MAX: float = 20
    DISTANCE_TIER_2_MAX: float = 50
    DISTANCE_TIER_1_RATE: float = 0.00
    DISTANCE_TIER_2_RATE: float = 1.50
    DISTANCE_TIER_3_RATE: float = 2.00

    SMALL_ITEM_FEE: float = 10.00
    MEDIUM_ITEM_FEE: float = 25.00
    LARGE_ITEM_FEE: float = 50.00
    EXTRA_LARGE_ITEM_FEE: float = 100.00
    DELICATE_ITEM_FEE: float = 35.00
    HIGH_VALUE_ITEM_FEE: float = 75.00

    STANDARD_FEE: float = 0.00
    NEXT_DAY_FEE: float = 25.00
    SAME_DAY_FEE: float = 50.00
    EMERGENCY_FEE: float = Field(
        default=150.00,
        validation_alias=AliasChoices("EMERGENCY_FEE", "EMERGENCY_BASE_FEE"),
    )

    INSURANCE_PREMIUM_RATE: float = 0.02  # fraction of declared value
    TAX_RATE: float = 0.085
    EMERGENCY_MULTIPLIER: float = 2.0

    GOOGLE_MAPS_API_KEY: Optional[str] = None
    MAPS_BASE_URL: str = "https://maps.googleapis.com/maps/api"
    DISTANCE_TIMEOUT: float = 10.0
    DISTANCE_CACHE_TTL: int = 24 * 60 * 60  # 24 hours
    DISTANCE_CACHE_SWEEP_INTERVAL: int = 60 * 60  # 1 hour

    ANALYTICS_CAPACITY: int = 1000
    ANALYTICS_RETAIN: int = 500

    QUOTE_VALIDITY_DAYS: int = 7

    API_TITLE: str = "Quote Pricing Microservice"
    API_DESCRIPTION: str = "Delivery quote pricing engine with distance resolution"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
