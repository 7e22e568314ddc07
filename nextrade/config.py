"""Process-wide configuration, read once from the environment at startup."""
import os
from functools import lru_cache
from typing import NamedTuple


class Settings(NamedTuple):
    database_url: str
    jwt_secret: str
    token_ttl_seconds: int
    razorpay_key_id: str
    razorpay_key_secret: str
    razorpay_base_url: str
    currency: str
    log_level: str


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./nextrade.db"),
        jwt_secret=os.getenv("JWT_SECRET", "nextrade_secret"),
        token_ttl_seconds=int(os.getenv("JWT_EXP_SECONDS", str(60 * 60 * 24))),  # 1 day
        razorpay_key_id=os.getenv("RAZORPAY_KEY_ID", ""),
        razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
        razorpay_base_url=os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1").rstrip("/"),
        currency=os.getenv("PAYMENT_CURRENCY", "INR"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
