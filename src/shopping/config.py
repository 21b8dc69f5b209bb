"""Runtime configuration, read from the environment."""

import os
from dataclasses import dataclass

DEFAULT_STORAGE_KEY = "cart-storage"
DEFAULT_MAX_SESSIONS = 1000


@dataclass(frozen=True)
class Settings:
    coupon_api_url: str | None = None
    coupon_api_timeout: float = 10.0
    storage_dir: str | None = None
    storage_key: str = DEFAULT_STORAGE_KEY
    max_sessions: int = DEFAULT_MAX_SESSIONS

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            coupon_api_url=os.getenv("COUPON_API_URL") or None,
            coupon_api_timeout=float(os.getenv("COUPON_API_TIMEOUT", "10")),
            storage_dir=os.getenv("CART_STORAGE_DIR") or None,
            storage_key=os.getenv("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            max_sessions=int(os.getenv("CART_MAX_SESSIONS", str(DEFAULT_MAX_SESSIONS))),
        )


def get_settings() -> Settings:
    return Settings.from_env()
