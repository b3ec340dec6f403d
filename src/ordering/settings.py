"""Store-wide settings for checkout, payments and the admin surface.

Values come from environment variables with storefront defaults. Use
get_settings() / set_settings() to swap settings (useful for tests).
"""

import os

from pydantic import BaseModel, Field


class StoreSettings(BaseModel):
    free_shipping_threshold: float = Field(default=5000.0, ge=0)
    mpesa_till_number: str = "8492735"
    business_name: str = "KALLITTOS FASHION"
    whatsapp_number: str = "254713809695"
    currency_label: str = "KSh"
    pending_poll_interval: float = Field(default=30.0, gt=0)
    order_rate_limit: int = Field(default=5, ge=1)
    tracking_rate_limit: int = Field(default=15, ge=1)
    rate_limit_window: float = Field(default=60.0, gt=0)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "StoreSettings":
        defaults = cls()
        return cls(
            free_shipping_threshold=float(os.getenv("FREE_SHIPPING_THRESHOLD", defaults.free_shipping_threshold)),
            mpesa_till_number=os.getenv("MPESA_TILL_NUMBER", defaults.mpesa_till_number),
            business_name=os.getenv("STORE_BUSINESS_NAME", defaults.business_name),
            whatsapp_number=os.getenv("WHATSAPP_NUMBER", defaults.whatsapp_number),
            currency_label=os.getenv("CURRENCY_LABEL", defaults.currency_label),
            pending_poll_interval=float(os.getenv("PENDING_POLL_INTERVAL", defaults.pending_poll_interval)),
            order_rate_limit=int(os.getenv("ORDER_RATE_LIMIT", defaults.order_rate_limit)),
            tracking_rate_limit=int(os.getenv("TRACKING_RATE_LIMIT", defaults.tracking_rate_limit)),
            rate_limit_window=float(os.getenv("RATE_LIMIT_WINDOW", defaults.rate_limit_window)),
        )


_current_settings: StoreSettings | None = None


def get_settings() -> StoreSettings:
    """Return the active store settings, loading them from the environment once."""
    global _current_settings
    if _current_settings is None:
        _current_settings = StoreSettings.from_env()
    return _current_settings


def set_settings(settings: StoreSettings) -> None:
    """Override the active store settings."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Reset to environment-derived settings."""
    global _current_settings
    _current_settings = None
