"""Business settings of the storefront.

The values live in the ``[custom]`` table of ``domain.toml`` next to the
infrastructure configuration, so the ``PROTEAN_ENV`` overlay that switches
databases also switches, say, the admin recipients. ``Settings`` parses and
validates them once per domain.
"""

from decimal import Decimal

from protean.utils.globals import current_domain
from pydantic import BaseModel, Field


class Settings(BaseModel):
    model_config = {"frozen": True}

    store_name: str = "Storefront"
    currency_symbol: str = "€"
    free_shipping_threshold: Decimal = Decimal("50")
    flat_shipping_fee: Decimal = Decimal("10")
    low_stock_threshold: int = Field(default=10, ge=0)
    coupon_code_attempts: int = Field(default=10, ge=1)
    admin_emails: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, domain) -> "Settings":
        return cls(**domain.config.get("custom", {}))


_settings: dict[str, Settings] = {}


def get_settings() -> Settings:
    """Return the settings of the active domain (parsed once)."""
    if current_domain.name not in _settings:
        _settings[current_domain.name] = Settings.from_domain(current_domain)
    return _settings[current_domain.name]


def configure(**overrides) -> Settings:
    """Replace individual settings of the active domain (useful for tests)."""
    settings = get_settings().model_copy(update=overrides)
    _settings[current_domain.name] = settings
    return settings


def reset_settings() -> None:
    """Forget parsed settings (useful for testing)."""
    _settings.clear()
