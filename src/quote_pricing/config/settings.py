"""
Centralized settings for the quote pricing engine and its surfaces.

Values come from QUOTE_PRICING_* environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

ENV_PREFIX = "QUOTE_PRICING_"

# Minor units for currencies that do not use two decimals
DEFAULT_CURRENCY_DECIMALS = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
}


def _parse_currency_decimals(raw: str) -> dict[str, int]:
    """Parse ``JPY:0,KWD:3`` into a mapping."""
    result = {}
    for part in raw.split(','):
        part = part.strip()
        if not part:
            continue
        code, _, decimals = part.partition(':')
        result[code.strip().upper()] = int(decimals)
    return result


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Pricing
    default_currency: str = "NZD"
    standard_tax_rate: Decimal = Decimal("15")
    standard_tax_name: str = "GST"
    currency_decimals: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_CURRENCY_DECIMALS))

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    def decimals_for(self, currency: str) -> int:
        """Number of minor-unit decimals for a currency (2 unless configured)."""
        return self.currency_decimals.get(currency.upper(), 2)

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Load settings from the environment."""
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        currency_decimals = dict(DEFAULT_CURRENCY_DECIMALS)
        currency_decimals.update(_parse_currency_decimals(get('CURRENCY_DECIMALS', '')))

        return cls(
            default_currency=get('DEFAULT_CURRENCY', 'NZD').upper(),
            standard_tax_rate=Decimal(get('STANDARD_TAX_RATE', '15')),
            standard_tax_name=get('STANDARD_TAX_NAME', 'GST'),
            currency_decimals=currency_decimals,
            api_host=get('API_HOST', '0.0.0.0'),
            api_port=int(get('API_PORT', '8000')),
            log_level=get('LOG_LEVEL', 'INFO').upper(),
            log_json=get('LOG_JSON', 'true').lower() in ('true', '1', 'yes', 'on'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
