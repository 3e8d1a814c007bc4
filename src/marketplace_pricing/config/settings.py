"""
Centralized settings and path configuration for the pricing service.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_data_dir() -> Path:
    """Bundled sample data shipped with the package."""
    return Path(__file__).resolve().parent.parent / 'data'


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Marketplace data
    listings_json: Path
    commission_asset: Path
    coupons_csv: Path

    # Booking shipping quote range, in minor units
    booking_shipping_min_subunits: int = 500
    booking_shipping_max_subunits: int = 2500

    # Insurance percentage for bookings when the listing has no own config
    default_insurance_percentage: float = 5.0

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings, letting PRICING_* environment variables override defaults."""
        root = project_root or get_project_root()
        data_dir = get_data_dir()

        return cls(
            project_root=root,
            listings_json=_env_path('PRICING_LISTINGS_JSON', data_dir / 'listings.json'),
            commission_asset=_env_path('PRICING_COMMISSION_ASSET', data_dir / 'commission.json'),
            coupons_csv=_env_path('PRICING_COUPONS_CSV', data_dir / 'coupons.csv'),
            booking_shipping_min_subunits=_env_int('PRICING_BOOKING_SHIPPING_MIN', 500),
            booking_shipping_max_subunits=_env_int('PRICING_BOOKING_SHIPPING_MAX', 2500),
            default_insurance_percentage=_env_float('PRICING_INSURANCE_PERCENTAGE', 5.0),
            log_level=os.environ.get('PRICING_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
