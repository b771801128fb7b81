"""
Trip Configuration Module

Holds the per-trip settings the balance engine needs: which entities are
tracked, the base currency, and the exchange rates into that currency.

Environment defaults:
    TRIP_DEFAULT_CURRENCY - base currency code (default: EUR)
    TRIP_TRACKING_MODE    - individuals or families (default: individuals)
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


TrackingMode = Literal["individuals", "families"]

TRACKING_MODES = {"individuals", "families"}

DEFAULT_CURRENCY: str = os.getenv("TRIP_DEFAULT_CURRENCY", "EUR").strip().upper() or "EUR"
DEFAULT_TRACKING_MODE: str = os.getenv("TRIP_TRACKING_MODE", "individuals").strip().lower()

if DEFAULT_TRACKING_MODE not in TRACKING_MODES:
    DEFAULT_TRACKING_MODE = "individuals"


def normalize_currency_code(code: str) -> str:
    """Currency codes are compared upper-cased everywhere."""
    return code.strip().upper()


class TripConfig(BaseModel):
    """
    Trip-level settings consumed by the balance engine.

    Attributes:
        tracking_mode: Whether balances are kept per participant or per family.
        default_currency: Base currency all totals are expressed in.
        exchange_rates: Units of a foreign currency per one unit of the base
            currency, e.g. {"THB": 38.5}.
    """

    tracking_mode: TrackingMode = Field(default=DEFAULT_TRACKING_MODE)
    default_currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)
    exchange_rates: dict[str, float] = Field(default_factory=dict)

    @field_validator("default_currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return normalize_currency_code(value)

    @field_validator("exchange_rates")
    @classmethod
    def _upper_rate_codes(cls, value: dict[str, float]) -> dict[str, float]:
        return {normalize_currency_code(code): rate for code, rate in value.items()}


def load_trip_config(data: Optional[dict] = None) -> TripConfig:
    """Build a TripConfig from a raw trip record, falling back to env defaults."""
    return TripConfig.model_validate(data or {})
