"""
Configuration Management for Trip Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tolerances and policies live here.
The engine never hard-codes an epsilon or a rounding policy, so a
deployment can tighten or relax them without touching the math.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Ledger computation settings.

    Loads configuration from environment variables and .env file.
    All money-related values are in MINOR units (e.g. cents).
    """

    model_config = SettingsConfigDict(
        env_prefix="TRIPLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Currency
    reference_currency: str = Field(
        default="HKD",
        min_length=3,
        max_length=3,
        description="ISO code of the currency all balances are kept in"
    )
    minor_unit_digits: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Number of decimal digits in one major unit"
    )

    # Tolerances
    settlement_epsilon_minor: int = Field(
        default=0,
        ge=0,
        description="Balances within this many minor units of zero count as settled"
    )
    split_tolerance_minor: int = Field(
        default=1,
        ge=0,
        description="Residual a custom split draft may carry; folded into the largest share"
    )

    # Policies
    allow_mixed_splits: bool = Field(
        default=False,
        description="Admit expenses mixing equal and custom shares"
    )
    unknown_member_policy: Literal["reject", "skip"] = Field(
        default="reject",
        description="What the balance calculator does with unknown member ids"
    )

    @field_validator('reference_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
