"""
Fund Policy Configuration Model.

Timing and threshold knobs consumed by the fund ledger.
"""

from pydantic import Field

from .base import BaseConfig

DAY = 24 * 60 * 60


class FundPolicyConfig(BaseConfig):
    """
    Fund policy configuration.

    Example:
        >>> policy = FundPolicyConfig(management_fee_period=30 * DAY)
        >>> policy.grace_period_duration
        2592000
    """

    management_fee_period: int = Field(
        default=30 * DAY,
        ge=1,
        description="Seconds between management fee mints",
    )
    grace_period_duration: int = Field(
        default=30 * DAY,
        ge=0,
        description="Seconds withdrawals stay open after closure",
    )
    min_deposit_value: int = Field(
        default=10_000_000,
        ge=0,
        description="Default minimum deposit value (6-decimal valuation units)",
    )
    min_deposit_cooldown: int = Field(
        default=DAY,
        ge=0,
        description="Default seconds newly minted or received shares stay locked",
    )
