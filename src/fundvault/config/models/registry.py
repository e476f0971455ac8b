"""
Registry Configuration Model.

Addresses and protocol-wide switches supplied by the fund factory.
"""

from pydantic import Field, field_validator

from .base import BaseConfig, validate_address


class RegistryConfig(BaseConfig):
    """
    Protocol registry configuration.

    Example:
        >>> registry = RegistryConfig(
        ...     protocol_owner="${PROTOCOL_OWNER}",
        ...     deposit_fee_bps=100,
        ... )
    """

    chain_id: int = Field(default=1, ge=1, description="Chain identifier bound into signatures")
    protocol_owner: str = Field(default="0x" + "0" * 39 + "1", description="Protocol owner")
    admin: str = Field(default="0x" + "0" * 39 + "2", description="Management fee recipient")
    base_asset: str = Field(default="0x" + "0" * 39 + "3", description="Wrapped native asset")
    protocol_vault: str = Field(default="0x" + "0" * 39 + "4", description="Protocol fee vault")
    buyback_vault: str = Field(default="0x" + "0" * 39 + "5", description="Buyback fee vault")
    swap_fee_collector: str = Field(default="0x" + "0" * 39 + "6", description="Swap fee collector")
    burn_address: str = Field(default="0x" + "0" * 36 + "dead", description="Abandoned funds sink")
    halted: bool = Field(default=False, description="Global halt flag")
    deposit_fee_bps: int = Field(
        default=100,
        ge=0,
        le=10_000,
        description="Cap on declared deposit fees in basis points of the deposit",
    )

    @field_validator(
        "protocol_owner",
        "admin",
        "base_asset",
        "protocol_vault",
        "buyback_vault",
        "swap_fee_collector",
        "burn_address",
    )
    @classmethod
    def check_address(cls, v: str) -> str:
        return validate_address(v)
