"""
Protocol registry collaborator.

Read-only view (from the fund's side) of the factory that deployed the
fund: protocol addresses, the global halt flag and the deposit-fee cap.
"""

from dataclasses import dataclass

from fundvault.config import RegistryConfig


@dataclass
class ProtocolRegistry:
    """
    Addresses and switches shared by every fund of the protocol.

    Attributes:
        protocol_owner: May rotate the signer, extend grace periods and
            claim abandoned funds
        admin: Receives management fee shares; may not deposit
        base_asset: Wrapped native asset held in slot 0
        protocol_vault: Receives withdrawal protocol fees
        buyback_vault: Receives buyback fees
        swap_fee_collector: Receives per-swap fees
        burn_address: Sink for abandoned funds
        halted: Global halt flag
        deposit_fee_bps: Cap on declared deposit fees, basis points
    """

    protocol_owner: str
    admin: str
    base_asset: str
    protocol_vault: str
    buyback_vault: str
    swap_fee_collector: str
    burn_address: str
    halted: bool = False
    deposit_fee_bps: int = 100

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "ProtocolRegistry":
        return cls(
            protocol_owner=config.protocol_owner,
            admin=config.admin,
            base_asset=config.base_asset,
            protocol_vault=config.protocol_vault,
            buyback_vault=config.buyback_vault,
            swap_fee_collector=config.swap_fee_collector,
            burn_address=config.burn_address,
            halted=config.halted,
            deposit_fee_bps=config.deposit_fee_bps,
        )
