"""
Core constants and value helpers shared across FundVault.
"""

import re

from .exceptions import InvalidAddress

ZERO_ADDRESS = "0x" + "0" * 40

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Empty asset slot sentinel
NO_ASSET = ZERO_ADDRESS

MAX_ASSETS = 8
SHARE_DECIMALS = 6
BPS_DENOMINATOR = 10_000

# total_supply // 599 minted once per period leaves the admin with
# 1/600 of the post-mint supply (~2%/year at a monthly period).
MANAGEMENT_FEE_DIVISOR = 599


def is_zero_address(address: str | None) -> bool:
    """Check whether an address is empty or the zero address."""
    if not address:
        return True
    return address.lower() == ZERO_ADDRESS


def canonical_address(address: str) -> str:
    """
    Lowercase form of a hex address, the key every ledger map uses.

    Raises:
        InvalidAddress: If ``address`` is not ``0x`` followed by 40 hex digits
    """
    if not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
        raise InvalidAddress(details={"address": address})
    return address.lower()
