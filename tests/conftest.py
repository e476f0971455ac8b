"""
Pytest configuration and fixtures for FundVault tests.
"""

from typing import Callable, Optional

import pytest

from fundvault.auth import ActionType, EcdsaSigner, SignedPayload
from fundvault.chain import ChainState
from fundvault.config import FundPolicyConfig, RegistryConfig
from fundvault.events import EventLog
from fundvault.ledger import ActionBody, FundLedger, ProtocolRegistry
from tests.mocks import ETH, FUND, OPERATOR, ROUTER, USD, MockRouter

GENESIS_TIME = 1_700_000_000
DAY = 24 * 60 * 60


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def registry() -> ProtocolRegistry:
    """Registry built from the default configuration."""
    return ProtocolRegistry.from_config(RegistryConfig())


@pytest.fixture
def chain(registry: ProtocolRegistry) -> ChainState:
    """Chain whose wrapped native asset is the registry base asset."""
    return ChainState(
        wrapped_asset=registry.base_asset,
        chain_id=1,
        block_number=100,
        timestamp=GENESIS_TIME,
    )


@pytest.fixture
def events(chain: ChainState) -> EventLog:
    return EventLog(clock=lambda: (chain.block_number, chain.timestamp))


@pytest.fixture
def policy() -> FundPolicyConfig:
    return FundPolicyConfig(
        management_fee_period=30 * DAY,
        grace_period_duration=30 * DAY,
        min_deposit_value=10 * USD,
        min_deposit_cooldown=DAY,
    )


@pytest.fixture
def signer() -> EcdsaSigner:
    """Off-chain signer key."""
    return EcdsaSigner.generate()


@pytest.fixture
def router() -> MockRouter:
    return MockRouter(ROUTER)


# =============================================================================
# Fund Fixtures
# =============================================================================


@pytest.fixture
def fund(
    chain: ChainState,
    registry: ProtocolRegistry,
    signer: EcdsaSigner,
    policy: FundPolicyConfig,
    router: MockRouter,
) -> FundLedger:
    """
    Initialized fund.

    The operator seeds 10 ETH valued at 10,000 USD, receiving 10,000
    shares without cooldown.
    """
    ledger = FundLedger(
        FUND,
        chain,
        registry,
        signer.signer_id,
        policy=policy,
        routers={ROUTER: router},
    )
    chain.mint_native(OPERATOR, 10 * ETH)
    ledger.initialize(OPERATOR, value=10 * ETH, usd_value=10_000 * USD)
    return ledger


@pytest.fixture
def sign(
    fund: FundLedger,
    signer: EcdsaSigner,
    chain: ChainState,
) -> Callable[..., SignedPayload]:
    """
    Sign an action body for an account at its current authorization nonce.

    Example:
        >>> payload = sign(ActionType.DEPOSIT, ALICE, body)
    """

    def _sign(
        action: ActionType,
        account: str,
        body: ActionBody,
        expires_at: Optional[int] = None,
        nonce: Optional[int] = None,
    ) -> SignedPayload:
        return signer.sign_payload(
            fund.domain_separator,
            action,
            account,
            fund.authorization_nonce(account) if nonce is None else nonce,
            body.encode(),
            chain.block_number + 10 if expires_at is None else expires_at,
        )

    return _sign
