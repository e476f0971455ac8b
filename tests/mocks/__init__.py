# Mock classes for testing
"""Mock routers, verifiers and well-known accounts for testing."""

from .accounts import (
    ALICE,
    BOB,
    CAROL,
    ETH,
    FEE_RECIPIENT,
    FUND,
    OPERATOR,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    USD,
    address,
)
from .router_mock import MockRouter
from .verifier_mock import StubSigner, StubVerifier

__all__ = [
    "MockRouter",
    "StubSigner",
    "StubVerifier",
    "address",
    "ETH",
    "USD",
    "FUND",
    "ROUTER",
    "OPERATOR",
    "ALICE",
    "BOB",
    "CAROL",
    "FEE_RECIPIENT",
    "TOKEN_A",
    "TOKEN_B",
]
