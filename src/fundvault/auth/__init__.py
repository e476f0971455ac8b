"""
Authorization Layer.

Typed digests, pluggable signature verification and the per-account
anti-replay authorizer.
"""

from .authorizer import Authorizer
from .digest import (
    ActionType,
    SignedPayload,
    domain_separator,
    signing_digest,
    struct_hash,
)
from .signers import EcdsaSigner, EcdsaVerifier, SignatureVerifier

__all__ = [
    "Authorizer",
    "ActionType",
    "SignedPayload",
    "domain_separator",
    "signing_digest",
    "struct_hash",
    "SignatureVerifier",
    "EcdsaVerifier",
    "EcdsaSigner",
]
