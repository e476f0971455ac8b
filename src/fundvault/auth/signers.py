"""
Signature schemes.

The authorizer only depends on the ``SignatureVerifier`` protocol; the
default scheme is ECDSA over secp256k1 on the prehashed SHA-256 digest.
Signer identities are compressed public keys in hex.
"""

from pathlib import Path
from typing import Optional, Protocol

from cryptography.exceptions import InvalidSignature as CryptoInvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, utils

from .digest import ActionType, SignedPayload, signing_digest

_ALGORITHM = ec.ECDSA(utils.Prehashed(hashes.SHA256()))


class SignatureVerifier(Protocol):
    """Capability checking a signature over a digest for a signer identity."""

    def verify(self, signer: str, digest: bytes, signature: bytes) -> bool:
        ...


class EcdsaVerifier:
    """secp256k1 ECDSA verifier."""

    def verify(self, signer: str, digest: bytes, signature: bytes) -> bool:
        try:
            public_key = ec.EllipticCurvePublicKey.from_encoded_point(
                ec.SECP256K1(), bytes.fromhex(signer)
            )
        except ValueError:
            return False

        try:
            public_key.verify(signature, digest, _ALGORITHM)
        except CryptoInvalidSignature:
            return False
        return True


class EcdsaSigner:
    """
    Off-chain signer producing payloads the authorizer accepts.

    Example:
        >>> signer = EcdsaSigner.generate()
        >>> payload = signer.sign_payload(
        ...     domain, ActionType.WITHDRAW, account, nonce, body, expires_at
        ... )
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        self._key = private_key

    @classmethod
    def generate(cls) -> "EcdsaSigner":
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_pem(cls, pem: bytes, password: Optional[bytes] = None) -> "EcdsaSigner":
        key = serialization.load_pem_private_key(pem, password=password)
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise ValueError("PEM does not hold an EC private key")
        return cls(key)

    @classmethod
    def from_file(cls, path: str | Path, password: Optional[bytes] = None) -> "EcdsaSigner":
        return cls.from_pem(Path(path).read_bytes(), password)

    def to_pem(self) -> bytes:
        return self._key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    @property
    def signer_id(self) -> str:
        return self._key.public_key().public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.CompressedPoint,
        ).hex()

    def sign_digest(self, digest: bytes) -> bytes:
        return self._key.sign(digest, _ALGORITHM)

    def sign_payload(
        self,
        domain: bytes,
        action: ActionType,
        account: str,
        nonce: int,
        data: bytes,
        expires_at: int,
    ) -> SignedPayload:
        digest = signing_digest(domain, action, nonce, account, data, expires_at)
        return SignedPayload(data=data, signature=self.sign_digest(digest), expires_at=expires_at)
