"""
Custom exceptions for FundVault.

Exception hierarchy:
    FundVaultError (base)
    ├── AuthorizationError
    │   ├── ExpiredAuthorization
    │   ├── InvalidSignature
    │   ├── InvalidSigner
    │   └── SignerUnchanged
    ├── PolicyViolation
    │   ├── InvalidDepositNonce
    │   ├── UnexpectedFeeData
    │   ├── DepositBelowMinimum
    │   ├── CooldownNotExpired
    │   ├── GracePeriodEnded
    │   ├── GracePeriodNotEnded
    │   ├── InvalidGracePeriod
    │   ├── AssetIndexAlreadyOccupied
    │   ├── InvalidAssetIndex
    │   ├── InvalidSwapDirection
    │   ├── ManagementFeePeriodNotElapsed
    │   ├── FundClosed
    │   ├── FundNotClosed
    │   ├── FundHalted
    │   └── AdminCannotDeposit
    ├── InvariantViolation
    │   ├── DepositMustIncreaseTvl
    │   ├── MismatchingDepositAmount
    │   ├── InvalidTransferAmount
    │   ├── InvalidWithdrawAmount
    │   ├── InvalidAddress
    │   ├── InvalidTvl
    │   └── ZeroSharesMinted
    ├── AccessDenied
    │   ├── NotOperator
    │   ├── NotAdmin
    │   ├── NotProtocolOwner
    │   └── TransfersDisabled
    └── ExecutionError
        ├── SwapExecutionFailed
        ├── NativeTransferFailed
        ├── NoCreditAvailable
        ├── InsufficientBalance
        ├── InsufficientAllowance
        ├── MalformedPayload
        ├── ReentrantCall
        └── AlreadyInitialized
"""

from typing import Any


class FundVaultError(Exception):
    """Base exception for all fund errors."""

    default_message = "Fund operation failed"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"[{self.code}]")
        if self.details:
            parts.append(f"Details: {self.details}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )


# Authorization errors
class AuthorizationError(FundVaultError):
    """Base exception for signed-payload authorization failures."""

    default_message = "Authorization failed"


class ExpiredAuthorization(AuthorizationError):
    """Payload expiration height is below the current block height."""

    default_message = "Authorization expired"


class InvalidSignature(AuthorizationError):
    """Signature does not match the configured signer."""

    default_message = "Invalid signature"


class InvalidSigner(AuthorizationError):
    """Signer identity is empty or the zero address."""

    default_message = "Invalid signer"


class SignerUnchanged(AuthorizationError):
    """Signer rotation to the current signer."""

    default_message = "Signer unchanged"


# Policy violations
class PolicyViolation(FundVaultError):
    """Base exception for fund policy violations."""

    default_message = "Policy violation"


class InvalidDepositNonce(PolicyViolation):
    """Deposit was signed against a stale basket composition."""

    default_message = "Invalid deposit nonce"


class UnexpectedFeeData(PolicyViolation):
    """Declared deposit fees exceed the cap or lack a recipient."""

    default_message = "Unexpected fee data"


class DepositBelowMinimum(PolicyViolation):
    """Declared deposit value is below the fund minimum."""

    default_message = "Deposit below minimum value"


class CooldownNotExpired(PolicyViolation):
    """Unlocked share balance is insufficient for the movement."""

    default_message = "Cooldown not expired"


class GracePeriodEnded(PolicyViolation):
    """Withdrawal after the post-closure grace window."""

    default_message = "Grace period ended"


class GracePeriodNotEnded(PolicyViolation):
    """Abandoned funds claimed before the grace window elapsed."""

    default_message = "Grace period not ended"


class InvalidGracePeriod(PolicyViolation):
    """Grace period extension does not move the end forward."""

    default_message = "Invalid grace period"


class AssetIndexAlreadyOccupied(PolicyViolation):
    """Asset slot is held by a different asset."""

    default_message = "Asset index already occupied"


class InvalidAssetIndex(PolicyViolation):
    """Asset slot index out of range or reserved."""

    default_message = "Invalid asset index"


class InvalidSwapDirection(PolicyViolation):
    """Single swap does not have the base asset on the required leg."""

    default_message = "Invalid swap direction"


class ManagementFeePeriodNotElapsed(PolicyViolation):
    """Management fee minted again before the period elapsed."""

    default_message = "Management fee period not elapsed"


class FundClosed(PolicyViolation):
    """Operation requires an open fund."""

    default_message = "Fund is closed"


class FundNotClosed(PolicyViolation):
    """Operation requires a closed fund."""

    default_message = "Fund is not closed"


class FundHalted(PolicyViolation):
    """Protocol-wide halt flag is set."""

    default_message = "Protocol is halted"


class AdminCannotDeposit(PolicyViolation):
    """The management-fee admin may not deposit."""

    default_message = "Admin cannot deposit"


# Invariant violations
class InvariantViolation(FundVaultError):
    """Base exception for accounting invariant violations."""

    default_message = "Invariant violation"


class DepositMustIncreaseTvl(InvariantViolation):
    """Declared TVL after an asset deposit is below TVL before it."""

    default_message = "Deposit must increase TVL"


class MismatchingDepositAmount(InvariantViolation):
    """Declared net amount plus fees differs from the value supplied."""

    default_message = "Mismatching deposit amount"


class InvalidTransferAmount(InvariantViolation):
    """Share transfer of zero, above balance or to the zero address."""

    default_message = "Invalid transfer amount"


class InvalidWithdrawAmount(InvariantViolation):
    """Withdrawal shares or capital out of range."""

    default_message = "Invalid withdraw amount"


class InvalidAddress(InvariantViolation):
    """Account argument is not a 20-byte hex address."""

    default_message = "Invalid address"


class InvalidTvl(InvariantViolation):
    """Declared TVL cannot price shares."""

    default_message = "Invalid TVL"


class ZeroSharesMinted(InvariantViolation):
    """Deposit would mint no shares."""

    default_message = "Zero shares minted"


# Access errors
class AccessDenied(FundVaultError):
    """Base exception for caller-scope failures."""

    default_message = "Access denied"


class NotOperator(AccessDenied):
    """Caller is not the fund operator."""

    default_message = "Caller is not the operator"


class NotAdmin(AccessDenied):
    """Caller is not the protocol admin."""

    default_message = "Caller is not the admin"


class NotProtocolOwner(AccessDenied):
    """Caller is not the protocol owner."""

    default_message = "Caller is not the protocol owner"


class TransfersDisabled(AccessDenied):
    """Direct share transfers are disabled."""

    default_message = "Direct share transfers are disabled"


# Execution errors
class ExecutionError(FundVaultError):
    """Base exception for failures while moving value."""

    default_message = "Execution failed"


class SwapExecutionFailed(ExecutionError):
    """Router call failed."""

    default_message = "Swap execution failed"

    def __init__(
        self,
        message: str | None = None,
        reason: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
        self.reason = reason

    def __str__(self) -> str:
        base = super().__str__()
        if self.reason:
            return f"{base} (reason: {self.reason})"
        return base


class NativeTransferFailed(ExecutionError):
    """Native currency push was rejected by the recipient."""

    default_message = "Native transfer failed"


class NoCreditAvailable(ExecutionError):
    """Pull-payment withdrawal with nothing owed."""

    default_message = "No credit available"


class InsufficientBalance(ExecutionError):
    """Balance too low for the requested movement."""

    default_message = "Insufficient balance"


class InsufficientAllowance(ExecutionError):
    """Allowance too low for the requested pull."""

    default_message = "Insufficient allowance"


class MalformedPayload(ExecutionError):
    """Signed payload body could not be decoded."""

    default_message = "Malformed payload"


class ReentrantCall(ExecutionError):
    """Guarded operation entered while another is in progress."""

    default_message = "Reentrant call"


class AlreadyInitialized(ExecutionError):
    """Fund initialized twice."""

    default_message = "Fund already initialized"
