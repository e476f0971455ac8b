"""
Fund Ledger.

Core orchestrator of a pooled fund: owns the fund state, the share
ledger, the cooldown book and the invested-capital ledger, and composes
the authorizer, the swap executor and the escrow helper into the public
fund operations.

Every public operation:
1. enters the re-entrancy guard,
2. opens an atomic scope over all state (including chain balances and
   authorization nonces),
3. verifies the signed payload where the operation is payload-gated,
4. validates and mutates state,
5. commits its events only if nothing raised.
"""

from contextlib import contextmanager
from typing import Dict, Generator, List, Optional, Sequence

from fundvault.auth import ActionType, Authorizer, SignatureVerifier, SignedPayload
from fundvault.chain import ChainState
from fundvault.config import ConfigValidationError, FundPolicyConfig
from fundvault.core import (
    BPS_DENOMINATOR,
    MANAGEMENT_FEE_DIVISOR,
    MAX_ASSETS,
    NO_ASSET,
    canonical_address,
    get_audit_logger,
    get_logger,
    is_zero_address,
    set_correlation_id,
)
from fundvault.core.exceptions import (
    AdminCannotDeposit,
    AlreadyInitialized,
    AssetIndexAlreadyOccupied,
    DepositBelowMinimum,
    DepositMustIncreaseTvl,
    FundClosed,
    FundHalted,
    FundNotClosed,
    FundVaultError,
    GracePeriodEnded,
    GracePeriodNotEnded,
    InvalidAssetIndex,
    InvalidDepositNonce,
    InvalidGracePeriod,
    InvalidSwapDirection,
    InvalidTransferAmount,
    InvalidTvl,
    InvalidWithdrawAmount,
    ManagementFeePeriodNotElapsed,
    MismatchingDepositAmount,
    NotAdmin,
    NotOperator,
    NotProtocolOwner,
    UnexpectedFeeData,
    ZeroSharesMinted,
)
from fundvault.events import (
    AbandonedFundsClaimed,
    AssetsUpdated,
    CapitalTransferred,
    Closed,
    Deposited,
    DepositedAsset,
    EventLog,
    EventRecord,
    EventSink,
    GracePeriodExtended,
    ManagementFeeMinted,
    MinUserDepositCooldownUpdated,
    MinUserDepositValueUpdated,
    OwnershipTransferred,
    Rebalanced,
    Withdrawn,
)

from .actions import (
    AssetDepositAction,
    AssetUpdate,
    CloseAction,
    DepositAction,
    RebalanceAction,
    SingleSwapAction,
    WithdrawAction,
)
from .cooldown import CooldownBook
from .escrow import Escrow
from .registry import ProtocolRegistry
from .shares import ShareLedger
from .state import FundState
from .swaps import SwapExecutor, SwapResult, SwapRouter
from .transaction import AtomicScope, OperationGuard

logger = get_logger(__name__)


class FundLedger:
    """
    Pooled fund with signer-gated operations.

    Example:
        >>> fund = FundLedger(fund_address, chain, registry, signer.signer_id)
        >>> fund.initialize(operator, value=10 * 10**18, usd_value=10_000)
        >>> payload = signer.sign_payload(
        ...     fund.domain_separator, ActionType.DEPOSIT, alice,
        ...     fund.authorization_nonce(alice), body.encode(), expires_at,
        ... )
        >>> fund.deposit(alice, value, payload)
    """

    def __init__(
        self,
        address: str,
        chain: ChainState,
        registry: ProtocolRegistry,
        signer: str,
        policy: Optional[FundPolicyConfig] = None,
        name: str = "FundVault Share",
        symbol: str = "FVS",
        verifier: Optional[SignatureVerifier] = None,
        routers: Optional[Dict[str, SwapRouter]] = None,
        sinks: Optional[Sequence[EventSink]] = None,
    ):
        if registry.base_asset.lower() != chain.wrapped_asset.lower():
            raise ConfigValidationError(
                [
                    f"registry base asset {registry.base_asset} differs from "
                    f"chain wrapped asset {chain.wrapped_asset}"
                ]
            )

        address = canonical_address(address)
        self.address = address
        self._chain = chain
        self._registry = registry
        self._policy = policy or FundPolicyConfig()

        self._events = EventLog(
            clock=lambda: (chain.block_number, chain.timestamp),
            sinks=list(sinks or []),
        )
        self._state = FundState()
        self._shares = ShareLedger(name, symbol, self._events)
        self._cooldowns = CooldownBook()
        self._escrow = Escrow(chain, address, self._events)
        self._swaps = SwapExecutor(
            chain=chain,
            holder=address,
            escrow=self._escrow,
            events=self._events,
            fee_collector=registry.swap_fee_collector,
            routers=dict(routers or {}),
        )
        self._authorizer = Authorizer(
            signer=signer,
            chain=chain,
            verifying_contract=address,
            protocol_owner=registry.protocol_owner,
            events=self._events,
            verifier=verifier,
        )

        self._guard = OperationGuard()
        self._scope = AtomicScope(
            [
                self._state,
                self._shares,
                self._cooldowns,
                self._authorizer,
                self._escrow,
                self._chain,
                self._events,
            ]
        )
        self._audit = get_audit_logger("fund")

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def state(self) -> FundState:
        return self._state

    @property
    def shares(self) -> ShareLedger:
        return self._shares

    @property
    def authorizer(self) -> Authorizer:
        return self._authorizer

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def event_records(self) -> List[EventRecord]:
        return list(self._events.records)

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def assets(self) -> List[str]:
        return list(self._state.assets)

    @property
    def nonce(self) -> int:
        return self._state.nonce

    @property
    def decimals(self) -> int:
        return self._shares.decimals

    @property
    def total_supply(self) -> int:
        return self._shares.total_supply

    @property
    def domain_separator(self) -> bytes:
        return self._authorizer.domain_separator

    def balance_of(self, account: str) -> int:
        account = canonical_address(account)
        return self._shares.balance_of(account)

    def invested_capital(self, account: str) -> int:
        account = canonical_address(account)
        return self._state.capital_of(account)

    def locked_balance(self, account: str) -> int:
        account = canonical_address(account)
        locked, _ = self._cooldowns.locked_balance(account, self._chain.timestamp)
        return locked

    def unlocked_balance(self, account: str) -> int:
        return self.balance_of(account) - self.locked_balance(account)

    def authorization_nonce(self, account: str) -> int:
        account = canonical_address(account)
        return self._authorizer.nonce_of(account)

    def credit_of(self, account: str) -> int:
        account = canonical_address(account)
        return self._escrow.credit_of(account)

    def register_router(self, address: str, router: SwapRouter) -> None:
        self._swaps.register_router(address, router)

    # =========================================================================
    # Operation scope
    # =========================================================================

    @contextmanager
    def _operation(self, name: str) -> Generator[None, None, None]:
        with self._guard.enter(name):
            set_correlation_id()
            try:
                with self._scope.run(name):
                    yield
            except FundVaultError as e:
                self._audit.operation_failed(name, e)
                logger.warning(f"{name} reverted: {e}")
                raise
            self._events.commit()

    # =========================================================================
    # Guards
    # =========================================================================

    def _only_operator(self, sender: str) -> None:
        if sender != self._state.owner:
            raise NotOperator(details={"caller": sender})

    def _only_protocol_owner(self, sender: str) -> None:
        if sender != self._registry.protocol_owner:
            raise NotProtocolOwner(details={"caller": sender})

    def _require_open(self) -> None:
        if not self._state.is_open:
            raise FundClosed()

    def _require_not_halted(self) -> None:
        if self._registry.halted:
            raise FundHalted()

    def _require_closed(self) -> None:
        if self._state.is_open or not self._state.initialized:
            raise FundNotClosed()

    # =========================================================================
    # Share helpers
    # =========================================================================

    def _mint_locked(self, account: str, amount: int) -> None:
        self._shares.mint(account, amount)
        self._cooldowns.apply_lock(
            account,
            amount,
            self._chain.timestamp + self._state.min_deposit_cooldown,
        )

    def _burn(self, account: str, amount: int) -> None:
        self._cooldowns.enforce(
            account, self._shares.balance_of(account), amount, self._chain.timestamp
        )
        self._shares.burn(account, amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._cooldowns.enforce(
            sender, self._shares.balance_of(sender), amount, self._chain.timestamp
        )
        self._shares.move(sender, recipient, amount)
        self._cooldowns.apply_lock(
            recipient,
            amount,
            self._chain.timestamp + self._state.min_deposit_cooldown,
        )

    def _shares_for(self, value: int, tvl_before: int) -> int:
        supply = self._shares.total_supply
        if supply == 0:
            return value
        if tvl_before == 0:
            raise InvalidTvl(details={"total_supply": supply, "tvl_before": tvl_before})
        return value * supply // tvl_before

    # =========================================================================
    # Asset slots
    # =========================================================================

    def _apply_asset_updates(self, updates: Sequence[AssetUpdate]) -> None:
        if not updates:
            return
        for update in updates:
            if update.index == 0 or update.index >= MAX_ASSETS:
                raise InvalidAssetIndex(details={"index": update.index})
            self._state.assets[update.index] = update.asset
        self._events.emit(AssetsUpdated(assets=tuple(self._state.assets)))

    def _occupy_slot(self, index: int, asset: str) -> None:
        if index >= MAX_ASSETS or is_zero_address(asset):
            raise InvalidAssetIndex(details={"index": index, "asset": asset})
        if index == 0 and asset != self._registry.base_asset:
            raise InvalidAssetIndex(details={"index": index, "asset": asset})

        current = self._state.assets[index]
        if current == NO_ASSET:
            self._state.assets[index] = asset
            self._events.emit(AssetsUpdated(assets=tuple(self._state.assets)))
        elif current != asset:
            raise AssetIndexAlreadyOccupied(
                details={"index": index, "current": current, "asset": asset}
            )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(
        self,
        operator: str,
        value: int,
        usd_value: int,
        buyback_fee: int = 0,
    ) -> int:
        """
        One-time setup with the operator's seed deposit.

        ``value`` native currency is taken from the operator; the buyback
        fee is forwarded and the rest wrapped into the base asset.
        ``usd_value`` shares are minted to the operator without cooldown.

        Returns:
            Shares minted
        """
        with self._operation("initialize"):
            operator = canonical_address(operator)
            if self._state.initialized:
                raise AlreadyInitialized()
            if buyback_fee > value:
                raise MismatchingDepositAmount(
                    details={"value": value, "buyback_fee": buyback_fee}
                )
            if usd_value <= 0:
                raise ZeroSharesMinted()

            self._chain.send_native(operator, self.address, value)
            self._escrow.push_or_credit(self._registry.buyback_vault, buyback_fee)
            self._chain.wrap(self.address, value - buyback_fee)

            state = self._state
            state.initialized = True
            state.is_open = True
            state.owner = operator
            state.assets[0] = self._registry.base_asset
            state.min_deposit_value = self._policy.min_deposit_value
            state.min_deposit_cooldown = self._policy.min_deposit_cooldown
            state.latest_fee_mint_time = self._chain.timestamp
            state.total_value = usd_value

            self._shares.mint(operator, usd_value)
            state.add_capital(operator, usd_value)

            self._events.emit(AssetsUpdated(assets=tuple(state.assets)))
            self._events.emit(
                Deposited(
                    account=operator,
                    value=value,
                    deposit_value=usd_value,
                    shares=usd_value,
                    protocol_fee=0,
                    buyback_fee=buyback_fee,
                    nonce=state.nonce,
                )
            )

        logger.info(f"Fund {self.address} initialized by {operator} with {usd_value} shares")
        return usd_value

    def close(self, sender: str, payload: SignedPayload) -> None:
        """Close the fund, open the grace window and run liquidation swaps."""
        with self._operation("close"):
            sender = canonical_address(sender)
            self._authorizer.verify(ActionType.CLOSE, sender, payload)
            action = CloseAction.decode(payload.data)
            self._only_operator(sender)
            self._require_open()

            self._state.is_open = False
            self._state.grace_period_end = (
                self._chain.timestamp + self._policy.grace_period_duration
            )
            self._swaps.execute_all(list(action.swaps))

            self._events.emit(Closed(grace_period_end=self._state.grace_period_end))

        logger.info(f"Fund {self.address} closed, grace period ends {self._state.grace_period_end}")

    def extend_grace_period(self, sender: str, new_end: int) -> None:
        with self._operation("extend_grace_period"):
            sender = canonical_address(sender)
            self._only_protocol_owner(sender)
            self._require_closed()
            if new_end <= self._state.grace_period_end:
                raise InvalidGracePeriod(
                    details={"current": self._state.grace_period_end, "requested": new_end}
                )
            self._state.grace_period_end = new_end
            self._events.emit(GracePeriodExtended(grace_period_end=new_end))

    def claim_abandoned_funds(self, sender: str) -> int:
        """
        Sweep what is left after the grace period to the burn address.

        Escrow credits stay claimable. Returns the native amount swept.
        """
        with self._operation("claim_abandoned_funds"):
            sender = canonical_address(sender)
            self._only_protocol_owner(sender)
            self._require_closed()
            if self._chain.timestamp <= self._state.grace_period_end:
                raise GracePeriodNotEnded(
                    details={"grace_period_end": self._state.grace_period_end}
                )

            burn = self._registry.burn_address
            base = self._registry.base_asset

            base_balance = self._chain.balance_of(base, self.address)
            if base_balance:
                self._chain.unwrap(self.address, base_balance)

            swept = self._chain.native_balance(self.address) - self._escrow.total_credits
            if swept > 0:
                self._chain.send_native(self.address, burn, swept)
            else:
                swept = 0

            for asset in self._state.assets[1:]:
                if asset == NO_ASSET:
                    continue
                balance = self._chain.balance_of(asset, self.address)
                if balance:
                    self._chain.transfer_token(asset, self.address, burn, balance)

            self._events.emit(AbandonedFundsClaimed(recipient=burn, amount=swept))

        logger.info(f"Abandoned funds of {self.address} swept: {swept}")
        return swept

    # =========================================================================
    # Deposits
    # =========================================================================

    def deposit(self, sender: str, value: int, payload: SignedPayload) -> int:
        """
        Depositor contribution of ``value`` native currency.

        Returns:
            Shares minted
        """
        with self._operation("deposit"):
            sender = canonical_address(sender)
            self._authorizer.verify(ActionType.DEPOSIT, sender, payload)
            action = DepositAction.decode(payload.data)
            self._require_open()
            self._require_not_halted()
            if sender == self._registry.admin:
                raise AdminCannotDeposit(details={"caller": sender})

            if action.nonce != self._state.nonce:
                raise InvalidDepositNonce(
                    details={"expected": self._state.nonce, "received": action.nonce}
                )

            fees = action.protocol_fee + action.buyback_fee
            if fees * BPS_DENOMINATOR > value * self._registry.deposit_fee_bps:
                raise UnexpectedFeeData(
                    details={"fees": fees, "value": value, "cap_bps": self._registry.deposit_fee_bps}
                )
            if action.protocol_fee > 0 and is_zero_address(action.fee_recipient):
                raise UnexpectedFeeData(details={"fee_recipient": action.fee_recipient})

            if action.net_amount + fees != value:
                raise MismatchingDepositAmount(
                    details={"net_amount": action.net_amount, "fees": fees, "value": value}
                )
            if action.deposit_value < self._state.min_deposit_value:
                raise DepositBelowMinimum(
                    details={
                        "deposit_value": action.deposit_value,
                        "minimum": self._state.min_deposit_value,
                    }
                )

            self._chain.send_native(sender, self.address, value)
            self._chain.wrap(self.address, action.net_amount)
            self._swaps.execute_all(list(action.swaps))

            minted = self._shares_for(action.deposit_value, action.tvl_before)
            if minted == 0:
                raise ZeroSharesMinted(details={"deposit_value": action.deposit_value})
            self._mint_locked(sender, minted)
            self._state.add_capital(sender, action.deposit_value)
            self._state.total_value = action.tvl_before + action.deposit_value

            self._escrow.push_or_credit(action.fee_recipient, action.protocol_fee)
            self._escrow.push_or_credit(self._registry.buyback_vault, action.buyback_fee)

            self._events.emit(
                Deposited(
                    account=sender,
                    value=value,
                    deposit_value=action.deposit_value,
                    shares=minted,
                    protocol_fee=action.protocol_fee,
                    buyback_fee=action.buyback_fee,
                    nonce=action.nonce,
                )
            )

        logger.info(f"Deposit by {sender}: {action.deposit_value} value, {minted} shares")
        return minted

    def deposit_asset(self, sender: str, payload: SignedPayload) -> int:
        """
        Operator deposit of a basket asset pulled through allowance.

        Returns:
            Shares minted
        """
        with self._operation("deposit_asset"):
            sender = canonical_address(sender)
            self._authorizer.verify(ActionType.ASSET_DEPOSIT, sender, payload)
            action = AssetDepositAction.decode(payload.data)
            self._only_operator(sender)
            self._require_open()
            self._require_not_halted()

            self._occupy_slot(action.asset_index, action.asset)
            if action.tvl_after < action.tvl_before:
                raise DepositMustIncreaseTvl(
                    details={"tvl_before": action.tvl_before, "tvl_after": action.tvl_after}
                )

            self._chain.transfer_token_from(
                action.asset, self.address, sender, self.address, action.amount
            )

            value_delta = action.tvl_after - action.tvl_before
            minted = self._shares_for(value_delta, action.tvl_before)
            if minted:
                self._mint_locked(sender, minted)
            self._state.add_capital(sender, value_delta)
            self._state.total_value = action.tvl_after

            self._events.emit(
                DepositedAsset(
                    account=sender,
                    asset=action.asset,
                    asset_index=action.asset_index,
                    amount=action.amount,
                    value_delta=value_delta,
                    shares=minted,
                )
            )

        logger.info(f"Asset deposit of {action.amount} {action.asset} into slot {action.asset_index}")
        return minted

    # =========================================================================
    # Swaps
    # =========================================================================

    def swap_tokens_for_eth(self, sender: str, payload: SignedPayload) -> SwapResult:
        """Single swap selling a basket asset into the base asset."""
        return self._single_swap(sender, payload, ActionType.SWAP_TOKENS_FOR_ETH, to_base=True)

    def swap_eth_for_tokens(self, sender: str, payload: SignedPayload) -> SwapResult:
        """Single swap buying a basket asset with the base asset."""
        return self._single_swap(sender, payload, ActionType.SWAP_ETH_FOR_TOKENS, to_base=False)

    def _single_swap(
        self,
        sender: str,
        payload: SignedPayload,
        action_type: ActionType,
        to_base: bool,
    ) -> SwapResult:
        with self._operation(action_type.value):
            sender = canonical_address(sender)
            self._authorizer.verify(action_type, sender, payload)
            action = SingleSwapAction.decode(payload.data)
            self._only_operator(sender)
            self._require_open()
            self._require_not_halted()

            swap = action.swap
            base = self._registry.base_asset
            base_leg = swap.token_out if to_base else swap.token_in
            if base_leg != base:
                raise InvalidSwapDirection(
                    details={"token_in": swap.token_in, "token_out": swap.token_out}
                )

            self._apply_asset_updates(action.asset_updates)
            result = self._swaps.execute(swap)
            self._state.nonce += 1

        return result

    def rebalance(self, sender: str, payload: SignedPayload) -> List[SwapResult]:
        with self._operation("rebalance"):
            sender = canonical_address(sender)
            self._authorizer.verify(ActionType.REBALANCE, sender, payload)
            action = RebalanceAction.decode(payload.data)
            self._only_operator(sender)
            self._require_open()
            self._require_not_halted()

            self._apply_asset_updates(action.asset_updates)
            results = self._swaps.execute_all(list(action.swaps))
            self._state.nonce += 1

            self._events.emit(Rebalanced(nonce=self._state.nonce))

        logger.info(f"Rebalanced with {len(results)} swaps, nonce now {self._state.nonce}")
        return results

    # =========================================================================
    # Withdrawals
    # =========================================================================

    def withdraw(self, sender: str, payload: SignedPayload) -> int:
        """
        Redeem shares for native currency.

        Fees are only unwrapped and paid when the declared gross PnL is
        positive. Returns the net amount paid to the caller.
        """
        with self._operation("withdraw"):
            sender = canonical_address(sender)
            self._authorizer.verify(ActionType.WITHDRAW, sender, payload)
            action = WithdrawAction.decode(payload.data)
            if not self._state.is_open and self._chain.timestamp > self._state.grace_period_end:
                raise GracePeriodEnded(
                    details={"grace_period_end": self._state.grace_period_end}
                )

            balance = self._shares.balance_of(sender)
            if action.shares == 0 or action.shares > balance:
                raise InvalidWithdrawAmount(
                    details={"shares": action.shares, "balance": balance}
                )
            if action.capital > self._state.capital_of(sender):
                raise InvalidWithdrawAmount(
                    details={"capital": action.capital, "invested": self._state.capital_of(sender)}
                )

            self._burn(sender, action.shares)
            self._state.remove_capital(sender, action.capital)
            self._swaps.execute_all(list(action.swaps))

            if action.gross_pnl <= 0:
                protocol_fee = 0
                guru_fee = 0
                self._chain.unwrap(self.address, action.net_output)
            else:
                protocol_fee = action.protocol_fee
                guru_fee = action.guru_fee
                self._chain.unwrap(
                    self.address, action.net_output + protocol_fee + guru_fee
                )
                self._escrow.push_or_credit(self._registry.protocol_vault, protocol_fee)
                self._escrow.push_or_credit(self._state.owner, guru_fee)
            self._escrow.push_or_credit(sender, action.net_output)

            self._events.emit(
                Withdrawn(
                    account=sender,
                    shares=action.shares,
                    capital=action.capital,
                    net_output=action.net_output,
                    protocol_fee=protocol_fee,
                    guru_fee=guru_fee,
                    gross_pnl=action.gross_pnl,
                )
            )

        logger.info(f"Withdrawal by {sender}: {action.shares} shares for {action.net_output}")
        return action.net_output

    def withdraw_credit(self, sender: str, to: str) -> int:
        """Pull escrowed native credit owed to ``sender``."""
        with self._operation("withdraw_credit"):
            sender = canonical_address(sender)
            to = canonical_address(to)
            amount = self._escrow.withdraw_credit(sender, to)
        return amount

    # =========================================================================
    # Management fee
    # =========================================================================

    def mint_management_fee(self, sender: str) -> int:
        """
        Mint the periodic management fee to the admin.

        ``total_supply // 599`` shares, exempt from cooldown.
        """
        with self._operation("mint_management_fee"):
            sender = canonical_address(sender)
            if sender != self._registry.admin:
                raise NotAdmin(details={"caller": sender})
            self._require_open()

            next_mint = self._state.latest_fee_mint_time + self._policy.management_fee_period
            if self._chain.timestamp < next_mint:
                raise ManagementFeePeriodNotElapsed(
                    details={"next_mint_time": next_mint, "now": self._chain.timestamp}
                )

            amount = self._shares.total_supply // MANAGEMENT_FEE_DIVISOR
            self._shares.mint(sender, amount)
            self._state.latest_fee_mint_time = self._chain.timestamp

            self._events.emit(
                ManagementFeeMinted(
                    recipient=sender,
                    amount=amount,
                    timestamp=self._chain.timestamp,
                )
            )

        logger.info(f"Management fee minted: {amount} shares")
        return amount

    # =========================================================================
    # Share transfers
    # =========================================================================

    def transfer_shares(self, sender: str, to: str, amount: int) -> int:
        """
        Move shares together with a proportional slice of invested capital.

        The recipient's shares lock for the deposit cooldown, so transfers
        to the sender itself are rejected.

        Returns:
            Capital moved
        """
        with self._operation("transfer_shares"):
            sender = canonical_address(sender)
            to = canonical_address(to)
            moved = self._transfer_with_capital(sender, to, amount)
        return moved

    def _transfer_with_capital(self, sender: str, to: str, amount: int) -> int:
        balance = self._shares.balance_of(sender)
        if is_zero_address(to) or to == sender or amount == 0 or amount > balance:
            raise InvalidTransferAmount(
                details={"to": to, "amount": amount, "balance": balance}
            )

        moved = amount * self._state.capital_of(sender) // balance
        self._state.remove_capital(sender, moved)
        self._state.add_capital(to, moved)
        self._move(sender, to, amount)

        self._events.emit(CapitalTransferred(sender=sender, recipient=to, amount=moved))
        return moved

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._shares.transfer(sender, recipient, amount)

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> None:
        self._shares.transfer_from(spender, sender, recipient, amount)

    def transfer_ownership(self, sender: str, new_owner: str) -> None:
        """Hand the fund to ``new_owner`` along with the operator's shares."""
        with self._operation("transfer_ownership"):
            sender = canonical_address(sender)
            new_owner = canonical_address(new_owner)
            self._only_operator(sender)
            if is_zero_address(new_owner):
                raise InvalidTransferAmount(details={"new_owner": new_owner})

            balance = self._shares.balance_of(sender)
            if balance:
                self._transfer_with_capital(sender, new_owner, balance)
            self._state.owner = new_owner

            self._events.emit(OwnershipTransferred(previous_owner=sender, new_owner=new_owner))

        logger.info(f"Ownership of {self.address} transferred to {new_owner}")

    # =========================================================================
    # Policy knobs
    # =========================================================================

    def set_min_deposit_value(self, sender: str, value: int) -> None:
        with self._operation("set_min_deposit_value"):
            sender = canonical_address(sender)
            self._only_operator(sender)
            self._require_open()
            if value < 0:
                raise ValueError("min deposit value cannot be negative")
            old = self._state.min_deposit_value
            self._state.min_deposit_value = value
            self._events.emit(MinUserDepositValueUpdated(old_value=old, new_value=value))

    def set_min_deposit_cooldown(self, sender: str, cooldown: int) -> None:
        with self._operation("set_min_deposit_cooldown"):
            sender = canonical_address(sender)
            self._only_operator(sender)
            self._require_open()
            if cooldown < 0:
                raise ValueError("min deposit cooldown cannot be negative")
            old = self._state.min_deposit_cooldown
            self._state.min_deposit_cooldown = cooldown
            self._events.emit(
                MinUserDepositCooldownUpdated(old_cooldown=old, new_cooldown=cooldown)
            )

    # =========================================================================
    # Signer
    # =========================================================================

    def update_signer(self, sender: str, new_signer: str) -> None:
        with self._operation("update_signer"):
            sender = canonical_address(sender)
            self._authorizer.update_signer(sender, new_signer)
