"""oraclevault.vault

The vault: one object owning every piece of state, one method per entry point.

Entry points that move funds (mint, burn, populate, retract, withdraw, rebalance)
hold the re-entrancy guard and run in an atomic scope. Fees are accrued first,
journal events are written last. If anything in between raises, every
checkpointable participant is restored and the error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from oraclevault.accounting.fees import FeeAccrualEngine, FeeState
from oraclevault.accounting.shares import ShareAccounting, ShareLedger
from oraclevault.core.atomic import ReentrancyGuard, atomic
from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.events import EventType
from oraclevault.core.exceptions import (
    BurnSlippageExceeded,
    ExternalCallError,
    InsufficientBalance,
    SlippageExceeded,
    ValidationError,
    ZeroAmount,
)
from oraclevault.core.interfaces import Strategy, Token
from oraclevault.core.time import unix_now
from oraclevault.core.types import Distribution, MintQuote, Side, StrategyParams, VaultPosition, normalize_address
from oraclevault.execution.address_book import AddressBook
from oraclevault.execution.position import PositionValidator
from oraclevault.execution.rebalance import RebalanceGuard, RebalanceOrder, RebalanceResult
from oraclevault.execution.strategy import StrategyLink
from oraclevault.governance.oracle import OracleConfig, OracleEngine
from oraclevault.governance.roles import Permission, Role, RoleRegistry
from oraclevault.governance.whitelist import Whitelist, WhitelistEntry

logger = logging.getLogger(__name__)


class OracleVault:
    def __init__(
        self,
        *,
        base: Token,
        quote: Token,
        strategy: Strategy,
        oracle_config: OracleConfig,
        owner: str,
        guardian: str,
        manager: str,
        fee_recipient: str | None = None,
        address: str = "0xvault",
        config: Config | None = None,
        address_book: AddressBook | None = None,
        journal: Database | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self.config = config or Config()
        self.address = normalize_address(address)
        self.base = base
        self.quote = quote
        self.strategy = strategy
        self.journal = journal
        self.clock = clock
        self.address_book = address_book or AddressBook()

        self.roles = RoleRegistry(owner=owner, guardian=guardian, manager=manager)
        self.oracle = OracleEngine(oracle_config, roles=self.roles, clock=clock)
        self.whitelist = Whitelist(
            roles=self.roles,
            clock=clock,
            timelock_seconds=lambda: self.oracle.config.timelock_seconds,
            forbidden=(strategy.address, base.address, quote.address),
        )
        self.ledger = ShareLedger()
        self.fees = FeeAccrualEngine(
            FeeState(
                annual_rate=int(self.config.fees.default_annual_rate),
                fee_recipient=fee_recipient or owner,
                last_accrual=int(clock()),
            ),
            ledger=self.ledger,
            roles=self.roles,
            max_annual_rate=int(self.config.fees.max_annual_rate),
        )
        self.accounting = ShareAccounting(
            settings=self.config.vault,
            oracle_tick=self.oracle.current_tick,
            within_band=lambda tick, ref: self.oracle.within_band(tick, oracle_tick=ref),
        )
        self.validator = PositionValidator(self.oracle)
        self.link = StrategyLink(vault_address=self.address, base=base, quote=quote, strategy=strategy)
        self.rebalancer = RebalanceGuard(
            link=self.link,
            oracle=self.oracle,
            whitelist=self.whitelist,
            address_book=self.address_book,
        )
        self._guard = ReentrancyGuard()
        self._pending_events: list[tuple[EventType, dict[str, Any]]] = []

    # -----------------
    # Plumbing
    # -----------------

    def _participants(self) -> list[Any]:
        return [
            self,
            self.roles,
            self.oracle,
            self.whitelist,
            self.ledger,
            self.fees,
            self.accounting,
            self.link,
            self.base,
            self.quote,
            self.strategy,
        ]

    def checkpoint(self) -> list[tuple[EventType, dict[str, Any]]]:
        return list(self._pending_events)

    def rollback(self, checkpoint: list[tuple[EventType, dict[str, Any]]]) -> None:
        self._pending_events = list(checkpoint)

    @contextmanager
    def _transition(self, name: str, *, guarded: bool = True) -> Iterator[None]:
        if guarded:
            with self._guard.hold(name), atomic(self._participants(), name=name):
                yield
                self._flush_events()
        else:
            with atomic(self._participants(), name=name):
                yield
                self._flush_events()

    def _emit(self, event_type: EventType, payload: dict[str, Any]) -> None:
        self._pending_events.append((event_type, payload))

    def _flush_events(self) -> None:
        events, self._pending_events = self._pending_events, []
        if self.journal is not None and events:
            self.journal.append_events(events, source=f"vault:{self.address}")

    def _accrue(self) -> None:
        res = self.fees.accrue(int(self.clock()))
        if res.shares > 0:
            self._emit(
                EventType.FEES_ACCRUED_V1,
                {"shares": res.shares, "elapsed": res.elapsed, "recipient": res.recipient},
            )

    def _pull(self, token: Token, frm: str, amount: int) -> None:
        if amount <= 0:
            return
        before = token.balance_of(self.address)
        token.transfer_from(self.address, frm, self.address, amount)
        got = token.balance_of(self.address) - before
        if got != amount:
            raise ExternalCallError(f"{token.address}: expected {amount} in, measured {got}")

    def _push(self, token: Token, to: str, amount: int) -> None:
        if amount <= 0:
            return
        before = token.balance_of(self.address)
        token.transfer(self.address, to, amount)
        gone = before - token.balance_of(self.address)
        if gone != amount:
            raise ExternalCallError(f"{token.address}: expected {amount} out, measured {gone}")

    # -----------------
    # Views
    # -----------------

    def position(self) -> VaultPosition:
        lb, lq = self.link.local_balances()
        sb, sq = self.link.strategy_balances()
        return VaultPosition(
            local_base=lb,
            local_quote=lq,
            strategy_base=sb,
            strategy_quote=sq,
            total_shares=self.ledger.total_supply,
        )

    def total_balances(self) -> tuple[int, int]:
        p = self.position()
        return p.total_base, p.total_quote

    def total_supply(self) -> int:
        return self.ledger.total_supply

    def share_balance(self, holder: str) -> int:
        return self.ledger.balance_of(holder)

    def fee_state(self) -> FeeState:
        return self.fees.state

    def current_tick(self) -> int:
        return self.oracle.current_tick()

    def oracle_config(self) -> OracleConfig:
        return self.oracle.config

    def pending_oracle(self) -> OracleConfig | None:
        return self.oracle.pending

    def whitelist_entry(self, target: str) -> WhitelistEntry:
        return self.whitelist.entry(target)

    def _position_after_fees(self) -> VaultPosition:
        p = self.position()
        pending = self.fees.pending_shares(int(self.clock()))
        if pending == 0:
            return p
        return VaultPosition(
            local_base=p.local_base,
            local_quote=p.local_quote,
            strategy_base=p.strategy_base,
            strategy_quote=p.strategy_quote,
            total_shares=p.total_shares + pending,
        )

    def preview_mint(self, max_base: int, max_quote: int) -> MintQuote:
        """What ``mint`` would do right now, fees included."""

        return self.accounting.shares_for_deposit(max_base, max_quote, self._position_after_fees())

    def preview_burn(self, shares: int) -> tuple[int, int]:
        return self.accounting.amounts_for_burn(shares, self._position_after_fees())

    # -----------------
    # Users
    # -----------------

    def mint(self, max_base: int, max_quote: int, min_shares: int = 0, *, caller: str) -> int:
        caller = normalize_address(caller)
        mb, mq = int(max_base), int(max_quote)
        if mb < 0 or mq < 0:
            raise ValidationError("deposit maxima must be >= 0")
        if mb == 0 and mq == 0:
            raise ZeroAmount("mint with nothing to deposit")

        with self._transition("mint"):
            self._accrue()
            position = self.position()
            q = self.accounting.shares_for_deposit(mb, mq, position)
            if q.shares <= 0:
                raise ZeroAmount("deposit too small to mint a share")
            if q.shares < int(min_shares):
                raise SlippageExceeded(f"shares {q.shares} < min_shares {min_shares}")
            self.accounting.check_caps(position, q.base_in, q.quote_in)

            self._pull(self.base, caller, q.base_in)
            self._pull(self.quote, caller, q.quote_in)
            if q.locked_shares:
                self.ledger.lock(q.locked_shares)
            self.ledger.mint(caller, q.shares)
            self.link.sweep_if_active()

            self._emit(
                EventType.MINT_V1,
                {
                    "holder": normalize_address(caller),
                    "shares": q.shares,
                    "base_in": q.base_in,
                    "quote_in": q.quote_in,
                    "initial": q.initial,
                    "locked_shares": q.locked_shares,
                },
            )
            logger.info("vault_mint", extra={"holder": caller, "shares": q.shares})
            return q.shares

    def burn(self, shares: int, min_base: int = 0, min_quote: int = 0, *, caller: str) -> tuple[int, int]:
        caller = normalize_address(caller)
        s = int(shares)
        if s <= 0:
            raise ZeroAmount("burn amount must be > 0")

        with self._transition("burn"):
            self._accrue()
            have = self.ledger.balance_of(caller)
            if have < s:
                raise InsufficientBalance(f"{caller} holds {have} shares, tried to burn {s}")

            position = self.position()
            base_out, quote_out = self.accounting.amounts_for_burn(s, position)
            if base_out < int(min_base) or quote_out < int(min_quote):
                raise BurnSlippageExceeded(
                    f"out ({base_out}, {quote_out}) below minimum ({min_base}, {min_quote})"
                )
            self.ledger.burn(caller, s)

            withdrew_all = False
            if position.local_base < base_out or position.local_quote < quote_out:
                self.link.withdraw_all()
                withdrew_all = True

            self._push(self.base, caller, base_out)
            self._push(self.quote, caller, quote_out)

            self._emit(
                EventType.BURN_V1,
                {
                    "holder": normalize_address(caller),
                    "shares": s,
                    "base_out": base_out,
                    "quote_out": quote_out,
                    "withdrew_all": withdrew_all,
                },
            )
            logger.info("vault_burn", extra={"holder": caller, "shares": s, "withdrew_all": withdrew_all})
            return base_out, quote_out

    # -----------------
    # Manager
    # -----------------

    def populate(self, distribution: Distribution, params: StrategyParams, *, caller: str) -> tuple[int, int]:
        self.roles.require(caller, Permission.LIQUIDITY_MANAGE)
        with self._transition("populate"):
            self._accrue()
            check = self.validator.require(distribution)
            moved_base, moved_quote = self.link.populate(distribution, params)
            self._emit(
                EventType.STRATEGY_POPULATED_V1,
                {
                    "asks": len(distribution.active(Side.ASK)),
                    "bids": len(distribution.active(Side.BID)),
                    "base": moved_base,
                    "quote": moved_quote,
                    "oracle_tick": check.details["oracle_tick"],
                },
            )
            return moved_base, moved_quote

    def retract(self, from_index: int, to_index: int, *, caller: str) -> None:
        self.roles.require(caller, Permission.LIQUIDITY_MANAGE)
        with self._transition("retract"):
            self._accrue()
            self.link.retract(from_index, to_index)
            self._emit(EventType.STRATEGY_RETRACTED_V1, {"from_index": int(from_index), "to_index": int(to_index)})

    def withdraw_from_strategy(self, *, caller: str) -> tuple[int, int]:
        self.roles.require(caller, Permission.LIQUIDITY_MANAGE)
        with self._transition("withdraw_from_strategy"):
            self._accrue()
            got_base, got_quote = self.link.withdraw_all()
            self._emit(EventType.STRATEGY_WITHDRAWN_V1, {"base": got_base, "quote": got_quote})
            return got_base, got_quote

    def rebalance(self, order: RebalanceOrder, *, caller: str) -> RebalanceResult:
        self.roles.require(caller, Permission.REBALANCE)
        with self._transition("rebalance"):
            self._accrue()
            res = self.rebalancer.execute(order)
            self._emit(
                EventType.REBALANCE_V1,
                {
                    "target": normalize_address(order.target),
                    "direction": str(order.direction),
                    "sent": res.sent,
                    "received": res.received,
                    "tick": res.tick,
                },
            )
            return res

    # -----------------
    # Governance
    # -----------------

    def propose_oracle(self, cfg: OracleConfig, *, caller: str) -> OracleConfig:
        with self._transition("propose_oracle", guarded=False):
            self._accrue()
            proposal = self.oracle.propose_config(cfg, caller=caller)
            self._emit(EventType.ORACLE_PROPOSED_V1, proposal.describe())
            return proposal

    def accept_oracle(self, *, caller: str) -> OracleConfig:
        with self._transition("accept_oracle", guarded=False):
            self._accrue()
            active = self.oracle.accept_config(caller=caller)
            self._emit(EventType.ORACLE_ACCEPTED_V1, active.describe())
            return active

    def reject_oracle(self, *, caller: str) -> OracleConfig:
        with self._transition("reject_oracle", guarded=False):
            self._accrue()
            rejected = self.oracle.reject_config(caller=caller)
            self._emit(EventType.ORACLE_REJECTED_V1, rejected.describe())
            return rejected

    def propose_whitelist(self, target: str, *, caller: str) -> WhitelistEntry:
        with self._transition("propose_whitelist", guarded=False):
            self._accrue()
            entry = self.whitelist.propose(target, caller=caller)
            self._emit(EventType.WHITELIST_PROPOSED_V1, {"target": entry.address, "proposed_at": entry.proposed_at})
            return entry

    def accept_whitelist(self, target: str, *, caller: str) -> WhitelistEntry:
        with self._transition("accept_whitelist", guarded=False):
            self._accrue()
            entry = self.whitelist.accept(target, caller=caller)
            self._emit(EventType.WHITELIST_ACCEPTED_V1, {"target": entry.address})
            return entry

    def reject_whitelist(self, target: str, *, caller: str) -> WhitelistEntry:
        with self._transition("reject_whitelist", guarded=False):
            self._accrue()
            entry = self.whitelist.reject(target, caller=caller)
            self._emit(EventType.WHITELIST_REJECTED_V1, {"target": entry.address})
            return entry

    def remove_from_whitelist(self, target: str, *, caller: str) -> WhitelistEntry:
        with self._transition("remove_from_whitelist", guarded=False):
            self._accrue()
            entry = self.whitelist.remove(target, caller=caller)
            self._emit(EventType.WHITELIST_REMOVED_V1, {"target": entry.address})
            return entry

    def _assign(self, role: Role, new_holder: str, caller: str) -> str:
        with self._transition(f"set_{role}", guarded=False):
            self._accrue()
            previous = self.roles.assign(role, new_holder, caller=caller)
            self._emit(
                EventType.ROLE_CHANGED_V1,
                {"role": str(role), "previous": previous, "current": self.roles.holder(role)},
            )
            return previous

    def set_guardian(self, new_guardian: str, *, caller: str) -> str:
        return self._assign(Role.GUARDIAN, new_guardian, caller)

    def set_manager(self, new_manager: str, *, caller: str) -> str:
        return self._assign(Role.MANAGER, new_manager, caller)

    def transfer_ownership(self, new_owner: str, *, caller: str) -> str:
        return self._assign(Role.OWNER, new_owner, caller)

    def set_fee_data(self, annual_rate: int, recipient: str, *, caller: str) -> FeeState:
        with self._transition("set_fee_data", guarded=False):
            settled = self.fees.set_fee_data(annual_rate, recipient, now=int(self.clock()), caller=caller)
            if settled.shares > 0:
                self._emit(
                    EventType.FEES_ACCRUED_V1,
                    {"shares": settled.shares, "elapsed": settled.elapsed, "recipient": settled.recipient},
                )
            state = self.fees.state
            self._emit(
                EventType.FEE_CONFIG_V1,
                {"annual_rate": state.annual_rate, "recipient": state.fee_recipient},
            )
            return state

    def set_caps(self, base_cap: int | None, quote_cap: int | None, *, caller: str) -> None:
        self.roles.require(caller, Permission.CAPS_SET)
        for cap in (base_cap, quote_cap):
            if cap is not None and int(cap) < 0:
                raise ValidationError("caps must be >= 0 or None")
        with self._transition("set_caps", guarded=False):
            self._accrue()
            self.accounting.base_cap = None if base_cap is None else int(base_cap)
            self.accounting.quote_cap = None if quote_cap is None else int(quote_cap)
            self._emit(EventType.CAPS_V1, {"base_cap": base_cap, "quote_cap": quote_cap})
