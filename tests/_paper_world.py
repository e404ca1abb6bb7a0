"""Paper vault wiring shared by unit and integration tests."""

from __future__ import annotations

from dataclasses import dataclass

from oraclevault.core.config import Config
from oraclevault.core.database import Database
from oraclevault.core.time import ManualClock
from oraclevault.execution.address_book import AddressBook
from oraclevault.execution.paper import PaperStrategy, PaperSwapTarget, PaperToken, StaticPriceFeed
from oraclevault.governance.oracle import OracleConfig
from oraclevault.vault import OracleVault

OWNER = "0xowner"
GUARDIAN = "0xguardian"
MANAGER = "0xmanager"
ALICE = "0xalice"
BOB = "0xbob"
VAULT = "0xvault"


@dataclass
class PaperWorld:
    vault: OracleVault
    base: PaperToken
    quote: PaperToken
    strategy: PaperStrategy
    feed: StaticPriceFeed
    venue: PaperSwapTarget
    book: AddressBook
    journal: Database
    clock: ManualClock

    def fund(self, who: str, base: int = 0, quote: int = 0) -> None:
        """Give ``who`` tokens and approve the vault for them."""

        if base:
            self.base.mint(who, base)
            self.base.approve(who, VAULT, self.base.allowance(who, VAULT) + base)
        if quote:
            self.quote.mint(who, quote)
            self.quote.approve(who, VAULT, self.quote.allowance(who, VAULT) + quote)

    def deposit(self, who: str, base: int, quote: int, min_shares: int = 0) -> int:
        self.fund(who, base, quote)
        return self.vault.mint(base, quote, min_shares, caller=who)

    def whitelist_venue(self) -> None:
        self.vault.propose_whitelist(self.venue.address, caller=OWNER)
        self.clock.advance(self.vault.oracle_config().timelock_seconds)
        self.vault.accept_whitelist(self.venue.address, caller=OWNER)

    def stock_venue(self, base: int = 10**15, quote: int = 10**15) -> None:
        self.base.mint(self.venue.address, base)
        self.quote.mint(self.venue.address, quote)


def make_world(
    config: Config,
    clock: ManualClock,
    *,
    oracle_tick: int = 0,
    venue_tick: int | None = None,
    max_deviation_ticks: int = 100,
    timelock_minutes: int = 60,
    dynamic: bool = False,
) -> PaperWorld:
    base = PaperToken("0xbase", symbol="BASE", decimals=6)
    quote = PaperToken("0xquote", symbol="QUOTE", decimals=6)
    strategy = PaperStrategy(address="0xstrategy", base=base, quote=quote, owner=VAULT)
    feed = StaticPriceFeed(tick=oracle_tick)
    venue = PaperSwapTarget(
        address="0xvenue",
        base=base,
        quote=quote,
        tick=oracle_tick if venue_tick is None else venue_tick,
    )
    book = AddressBook(venue)
    journal = Database(":memory:")

    if dynamic:
        oracle = OracleConfig.dynamic(feed, max_deviation_ticks=max_deviation_ticks, timelock_minutes=timelock_minutes)
    else:
        oracle = OracleConfig.static(
            oracle_tick, max_deviation_ticks=max_deviation_ticks, timelock_minutes=timelock_minutes
        )

    vault = OracleVault(
        base=base,
        quote=quote,
        strategy=strategy,
        oracle_config=oracle,
        owner=OWNER,
        guardian=GUARDIAN,
        manager=MANAGER,
        address=VAULT,
        config=config,
        address_book=book,
        journal=journal,
        clock=clock,
    )
    return PaperWorld(
        vault=vault,
        base=base,
        quote=quote,
        strategy=strategy,
        feed=feed,
        venue=venue,
        book=book,
        journal=journal,
        clock=clock,
    )
