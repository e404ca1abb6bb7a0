from __future__ import annotations

from collections.abc import Sequence

import pytest

from oraclevault.core.exceptions import InvalidDistribution
from oraclevault.core.time import ManualClock
from oraclevault.core.types import Distribution, OfferLevel
from oraclevault.execution.position import PositionValidator
from oraclevault.governance.oracle import OracleConfig, OracleEngine
from oraclevault.governance.roles import RoleRegistry
from tests._paper_world import GUARDIAN, MANAGER, OWNER


@pytest.fixture()
def validator(clock: ManualClock) -> PositionValidator:
    roles = RoleRegistry(owner=OWNER, guardian=GUARDIAN, manager=MANAGER)
    oracle = OracleEngine(
        OracleConfig.static(1000, max_deviation_ticks=100, timelock_minutes=60),
        roles=roles,
        clock=clock,
    )
    return PositionValidator(oracle)


def _dist(asks: Sequence[tuple[int, int]] = (), bids: Sequence[tuple[int, int]] = ()) -> Distribution:
    return Distribution(
        asks=tuple(OfferLevel(index=i, tick=t, gives=g) for i, (t, g) in enumerate(asks)),
        bids=tuple(OfferLevel(index=i, tick=t, gives=g) for i, (t, g) in enumerate(bids)),
    )


def test_ask_boundary(validator: PositionValidator) -> None:
    assert validator.validate(_dist(asks=[(900, 1), (1200, 1)]))
    res = validator.check(_dist(asks=[(899, 1), (1200, 1)]))
    assert not res.approved
    assert res.reasons == ["ask_below_band"]
    assert res.details["worst_ask"] == 899


def test_bid_boundary(validator: PositionValidator) -> None:
    assert validator.validate(_dist(bids=[(-1100, 1)]))
    res = validator.check(_dist(bids=[(-1101, 1)]))
    assert res.reasons == ["bid_below_band"]


def test_inert_levels_are_ignored(validator: PositionValidator) -> None:
    # A zero-volume level at a bad tick does not count.
    assert validator.validate(_dist(asks=[(0, 0), (950, 5)], bids=[(-5000, 0)]))
    assert validator.validate(Distribution())


def test_require_raises(validator: PositionValidator) -> None:
    with pytest.raises(InvalidDistribution):
        validator.require(_dist(asks=[(899, 1)], bids=[(-1101, 1)]))
    res = validator.require(_dist(asks=[(1000, 1)], bids=[(-1000, 1)]))
    assert res.approved
    assert res.details["oracle_tick"] == 1000
