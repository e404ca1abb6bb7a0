from __future__ import annotations

from decimal import Decimal

import pytest

from oraclevault.core.tick import (
    MAX_TICK,
    MIN_TICK,
    clamp,
    in_range,
    inbound_from_outbound,
    inbound_from_outbound_up,
    outbound_from_inbound,
    outbound_from_inbound_up,
    price_from_tick,
    price_from_tick_human,
    tick_from_price,
    tick_from_volumes,
)


def test_tick_zero_is_unit_price() -> None:
    assert price_from_tick(0) == Decimal(1)
    assert inbound_from_outbound(0, 2_000_000_000) == 2_000_000_000
    assert outbound_from_inbound(0, 2_000_000_000) == 2_000_000_000


def test_price_is_one_basis_point_per_tick() -> None:
    assert price_from_tick(1) == Decimal("1.0001")
    assert price_from_tick(2) == Decimal("1.00020001")
    assert Decimal("0.9999") < price_from_tick(-1) < Decimal(1)


def test_range_bounds() -> None:
    assert in_range(MIN_TICK) and in_range(MAX_TICK)
    assert not in_range(MAX_TICK + 1)
    assert clamp(10**9) == MAX_TICK
    assert clamp(-(10**9)) == MIN_TICK
    with pytest.raises(ValueError):
        price_from_tick(MAX_TICK + 1)


def test_rounding_directions() -> None:
    # price(1) = 1.0001 -> 10 * 1.0001 = 10.001
    assert inbound_from_outbound(1, 10) == 10
    assert inbound_from_outbound_up(1, 10) == 11
    # 10 / 1.0001 = 9.999...
    assert outbound_from_inbound(1, 10) == 9
    assert outbound_from_inbound_up(1, 10) == 10


def test_tick_from_volumes_equal_volumes() -> None:
    assert tick_from_volumes(5, 5) == 0
    assert tick_from_volumes(2_000_000_000, 2_000_000_000) == 0


def test_tick_from_volumes_is_largest_tick_not_above_ratio() -> None:
    for tick in (-5000, -1, 1, 100, 4321):
        outbound = 10**12
        inbound = inbound_from_outbound(tick, outbound)
        t = tick_from_volumes(inbound, outbound)
        assert price_from_tick(t) <= Decimal(inbound) / Decimal(outbound)
        assert price_from_tick(t + 1) > Decimal(inbound) / Decimal(outbound)
        assert t in (tick - 1, tick)


def test_tick_from_volumes_clamps_extremes() -> None:
    assert tick_from_volumes(10**60, 1) == MAX_TICK
    assert tick_from_volumes(1, 10**60) == MIN_TICK


@pytest.mark.parametrize("inbound,outbound", [(0, 1), (1, 0), (-1, 5)])
def test_tick_from_volumes_rejects_empty_side(inbound: int, outbound: int) -> None:
    with pytest.raises(ValueError):
        tick_from_volumes(inbound, outbound)


def test_human_price_conversion() -> None:
    # 1 whole base (18 decimals) for 2000 whole quote (6 decimals)
    tick = tick_from_price("2000", base_decimals=18, quote_decimals=6)
    human = price_from_tick_human(tick, base_decimals=18, quote_decimals=6)
    assert human <= Decimal(2000)
    assert price_from_tick_human(tick + 1, base_decimals=18, quote_decimals=6) > Decimal(2000)
