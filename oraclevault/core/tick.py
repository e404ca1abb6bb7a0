"""oraclevault.core.tick

Ticks are integer coordinates on a logarithmic price scale:

    price(tick) = 1.0001 ** tick

For an ask, price is quote (inbound) per base (outbound) in raw token units.
A bid quotes the opposite pair, so its tick is measured on the inverted price.

All arithmetic is fixed precision ``Decimal``; there is no binary float here.
Conversions to token amounts are explicitly floored or ceiled.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR, Context, Decimal, localcontext

MIN_TICK = -887272
MAX_TICK = 887272

_PRECISION = 80
_BASE = Decimal(10001) / Decimal(10000)


def _ctx() -> Context:
    return Context(prec=_PRECISION)


def in_range(tick: int) -> bool:
    return MIN_TICK <= int(tick) <= MAX_TICK


def clamp(tick: int) -> int:
    return max(MIN_TICK, min(MAX_TICK, int(tick)))


def price_from_tick(tick: int) -> Decimal:
    """Return ``1.0001 ** tick`` at fixed precision.

    Raises:
        ValueError: if tick is outside the representable range.
    """

    t = int(tick)
    if not in_range(t):
        raise ValueError(f"tick out of range: {t}")
    with localcontext(_ctx()):
        if t == 0:
            return Decimal(1)
        return _BASE**t


def _to_int(value: Decimal, rounding: str) -> int:
    return int(value.to_integral_value(rounding=rounding))


def inbound_from_outbound(tick: int, outbound: int) -> int:
    """Inbound amount owed for ``outbound`` at ``tick``, rounded down."""

    with localcontext(_ctx()):
        return _to_int(Decimal(int(outbound)) * price_from_tick(tick), ROUND_FLOOR)


def inbound_from_outbound_up(tick: int, outbound: int) -> int:
    with localcontext(_ctx()):
        return _to_int(Decimal(int(outbound)) * price_from_tick(tick), ROUND_CEILING)


def outbound_from_inbound(tick: int, inbound: int) -> int:
    """Outbound amount bought by ``inbound`` at ``tick``, rounded down."""

    with localcontext(_ctx()):
        return _to_int(Decimal(int(inbound)) / price_from_tick(tick), ROUND_FLOOR)


def outbound_from_inbound_up(tick: int, inbound: int) -> int:
    with localcontext(_ctx()):
        return _to_int(Decimal(int(inbound)) / price_from_tick(tick), ROUND_CEILING)


def tick_from_ratio(ratio: Decimal) -> int:
    """Largest tick with ``price(tick) <= ratio``, clamped to the representable range."""

    with localcontext(_ctx()):
        r = Decimal(ratio)
        if r <= 0:
            raise ValueError("ratio must be > 0")
        if r <= price_from_tick(MIN_TICK):
            return MIN_TICK
        if r >= price_from_tick(MAX_TICK):
            return MAX_TICK

        estimate = _to_int(r.ln() / _BASE.ln(), ROUND_FLOOR)
        t = clamp(estimate)
        # ln() is correctly rounded; the estimate can still sit one step off a boundary.
        while t < MAX_TICK and price_from_tick(t + 1) <= r:
            t += 1
        while t > MIN_TICK and price_from_tick(t) > r:
            t -= 1
        return t


def tick_from_volumes(inbound: int, outbound: int) -> int:
    """Tick of a fill that paid ``outbound`` and received ``inbound``.

    Raises:
        ValueError: if either volume is not strictly positive.
    """

    i, o = int(inbound), int(outbound)
    if i <= 0 or o <= 0:
        raise ValueError(f"volumes must be > 0, got inbound={i} outbound={o}")
    with localcontext(_ctx()):
        return tick_from_ratio(Decimal(i) / Decimal(o))


def tick_from_price(price: Decimal | str | int, *, base_decimals: int, quote_decimals: int) -> int:
    """Convert a human price (quote per one whole base) into a raw-unit ask tick."""

    with localcontext(_ctx()):
        p = Decimal(str(price))
        raw = p * (Decimal(10) ** (int(quote_decimals) - int(base_decimals)))
        return tick_from_ratio(raw)


def price_from_tick_human(tick: int, *, base_decimals: int, quote_decimals: int) -> Decimal:
    with localcontext(_ctx()):
        return price_from_tick(tick) * (Decimal(10) ** (int(base_decimals) - int(quote_decimals)))
