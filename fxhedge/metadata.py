# metadata.py
# ------------------------------------------------------------
# Strategy summary derived from a leg list: display name, cost, risk
# bucket, extremes and breakevens of the hedging profile, and aggregate
# sensitivities. Always recomputed from the legs, never stored alone.
# ------------------------------------------------------------

from dataclasses import asdict, dataclass
from math import exp
from typing import Optional, Sequence, Tuple

from fxhedge.config import DEFAULT_CONTEXT, PricingContext, ProfileSettings
from fxhedge.evaluator import hedging_profile, usable_legs
from fxhedge.legs import (
    OPTION_LEG_TYPES,
    Basis,
    DigitalLeg,
    ForwardLeg,
    LegKind,
    SwapLeg,
    resolve_level,
)
from fxhedge.pricing import d1_d2, norm_cdf, option_greeks, option_price, pricing_inputs_valid
from fxhedge.solver import resolve_dynamic_strikes

HIGH_COST_PCT = 2.0
MEDIUM_COST_PCT = 1.0


@dataclass(frozen=True)
class Greeks:
    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0


@dataclass(frozen=True)
class StrategyMetadata:
    """
    Attributes:
        name: Display label
        risk_level: "low", "medium" or "high" from the absolute expected cost
        expected_cost: Net model premium, percent of notional (negative = credit)
        max_loss: Worst hedged-minus-unhedged rate on the profile grid (<= 0)
        max_gain: Best hedged-minus-unhedged rate on the profile grid (>= 0)
        breakevens: Spots where hedged and unhedged rates cross
        greeks: Quantity-weighted sensitivities per unit of notional
    """
    name: str
    risk_level: str
    expected_cost: float
    max_loss: float
    max_gain: float
    breakevens: Tuple[float, ...]
    greeks: Greeks

    def as_dict(self):
        return asdict(self)


def strategy_name(legs: Sequence) -> str:
    if not legs:
        return "No Hedging Strategy"
    if len(legs) > 1:
        return "Multi-Leg Hedging Strategy"
    leg = legs[0]
    level = getattr(leg, "strike", None)
    basis = getattr(leg, "strike_basis", Basis.PERCENT)
    if level is None:
        level, basis = leg.barrier, leg.barrier_basis
    label = f"{level:g}%" if basis == Basis.PERCENT else f"{level:.4f}"
    return f"{leg.kind.value.upper()} {label}"


def risk_bucket(expected_cost: float) -> str:
    cost = abs(expected_cost)
    if cost >= HIGH_COST_PCT:
        return "high"
    if cost >= MEDIUM_COST_PCT:
        return "medium"
    return "low"


def _binary_above(spot, level, r, t, sigma):
    """Discounted probability-weight of finishing above `level`."""
    _, d2 = d1_d2(spot, level, r, t, sigma)
    return exp(-r * t) * norm_cdf(d2)


def digital_price(leg: DigitalLeg, spot: float, context: PricingContext = DEFAULT_CONTEXT) -> float:
    """
    European cash-or-nothing approximation of a digital leg, in percent
    of notional per unit quantity. Touch features are not path dependent here.
    """
    r, t, sigma = context.risk_free_rate, context.time_to_expiry, leg.volatility / 100.0
    upper = resolve_level(leg.barrier, leg.barrier_basis, spot)
    if leg.kind in (LegKind.DOUBLE_TOUCH, LegKind.DOUBLE_NO_TOUCH):
        lower = resolve_level(leg.second_barrier, leg.barrier_basis, spot)
    elif leg.kind in (LegKind.RANGE_BINARY, LegKind.OUTSIDE_BINARY):
        lower = resolve_level(leg.strike, leg.strike_basis, spot)
    else:
        lower = upper

    if not pricing_inputs_valid(spot, min(upper, lower), t, sigma):
        return 0.0

    above_upper = _binary_above(spot, upper, r, t, sigma)
    above_lower = _binary_above(spot, lower, r, t, sigma)
    discount = exp(-r * t)

    if leg.kind == LegKind.ONE_TOUCH:
        weight = above_upper
    elif leg.kind == LegKind.NO_TOUCH:
        weight = discount - above_upper
    elif leg.kind in (LegKind.DOUBLE_NO_TOUCH, LegKind.RANGE_BINARY):
        weight = max(above_lower - above_upper, 0.0)
    else:
        weight = discount - max(above_lower - above_upper, 0.0)
    return leg.rebate * weight


def expected_cost(legs: Sequence, spot: float, context: PricingContext = DEFAULT_CONTEXT) -> float:
    """Net premium in percent of notional; bought legs add, sold legs subtract."""
    r, t = context.risk_free_rate, context.time_to_expiry
    total = 0.0
    for leg in legs:
        qty = leg.quantity / 100.0
        if isinstance(leg, OPTION_LEG_TYPES):
            strike = resolve_level(leg.strike, leg.strike_basis, spot)
            sigma = leg.volatility / 100.0
            if not pricing_inputs_valid(spot, strike, t, sigma):
                continue
            # barrier legs are charged at their vanilla parent's price
            total += option_price(leg.option_kind, spot, strike, r, t, sigma) / spot * 100.0 * qty
        elif isinstance(leg, DigitalLeg):
            total += digital_price(leg, spot, context) * qty
    return total


def aggregate_greeks(legs: Sequence, spot: float, context: PricingContext = DEFAULT_CONTEXT) -> Greeks:
    r, t = context.risk_free_rate, context.time_to_expiry
    totals = {"delta": 0.0, "gamma": 0.0, "theta": 0.0, "vega": 0.0}
    for leg in legs:
        qty = leg.quantity / 100.0
        if isinstance(leg, (ForwardLeg, SwapLeg)):
            # selling forward at a fixed rate is short the currency
            totals["delta"] -= qty
        elif isinstance(leg, OPTION_LEG_TYPES):
            strike = resolve_level(leg.strike, leg.strike_basis, spot)
            sigma = leg.volatility / 100.0
            if not pricing_inputs_valid(spot, strike, t, sigma):
                continue
            for key, value in option_greeks(leg.option_kind, spot, strike, r, t, sigma).items():
                totals[key] += value * qty
    return Greeks(**totals)


def _breakevens(points):
    crossings = []
    for a, b in zip(points, points[1:]):
        gap_a = a.hedged_rate - a.unhedged_rate
        gap_b = b.hedged_rate - b.unhedged_rate
        if gap_a * gap_b < 0:
            weight = gap_a / (gap_a - gap_b)
            crossings.append(round(a.spot + weight * (b.spot - a.spot), 4))
    return tuple(crossings)


def describe_strategy(
    legs: Sequence,
    spot: float,
    name: Optional[str] = None,
    context: PricingContext = DEFAULT_CONTEXT,
    settings: ProfileSettings = ProfileSettings(),
) -> StrategyMetadata:
    resolved = usable_legs(resolve_dynamic_strikes(legs, spot, context))
    cost = expected_cost(resolved, spot, context)

    points = hedging_profile(resolved, spot, include_premium=True, settings=settings)
    gaps = [p.hedged_rate - p.unhedged_rate for p in points]

    return StrategyMetadata(
        name=name or strategy_name(resolved),
        risk_level=risk_bucket(cost),
        expected_cost=cost,
        max_loss=min(min(gaps, default=0.0), 0.0),
        max_gain=max(max(gaps, default=0.0), 0.0),
        breakevens=_breakevens(points),
        greeks=aggregate_greeks(resolved, spot, context),
    )
