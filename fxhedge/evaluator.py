# evaluator.py
# ------------------------------------------------------------
# Effective hedged rate and payoff of a multi-leg strategy.
#
# For a simulated spot S every leg is tested against S itself (never
# against the running hedged rate) and contributes a shift to the rate:
#
#   hedged(S) = S + sum_i shift_i(S) [- net premium]
#
# so leg order never changes the result. Levels given as a percent are
# taken relative to the reference spot of the strategy.
# ------------------------------------------------------------

from math import isfinite
from typing import Iterable, List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd

from fxhedge.config import ProfileSettings
from fxhedge.legs import (
    BOUNDED_BY_STRIKE,
    TWO_BARRIER_KINDS,
    BarrierLeg,
    DigitalLeg,
    ForwardLeg,
    LegKind,
    SwapLeg,
    VanillaLeg,
    resolve_level,
)
from fxhedge.logger_utils import get_logger

logger = get_logger(__name__)

# flat premium estimate per unit of quantity fraction
SIMPLE_PREMIUM_RATE = 0.01

_DEFAULT_PROFILE = ProfileSettings()


class HedgePoint(NamedTuple):
    spot: float
    unhedged_rate: float
    hedged_rate: float


class PayoffPoint(NamedTuple):
    price: float
    payoff: float


# ------------------------------
# Level resolution
# ------------------------------

def _strike(leg, spot):
    return resolve_level(leg.strike, leg.strike_basis, spot)


def _barrier(leg, spot):
    return resolve_level(leg.barrier, leg.barrier_basis, spot)


def _second_barrier(leg, spot):
    return resolve_level(leg.second_barrier, leg.barrier_basis, spot)


def _is_finite(value):
    return value is not None and isfinite(value)


def leg_problem(leg) -> Optional[str]:
    """Why a leg cannot be evaluated, or None when it is well formed."""
    if type(leg) not in _SHIFTS:
        return f"unsupported leg object {type(leg).__name__}"
    if getattr(leg, "dynamic_strike", None) is not None:
        return "dynamic strike unresolved"
    if not _is_finite(leg.quantity):
        return "quantity is not a finite number"
    if isinstance(leg, DigitalLeg):
        if not _is_finite(leg.barrier):
            return f"{leg.kind.value} needs a barrier"
        if leg.kind in TWO_BARRIER_KINDS and not _is_finite(leg.second_barrier):
            return f"{leg.kind.value} needs a second barrier"
        if leg.kind in BOUNDED_BY_STRIKE and not _is_finite(leg.strike):
            return f"{leg.kind.value} needs a lower bound in strike"
        if not _is_finite(leg.rebate):
            return "rebate is not a finite number"
        return None
    if not _is_finite(leg.strike):
        return f"{leg.kind.value} needs a strike"
    if isinstance(leg, BarrierLeg) and not _is_finite(leg.barrier):
        return f"{leg.kind.value} needs a barrier"
    return None


def usable_legs(legs: Iterable) -> List:
    """Drop malformed legs (logged) so the remaining ones still evaluate."""
    kept = []
    for index, leg in enumerate(legs):
        problem = leg_problem(leg)
        if problem is None:
            kept.append(leg)
        else:
            logger.warning("Skipping leg %d: %s", index, problem)
    return kept


# ------------------------------
# Per-kind rate shifts
# ------------------------------

def _moneyness(option_kind, strike, current_spot):
    if option_kind == "call":
        return max(current_spot - strike, 0.0)
    return max(strike - current_spot, 0.0)


def _option_shift(option_kind, strike, current_spot, qty):
    # bought call pulls the rate down, bought put lifts it; sold legs mirror
    direction = -1.0 if option_kind == "call" else 1.0
    return direction * _moneyness(option_kind, strike, current_spot) * qty


def _barrier_breached(leg, current_spot, spot):
    barrier = _barrier(leg, spot)
    if leg.option_kind == "call":
        return current_spot >= barrier
    return current_spot <= barrier


def barrier_active(leg, current_spot, spot) -> bool:
    breached = _barrier_breached(leg, current_spot, spot)
    return not breached if leg.is_knockout else breached


def digital_triggered(leg, current_spot, spot) -> bool:
    upper = _barrier(leg, spot)
    if leg.kind in TWO_BARRIER_KINDS:
        lower = _second_barrier(leg, spot)
    elif leg.kind in BOUNDED_BY_STRIKE:
        lower = _strike(leg, spot)
    else:
        lower = None
    return _DIGITAL_CONDITIONS[leg.kind](current_spot, upper, lower)


_DIGITAL_CONDITIONS = {
    LegKind.ONE_TOUCH: lambda s, upper, lower: s >= upper,
    LegKind.NO_TOUCH: lambda s, upper, lower: s < upper,
    LegKind.DOUBLE_TOUCH: lambda s, upper, lower: s >= upper or s <= lower,
    LegKind.DOUBLE_NO_TOUCH: lambda s, upper, lower: lower < s < upper,
    LegKind.RANGE_BINARY: lambda s, upper, lower: lower <= s <= upper,
    LegKind.OUTSIDE_BINARY: lambda s, upper, lower: s > upper or s < lower,
}


def _vanilla_shift(leg, current_spot, spot):
    return _option_shift(leg.option_kind, _strike(leg, spot), current_spot, leg.quantity / 100.0)


def _forward_shift(leg, current_spot, spot):
    # blend of the fixed rate and spot, no optionality so the sign is ignored
    return (_strike(leg, spot) - current_spot) * abs(leg.quantity / 100.0)


def _swap_shift(leg, current_spot, spot):
    return _strike(leg, spot) - current_spot


def _barrier_shift(leg, current_spot, spot):
    if not barrier_active(leg, current_spot, spot):
        return 0.0
    return _option_shift(leg.option_kind, _strike(leg, spot), current_spot, leg.quantity / 100.0)


def _digital_shift(leg, current_spot, spot):
    if not digital_triggered(leg, current_spot, spot):
        return 0.0
    return (leg.rebate / 100.0) * abs(leg.quantity / 100.0) * 100.0


_SHIFTS = {
    VanillaLeg: _vanilla_shift,
    ForwardLeg: _forward_shift,
    SwapLeg: _swap_shift,
    BarrierLeg: _barrier_shift,
    DigitalLeg: _digital_shift,
}


def net_simple_premium(legs: Iterable) -> float:
    """Flat premium estimate: bought legs cost, sold legs earn."""
    total = 0.0
    for leg in legs:
        qty = leg.quantity / 100.0
        premium = SIMPLE_PREMIUM_RATE * abs(qty)
        if qty > 0:
            total += premium
        elif qty < 0:
            total -= premium
    return total


# ------------------------------
# Public evaluation API
# ------------------------------

def _hedged_rate(legs, current_spot, spot, include_premium):
    rate = current_spot
    for leg in legs:
        rate += _SHIFTS[type(leg)](leg, current_spot, spot)
    if include_premium and legs:
        rate -= net_simple_premium(legs)
    return rate


def hedged_rate(legs: Sequence, current_spot: float, spot: float, include_premium: bool = False) -> float:
    """Effective rate obtained at `current_spot` for a strategy set up at `spot`."""
    return _hedged_rate(usable_legs(legs), current_spot, spot, include_premium)


def spot_grid(spot, span=_DEFAULT_PROFILE.span, points=_DEFAULT_PROFILE.points):
    """`points` equal steps across spot * (1 -/+ span), both ends included."""
    return np.linspace(spot * (1.0 - span), spot * (1.0 + span), int(points) + 1)


def hedging_profile(
    legs: Sequence,
    spot: float,
    include_premium: bool = False,
    spots: Optional[Iterable[float]] = None,
    settings: ProfileSettings = _DEFAULT_PROFILE,
) -> List[HedgePoint]:
    """
    Unhedged vs hedged rate over a spot grid.

    Parameters
    ----------
    legs : sequence of strategy legs
        Legs must already have their dynamic strikes resolved.
    spot : float
        Reference spot the percent levels are relative to.
    include_premium : bool
        Subtract the flat net premium estimate from every hedged rate.
    spots : iterable of float, optional
        Explicit grid; defaults to `spot_grid(spot, settings.span, settings.points)`.

    Returns
    -------
    list of HedgePoint
        One row per grid point, rounded to `settings.decimals`.
    """
    kept = usable_legs(legs)
    grid = spot_grid(spot, settings.span, settings.points) if spots is None else spots
    digits = settings.decimals

    points = []
    for current_spot in grid:
        current_spot = float(current_spot)
        rate = _hedged_rate(kept, current_spot, spot, include_premium)
        points.append(HedgePoint(round(current_spot, digits), round(current_spot, digits), round(rate, digits)))
    return points


# ------------------------------
# Payoff view (used by the backtest)
# ------------------------------

def _vanilla_payoff(leg, current_spot, spot):
    return _moneyness(leg.option_kind, _strike(leg, spot), current_spot) * leg.quantity / 100.0


def _linear_payoff(leg, current_spot, spot):
    return (_strike(leg, spot) - current_spot) * leg.quantity / 100.0


def _barrier_payoff(leg, current_spot, spot):
    if not barrier_active(leg, current_spot, spot):
        return 0.0
    return _vanilla_payoff(leg, current_spot, spot)


def _digital_payoff(leg, current_spot, spot):
    if not digital_triggered(leg, current_spot, spot):
        return 0.0
    return (leg.rebate / 100.0) * spot * leg.quantity / 100.0


_PAYOFFS = {
    VanillaLeg: _vanilla_payoff,
    ForwardLeg: _linear_payoff,
    SwapLeg: _linear_payoff,
    BarrierLeg: _barrier_payoff,
    DigitalLeg: _digital_payoff,
}


def _strategy_payoff(legs, current_spot, initial_spot):
    total = 0.0
    for leg in legs:
        total += _PAYOFFS[type(leg)](leg, current_spot, initial_spot)
    return total / initial_spot


def strategy_payoff(legs: Sequence, current_spot: float, initial_spot: float) -> float:
    """
    Payoff of the strategy at `current_spot` as a fraction of notional.

    Bought legs earn their intrinsic value, sold legs pay it; forwards
    and swaps earn (strike - spot); digitals pay their rebate.
    """
    return _strategy_payoff(usable_legs(legs), current_spot, initial_spot)


def payoff_profile(legs: Sequence, spot: float, settings: ProfileSettings = _DEFAULT_PROFILE) -> List[PayoffPoint]:
    kept = usable_legs(legs)
    low, high = settings.payoff_range
    prices = spot * np.linspace(low, high, settings.points + 1) / 100.0
    return [
        PayoffPoint(round(float(p), settings.decimals), _strategy_payoff(kept, float(p), spot))
        for p in prices
    ]


def profile_to_frame(points: Sequence) -> pd.DataFrame:
    """HedgePoint or PayoffPoint rows as a DataFrame (columns = field names)."""
    if not points:
        return pd.DataFrame(columns=list(HedgePoint._fields))
    return pd.DataFrame(list(points), columns=list(type(points[0])._fields))
