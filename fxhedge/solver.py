# solver.py
# ------------------------------------------------------------
# Zero-cost strike search.
#
# One leg's strike is fixed; the opposite leg's strike is found by
# bisection so that both premiums match (net cost ~ 0). Pricing uses a
# simplified context (default 5% rate, 1 year) passed in explicitly.
# ------------------------------------------------------------

from typing import List, NamedTuple, Sequence, Tuple

from fxhedge.config import DEFAULT_CONTEXT, PricingContext
from fxhedge.errors import InvalidParameterError
from fxhedge.legs import OPTION_LEG_TYPES, as_percent, with_strike
from fxhedge.logger_utils import get_logger
from fxhedge.pricing import CALL, option_price, pricing_inputs_valid

logger = get_logger(__name__)


class EquilibriumResult(NamedTuple):
    strike_percent: float
    residual: float
    converged: bool


def _check_inputs(spot, volatility, context):
    if spot <= 0:
        raise InvalidParameterError(f"Spot must be positive, got {spot}.")
    if volatility <= 0:
        raise InvalidParameterError(f"Volatility must be positive, got {volatility}.")
    if context.time_to_expiry <= 0:
        raise InvalidParameterError(f"Time to expiry must be positive, got {context.time_to_expiry}.")


def solve_equilibrium(
    target_kind: str,
    opposite_kind: str,
    opposite_strike_percent: float,
    spot: float,
    volatility_percent: float,
    bounds: Tuple[float, float] = (50.0, 150.0),
    tolerance: float = 0.001,
    context: PricingContext = DEFAULT_CONTEXT,
) -> EquilibriumResult:
    """
    Bisection on the target strike (in price units) until its premium
    matches the opposite leg's premium.

    If no root lies inside `bounds` the search still stops once the
    interval is narrower than `tolerance`; the last midpoint is returned
    with `converged=False` and the remaining premium gap in `residual`.
    """
    sigma = volatility_percent / 100.0
    _check_inputs(spot, sigma, context)
    r, t = context.risk_free_rate, context.time_to_expiry

    opposite_strike = opposite_strike_percent / 100.0 * spot
    target_premium = option_price(opposite_kind, spot, opposite_strike, r, t, sigma)

    low = bounds[0] / 100.0 * spot
    high = bounds[1] / 100.0 * spot
    mid = (low + high) / 2.0

    while high - low > tolerance:
        mid = (low + high) / 2.0
        premium = option_price(target_kind, spot, mid, r, t, sigma)

        if abs(premium - target_premium) < tolerance:
            break
        # call premiums fall as the strike rises, put premiums rise
        if premium > target_premium:
            if target_kind == CALL:
                low = mid
            else:
                high = mid
        else:
            if target_kind == CALL:
                high = mid
            else:
                low = mid

    residual = option_price(target_kind, spot, mid, r, t, sigma) - target_premium
    converged = abs(residual) <= tolerance
    if not converged:
        logger.debug(
            "Equilibrium search for %s vs %s @ %.2f%% did not converge (gap %.6f)",
            target_kind, opposite_kind, opposite_strike_percent, residual,
        )
    return EquilibriumResult(mid / spot * 100.0, residual, converged)


def find_equilibrium_strike(
    target_kind,
    opposite_kind,
    opposite_strike_percent,
    spot,
    volatility_percent,
    bounds=(50.0, 150.0),
    tolerance=0.001,
    context=DEFAULT_CONTEXT,
) -> float:
    """Strike (percent of spot) of the target leg; best effort, see `solve_equilibrium`."""
    return solve_equilibrium(
        target_kind, opposite_kind, opposite_strike_percent, spot,
        volatility_percent, bounds, tolerance, context,
    ).strike_percent


def balance_quantity(kind, long_strike_percent, short_strike_percent, spot, volatility_percent,
                     quantity, context=DEFAULT_CONTEXT):
    """Signed quantity of a short leg whose premium offsets `quantity` of the long leg."""
    sigma = volatility_percent / 100.0
    _check_inputs(spot, sigma, context)
    r, t = context.risk_free_rate, context.time_to_expiry

    long_premium = option_price(kind, spot, spot * long_strike_percent / 100.0, r, t, sigma)
    short_premium = option_price(kind, spot, spot * short_strike_percent / 100.0, r, t, sigma)
    if short_premium <= 0:
        raise InvalidParameterError(
            f"Short {kind} at {short_strike_percent}% has no premium to balance against."
        )
    return -quantity * long_premium / short_premium


# ------------------------------
# Phase 1 of evaluation: resolve dynamic strikes
# ------------------------------

def resolve_dynamic_strikes(legs: Sequence, spot: float, context: PricingContext = DEFAULT_CONTEXT) -> List:
    """
    Return a copy of `legs` where every dynamic-strike marker has been
    replaced by a solved percent strike.

    A marker that points at itself, outside the list, at a non-option leg
    or at a leg that is itself still unresolved is left in place and
    logged; the evaluator then uses that leg's placeholder strike.
    """
    resolved = list(legs)
    for i, leg in enumerate(legs):
        marker = getattr(leg, "dynamic_strike", None)
        if marker is None:
            continue

        j = marker.balance_with_index
        if j == i or not 0 <= j < len(resolved):
            logger.warning("Leg %d balances against invalid index %d; strike left unresolved", i, j)
            continue
        anchor = resolved[j]
        if not isinstance(anchor, OPTION_LEG_TYPES) or getattr(anchor, "dynamic_strike", None) is not None:
            logger.warning("Leg %d cannot balance against leg %d (%s)", i, j, type(anchor).__name__)
            continue

        volatility = leg.volatility * marker.volatility_adjustment
        anchor_percent = as_percent(anchor.strike, anchor.strike_basis, spot)
        if not pricing_inputs_valid(spot, anchor_percent, context.time_to_expiry, volatility):
            logger.warning("Leg %d has invalid pricing inputs; strike left unresolved", i)
            continue

        strike_percent = find_equilibrium_strike(
            leg.option_kind, anchor.option_kind, anchor_percent, spot, volatility, context=context,
        )
        resolved[i] = with_strike(leg, strike_percent)
        logger.debug("Resolved leg %d strike to %.4f%% against leg %d", i, strike_percent, j)

    return resolved
