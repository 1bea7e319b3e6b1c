# strategies.py
# ------------------------------------------------------------
# Zero-cost hedging structures.
#
# Each builder returns a list of legs whose net premium is ~0 under the
# simplified pricing context. With optimize_per_period=True the solved
# leg carries a DynamicStrike marker instead, and the strike is found
# later by `resolve_dynamic_strikes` for the spot actually evaluated.
# ------------------------------------------------------------

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, NamedTuple, Tuple

from fxhedge.config import DEFAULT_CONTEXT, PricingContext
from fxhedge.errors import InvalidParameterError
from fxhedge.legs import (
    Basis,
    BarrierLeg,
    DynamicStrike,
    ForwardLeg,
    LegKind,
    VanillaLeg,
)
from fxhedge.solver import balance_quantity, find_equilibrium_strike

PLACEHOLDER_STRIKE = 0.0
KNOCKOUT_VOL_ADJUSTMENT = 0.8


@dataclass(frozen=True)
class ZeroCostParams:
    """Strikes and barrier in percent of spot, quantities in percent of notional."""
    call_strike: float = 105.0
    put_strike: float = 95.0
    call_quantity: float = 100.0
    put_quantity: float = 100.0
    volatility: float = 20.0
    barrier_level: float = 85.0
    participation: float = 50.0


def _put(strike, quantity, params, dynamic=None):
    return VanillaLeg(LegKind.PUT, strike, quantity, params.volatility, Basis.PERCENT, dynamic)


def _call(strike, quantity, params, dynamic=None):
    return VanillaLeg(LegKind.CALL, strike, quantity, params.volatility, Basis.PERCENT, dynamic)


def collar_put_fixed(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    """Long put at a chosen strike financed by a short call at the equilibrium strike."""
    put = _put(params.put_strike, params.put_quantity, params)
    if optimize_per_period:
        return [put, _call(PLACEHOLDER_STRIKE, -params.call_quantity, params, DynamicStrike(0))]

    call_strike = find_equilibrium_strike("call", "put", params.put_strike, spot, params.volatility, context=context)
    return [put, _call(call_strike, -params.call_quantity, params)]


def collar_call_fixed(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    """Short call at a chosen strike; the put strike is solved to offset it."""
    call = _call(params.call_strike, -params.call_quantity, params)
    if optimize_per_period:
        return [call, _put(PLACEHOLDER_STRIKE, params.put_quantity, params, DynamicStrike(0))]

    put_strike = find_equilibrium_strike("put", "call", params.call_strike, spot, params.volatility, context=context)
    return [call, _put(put_strike, params.put_quantity, params)]


def seagull(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    call_strike = find_equilibrium_strike("call", "put", params.put_strike, spot, params.volatility, context=context)
    return [
        _put(params.put_strike, params.put_quantity, params),
        _call(call_strike, -params.call_quantity * 0.7, params),
        _put(params.put_strike - 10.0, -params.put_quantity * 0.3, params),
    ]


def risk_reversal(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    return collar_put_fixed(spot, params, optimize_per_period, context)


def participating_forward(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    """Part of the exposure locked at today's spot, the rest left open."""
    return [ForwardLeg(strike=spot, quantity=params.participation, strike_basis=Basis.ABSOLUTE)]


def knockout_forward(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    """Put that knocks out below the barrier, financed by a short call."""
    put = BarrierLeg(
        kind=LegKind.PUT_KNOCKOUT,
        strike=params.put_strike,
        barrier=params.barrier_level,
        quantity=params.put_quantity,
        volatility=params.volatility,
    )
    if optimize_per_period:
        marker = DynamicStrike(0, volatility_adjustment=KNOCKOUT_VOL_ADJUSTMENT)
        return [put, _call(PLACEHOLDER_STRIKE, -params.call_quantity, params, marker)]

    # the barrier makes the put cheaper; price it with reduced volatility
    call_strike = find_equilibrium_strike(
        "call", "put", params.put_strike, spot, params.volatility * KNOCKOUT_VOL_ADJUSTMENT, context=context,
    )
    return [put, _call(call_strike, -params.call_quantity, params)]


def call_spread(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    """Long call at the lower strike, short calls at the higher strike sized to offset its premium."""
    short_qty = balance_quantity(
        "call", params.put_strike, params.call_strike, spot, params.volatility, params.call_quantity, context,
    )
    return [
        _call(params.put_strike, params.call_quantity, params),
        _call(params.call_strike, short_qty, params),
    ]


def put_spread(spot, params=ZeroCostParams(), optimize_per_period=False, context=DEFAULT_CONTEXT):
    short_qty = balance_quantity(
        "put", params.call_strike, params.put_strike, spot, params.volatility, params.put_quantity, context,
    )
    return [
        _put(params.call_strike, params.put_quantity, params),
        _put(params.put_strike, short_qty, params),
    ]


STRATEGY_BUILDERS: Dict[str, Tuple[str, Callable]] = {
    "collar-put": ("Zero-Cost Collar (Put Fixed)", collar_put_fixed),
    "collar-call": ("Zero-Cost Collar (Call Fixed)", collar_call_fixed),
    "seagull": ("Zero-Cost Seagull", seagull),
    "risk-reversal": ("Zero-Cost Risk Reversal", risk_reversal),
    "participating-forward": ("Zero-Cost Participating Forward", participating_forward),
    "knockout-forward": ("Zero-Cost Knock-Out Forward", knockout_forward),
    "call-spread": ("Zero-Cost Call Spread", call_spread),
    "put-spread": ("Zero-Cost Put Spread", put_spread),
}


def build_strategy(
    key: str,
    spot: float,
    params: ZeroCostParams = ZeroCostParams(),
    optimize_per_period: bool = False,
    context: PricingContext = DEFAULT_CONTEXT,
) -> Tuple[str, List]:
    """Look up a builder by key and return (display name, legs)."""
    if key not in STRATEGY_BUILDERS:
        raise InvalidParameterError(
            f"Unknown strategy {key!r}. Use one of: {', '.join(STRATEGY_BUILDERS)}."
        )
    name, builder = STRATEGY_BUILDERS[key]
    legs = builder(spot, params, optimize_per_period, context)
    if optimize_per_period:
        name += " (Period-Optimized)"
    return name, legs


# ------------------------------
# Advanced templates
# ------------------------------

HIGH_VOL_THRESHOLD = 25.0
SEAGULL_PLUS_PUT_GAP = 5.0


@dataclass(frozen=True)
class TemplateParams:
    """
    Inputs of the advanced templates.

    Attributes:
        protection: Long put strike, percent of spot
        volatility: Annualized volatility, percent
        hedge_ratio: Notional hedged, percent
        leverage_ratio: Multiplier on both legs of the leveraged collar
        use_barriers: Barrier collar uses a knock-out put; otherwise it is a plain collar
        barrier_level: Knock-out level of the barrier collar, percent of spot
    """
    protection: float = 95.0
    volatility: float = 20.0
    hedge_ratio: float = 100.0
    leverage_ratio: float = 1.5
    use_barriers: bool = True
    barrier_level: float = 85.0


class StrategyTemplate(NamedTuple):
    name: str
    builder: Callable
    complexity: str
    market_outlook: Tuple[str, ...]


def _financed_put(spot, protection, params, context, volatility=None):
    """Short call strike whose premium matches a put at `protection`."""
    return find_equilibrium_strike(
        "call", "put", protection, spot, volatility or params.volatility, context=context,
    )


def _template_leg(kind, strike, quantity, params):
    return VanillaLeg(kind, strike, quantity, params.volatility, Basis.PERCENT)


def enhanced_collar(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    call_strike = _financed_put(spot, params.protection, params, context)
    return [
        _template_leg(LegKind.PUT, params.protection, params.hedge_ratio, params),
        _template_leg(LegKind.CALL, call_strike, -params.hedge_ratio, params),
    ]


def seagull_plus(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    """Long put, short call on 70% and a short put 5 points lower on 30%."""
    call_strike = _financed_put(spot, params.protection, params, context)
    return [
        _template_leg(LegKind.PUT, params.protection, params.hedge_ratio, params),
        _template_leg(LegKind.CALL, call_strike, -params.hedge_ratio * 0.7, params),
        _template_leg(LegKind.PUT, params.protection - SEAGULL_PLUS_PUT_GAP, -params.hedge_ratio * 0.3, params),
    ]


def barrier_collar(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    if not params.use_barriers:
        return enhanced_collar(spot, params, context)

    call_strike = _financed_put(
        spot, params.protection, params, context, params.volatility * KNOCKOUT_VOL_ADJUSTMENT,
    )
    return [
        BarrierLeg(
            kind=LegKind.PUT_KNOCKOUT,
            strike=params.protection,
            barrier=params.barrier_level,
            quantity=params.hedge_ratio,
            volatility=params.volatility,
        ),
        _template_leg(LegKind.CALL, call_strike, -params.hedge_ratio, params),
    ]


def leveraged_collar(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    # equal scaling on both legs keeps the premiums balanced at the same strikes
    notional = params.hedge_ratio * params.leverage_ratio
    call_strike = _financed_put(spot, params.protection, params, context)
    return [
        _template_leg(LegKind.PUT, params.protection, notional, params),
        _template_leg(LegKind.CALL, call_strike, -notional, params),
    ]


def adaptive_seagull(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    """Seagull plus with protection scaled by 1.2 above 25% vol, 0.8 otherwise."""
    multiplier = 1.2 if params.volatility > HIGH_VOL_THRESHOLD else 0.8
    return seagull_plus(spot, replace(params, protection=params.protection * multiplier), context)


def risk_reversal_plus(spot, params=TemplateParams(), context=DEFAULT_CONTEXT):
    return enhanced_collar(spot, params, context)


ADVANCED_TEMPLATES: Dict[str, StrategyTemplate] = {
    "enhanced-collar": StrategyTemplate(
        "Enhanced Collar", enhanced_collar, "simple", ("neutral", "bearish")),
    "seagull-plus": StrategyTemplate(
        "Seagull Plus", seagull_plus, "intermediate", ("bearish", "volatile")),
    "barrier-collar": StrategyTemplate(
        "Barrier Collar", barrier_collar, "advanced", ("neutral", "bullish")),
    "leveraged-collar": StrategyTemplate(
        "Leveraged Collar", leveraged_collar, "advanced", ("volatile", "bearish")),
    "adaptive-seagull": StrategyTemplate(
        "Adaptive Seagull", adaptive_seagull, "advanced", ("volatile", "neutral")),
    "risk-reversal-plus": StrategyTemplate(
        "Enhanced Risk Reversal", risk_reversal_plus, "intermediate", ("bearish", "neutral")),
}


def templates_for_outlook(outlook: str) -> List[str]:
    """Template keys tagged with a market outlook, in registry order."""
    return [key for key, template in ADVANCED_TEMPLATES.items() if outlook in template.market_outlook]


def build_template(
    key: str,
    spot: float,
    params: TemplateParams = TemplateParams(),
    context: PricingContext = DEFAULT_CONTEXT,
) -> Tuple[str, List]:
    if key not in ADVANCED_TEMPLATES:
        raise InvalidParameterError(
            f"Unknown template {key!r}. Use one of: {', '.join(ADVANCED_TEMPLATES)}."
        )
    template = ADVANCED_TEMPLATES[key]
    return template.name, template.builder(spot, params, context)
