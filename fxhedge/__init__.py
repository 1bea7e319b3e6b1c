# fxhedge
# ------------------------------------------------------------
# Pricing, zero-cost strike search, hedging profiles and synthetic
# backtests for multi-leg currency hedging strategies.
# ------------------------------------------------------------

from fxhedge.backtest import (
    BacktestResult,
    BacktestRow,
    PerformanceMetrics,
    compute_metrics,
    filter_rows,
    rows_to_frame,
    run_backtest,
)
from fxhedge.config import PricingContext, Settings, load_settings
from fxhedge.errors import InvalidLegError, InvalidParameterError
from fxhedge.evaluator import (
    HedgePoint,
    PayoffPoint,
    hedged_rate,
    hedging_profile,
    payoff_profile,
    profile_to_frame,
    strategy_payoff,
)
from fxhedge.legs import (
    Basis,
    BarrierLeg,
    DigitalLeg,
    DynamicStrike,
    ForwardLeg,
    LegKind,
    SwapLeg,
    VanillaLeg,
    leg_from_dict,
    leg_to_dict,
)
from fxhedge.metadata import StrategyMetadata, describe_strategy
from fxhedge.pricing import norm_cdf, option_price
from fxhedge.solver import (
    EquilibriumResult,
    find_equilibrium_strike,
    resolve_dynamic_strikes,
    solve_equilibrium,
)
from fxhedge.strategies import (
    ADVANCED_TEMPLATES,
    STRATEGY_BUILDERS,
    TemplateParams,
    ZeroCostParams,
    build_strategy,
    build_template,
    templates_for_outlook,
)

__version__ = "0.1.0"
