# backtest.py
# ------------------------------------------------------------
# Synthetic backtest of a hedging strategy.
#
# - Spot follows a random walk: each period draws a return uniformly in
#   [-1%, +1%] and compounds it. Illustrative only, not calibrated.
# - Unhedged P&L accumulates period returns on the initial capital.
# - Hedged P&L is the strategy payoff at the current spot, recomputed
#   from the initial spot every period (legs never expire mid-path).
# - Drawdown tracks the running peak of hedged P&L; volatility is the
#   annualized stdev of spot log returns over a trailing window.
# Rows depend on every earlier row, so the loop is strictly sequential.
# ------------------------------------------------------------

import datetime as dt
from collections import deque
from dataclasses import asdict, dataclass
from math import floor, sqrt
from typing import Callable, List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd

from fxhedge.config import DEFAULT_CONTEXT, BacktestSettings, PricingContext
from fxhedge.errors import InvalidParameterError
from fxhedge.evaluator import strategy_payoff, usable_legs
from fxhedge.logger_utils import get_logger
from fxhedge.solver import resolve_dynamic_strikes

logger = get_logger(__name__)

PERIODICITY_STEPS = {
    "daily": "days",
    "weekly": "weeks",
    "monthly": "months",
}

LOOKBACK_OFFSETS = {
    "1M": pd.DateOffset(months=1),
    "3M": pd.DateOffset(months=3),
    "6M": pd.DateOffset(months=6),
    "1Y": pd.DateOffset(years=1),
    "3Y": pd.DateOffset(years=3),
}


@dataclass(frozen=True)
class BacktestRow:
    date: dt.date
    spot_rate: float
    unhedged_cumulative_pnl: float
    hedged_cumulative_pnl: float
    total_return_pct: float
    drawdown_pct: float
    rolling_volatility_pct: float


@dataclass(frozen=True)
class PerformanceMetrics:
    """All percentages except win_rate (fraction) and the ratios."""
    total_return: float = 0.0
    annualized_return: float = 0.0
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    var_95: float = 0.0
    calmar_ratio: float = 0.0

    def as_dict(self):
        return asdict(self)


class BacktestResult(NamedTuple):
    rows: List[BacktestRow]
    metrics: PerformanceMetrics


# ------------------------------
# Helpers
# ------------------------------

def period_dates(start_date, end_date, periodicity="daily") -> List[dt.date]:
    """Dates from start to end inclusive, stepping from the start each time."""
    if periodicity not in PERIODICITY_STEPS:
        raise InvalidParameterError(
            f"Unknown periodicity {periodicity!r}. Use one of: {', '.join(PERIODICITY_STEPS)}."
        )
    unit = PERIODICITY_STEPS[periodicity]
    start = pd.Timestamp(start_date)
    end = pd.Timestamp(end_date)

    dates = []
    step = 0
    current = start
    while current <= end:
        dates.append(current.date())
        step += 1
        current = start + pd.DateOffset(**{unit: step})
    return dates


def rolling_volatility(spots: Sequence[float], trading_days: int = 252) -> float:
    """
    Annualized stdev of log returns, in percent. 0 with fewer than two spots.

    `run_backtest` passes the trailing window including the row being
    built, not only the rows before it.
    """
    if len(spots) < 2:
        return 0.0
    log_returns = np.diff(np.log(np.asarray(spots, dtype=float)))
    return float(np.sqrt(np.var(log_returns) * trading_days) * 100.0)


# ------------------------------
# Engine
# ------------------------------

def run_backtest(
    legs: Sequence,
    spot: float,
    start_date,
    end_date,
    periodicity: str = "daily",
    initial_capital: float = 1_000_000.0,
    seed: Optional[int] = None,
    rng=None,
    context: PricingContext = DEFAULT_CONTEXT,
    settings: BacktestSettings = BacktestSettings(),
    progress: Optional[Callable[[float], None]] = None,
) -> BacktestResult:
    """
    Simulate a spot path and the strategy's hedged P&L along it.

    Parameters
    ----------
    legs : sequence of strategy legs
        Dynamic strikes are resolved once against `spot` before the path starts.
    spot : float
        Initial spot; percent levels are relative to it.
    start_date, end_date : date-like
        Inclusive range. An end before the start gives an empty result.
    periodicity : str
        "daily", "weekly" or "monthly".
    initial_capital : float
        Notional the P&L figures are scaled by.
    seed : int, optional
        Seed for `np.random.default_rng`; ignored when `rng` is given.
    rng : numpy Generator-like, optional
        Any object with `uniform(low, high)`.
    progress : callable, optional
        Receives the completed fraction in [0, 1].

    Returns
    -------
    BacktestResult
        (rows, metrics); metrics are all zero when there are no rows.
    """
    if spot <= 0:
        raise InvalidParameterError(f"Spot must be positive, got {spot}.")
    if initial_capital <= 0:
        raise InvalidParameterError(f"Initial capital must be positive, got {initial_capital}.")

    dates = period_dates(start_date, end_date, periodicity)
    if rng is None:
        rng = np.random.default_rng(seed)

    kept = usable_legs(resolve_dynamic_strikes(legs, spot, context))
    bound = settings.max_period_return
    logger.info("Backtest start: %d %s periods, %d legs", len(dates), periodicity, len(kept))

    rows = []
    window = deque(maxlen=settings.rolling_window)
    current_spot = spot
    cumulative_unhedged = 0.0
    peak = 0.0
    report_every = max(1, len(dates) // 10)

    for i, date in enumerate(dates):
        period_return = float(rng.uniform(-bound, bound))
        current_spot *= 1.0 + period_return
        window.append(current_spot)

        cumulative_unhedged += period_return * initial_capital
        hedged = strategy_payoff(kept, current_spot, spot) * initial_capital

        peak = max(peak, hedged)
        drawdown = (peak - hedged) / peak * 100.0 if peak > 0 else 0.0

        rows.append(BacktestRow(
            date=date,
            spot_rate=current_spot,
            unhedged_cumulative_pnl=cumulative_unhedged,
            hedged_cumulative_pnl=hedged,
            total_return_pct=hedged / initial_capital * 100.0,
            drawdown_pct=drawdown,
            rolling_volatility_pct=rolling_volatility(window, settings.trading_days),
        ))

        if progress is not None and (i + 1) % report_every == 0:
            progress((i + 1) / len(dates))

    if progress is not None:
        progress(1.0)

    metrics = compute_metrics(rows, settings)
    logger.info("Backtest done: total return %.4f%%, max drawdown %.4f%%",
                metrics.total_return, metrics.max_drawdown)
    return BacktestResult(rows, metrics)


def compute_metrics(rows: Sequence[BacktestRow], settings: BacktestSettings = BacktestSettings()) -> PerformanceMetrics:
    """Summary statistics over a full row sequence; all zero for no rows."""
    if not rows:
        return PerformanceMetrics()

    trading_days = settings.trading_days
    final_return = rows[-1].total_return_pct
    years = len(rows) / trading_days
    growth = 1.0 + final_return / 100.0
    # a loss of 100% or more has no real annualized rate
    annualized = growth ** (1.0 / years) - 1.0 if growth > 0 else -1.0

    returns = np.diff([row.total_return_pct for row in rows])
    if returns.size:
        volatility = float(np.std(returns) * sqrt(trading_days))
        win_rate = float(np.mean(returns > 0))
        gains = float(returns[returns > 0].sum())
        losses = float(-returns[returns < 0].sum())
        profit_factor = gains / losses if losses > 0 else 0.0
        ordered = np.sort(returns)
        var_95 = float(ordered[int(floor(ordered.size * settings.var_quantile))])
    else:
        volatility = win_rate = profit_factor = var_95 = 0.0

    sharpe = (annualized * 100.0 - settings.sharpe_risk_free_pct) / volatility if volatility > 0 else 0.0
    max_drawdown = max(row.drawdown_pct for row in rows)
    calmar = annualized * 100.0 / max_drawdown if max_drawdown > 0 else 0.0

    return PerformanceMetrics(
        total_return=final_return,
        annualized_return=annualized * 100.0,
        volatility=volatility,
        sharpe_ratio=sharpe,
        max_drawdown=max_drawdown,
        win_rate=win_rate,
        profit_factor=profit_factor,
        var_95=var_95,
        calmar_ratio=calmar,
    )


def filter_rows(rows: Sequence[BacktestRow], period: str = "ALL") -> List[BacktestRow]:
    """Rows within `period` ("1M", "3M", "6M", "1Y", "3Y" or "ALL") of the last date."""
    if not rows or period == "ALL":
        return list(rows)
    if period not in LOOKBACK_OFFSETS:
        raise InvalidParameterError(
            f"Unknown period {period!r}. Use ALL or one of: {', '.join(LOOKBACK_OFFSETS)}."
        )
    cutoff = (pd.Timestamp(rows[-1].date) - LOOKBACK_OFFSETS[period]).date()
    return [row for row in rows if row.date >= cutoff]


def rows_to_frame(rows: Sequence[BacktestRow]) -> pd.DataFrame:
    columns = list(BacktestRow.__dataclass_fields__)
    return pd.DataFrame([asdict(row) for row in rows], columns=columns)
