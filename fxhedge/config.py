# config.py
# ------------------------------------------------------------
# Settings for the hedging engine.
#
# Defaults mirror the simplified pricing context the zero-cost tools
# assume (5% rate, one year to expiry). Every value can be overridden
# through environment variables or a .env file in the working directory.
#
# Usage:
#     from fxhedge.config import PricingContext, load_settings
#
#     ctx = PricingContext(risk_free_rate=0.03)
#     settings = load_settings()
#     settings.backtest.rolling_window   # 30
# ------------------------------------------------------------

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv


@dataclass(frozen=True)
class PricingContext:
    """
    Market assumptions used when a premium has to be computed.

    Attributes:
        risk_free_rate: Continuously compounded rate, decimal (0.05 = 5%)
        time_to_expiry: Option life in years
    """
    risk_free_rate: float = 0.05
    time_to_expiry: float = 1.0


@dataclass(frozen=True)
class ProfileSettings:
    """Spot grid used for the hedging and payoff profiles."""
    span: float = 0.30
    points: int = 100
    payoff_range: Tuple[float, float] = (80.0, 120.0)
    decimals: int = 4


@dataclass(frozen=True)
class BacktestSettings:
    """
    Constants of the synthetic backtest.

    Attributes:
        trading_days: Periods per year used for annualisation
        rolling_window: Rows in the trailing volatility window
        max_period_return: Bound of the uniform per-period return draw
        sharpe_risk_free_pct: Risk-free rate subtracted in the Sharpe ratio (percent)
        var_quantile: Lower tail used for the historical VaR
    """
    trading_days: int = 252
    rolling_window: int = 30
    max_period_return: float = 0.01
    sharpe_risk_free_pct: float = 2.0
    var_quantile: float = 0.05


@dataclass(frozen=True)
class Settings:
    pricing: PricingContext = field(default_factory=PricingContext)
    profile: ProfileSettings = field(default_factory=ProfileSettings)
    backtest: BacktestSettings = field(default_factory=BacktestSettings)
    log_level: str = "INFO"


def _env_number(name: str, default, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be numeric, got {raw!r}.")


def load_settings(env_file: str = ".env") -> Settings:
    """
    Build Settings from defaults plus environment overrides.

    A missing .env file is fine; variables already set in the process
    environment take precedence over the file.
    """
    load_dotenv(env_file, override=False)

    pricing = PricingContext(
        risk_free_rate=_env_number("FXHEDGE_RISK_FREE_RATE", PricingContext.risk_free_rate),
        time_to_expiry=_env_number("FXHEDGE_TIME_TO_EXPIRY", PricingContext.time_to_expiry),
    )
    profile = ProfileSettings(
        span=_env_number("FXHEDGE_PROFILE_SPAN", ProfileSettings.span),
        points=_env_number("FXHEDGE_PROFILE_POINTS", ProfileSettings.points, int),
    )
    backtest = BacktestSettings(
        rolling_window=_env_number("FXHEDGE_ROLLING_WINDOW", BacktestSettings.rolling_window, int),
        sharpe_risk_free_pct=_env_number("FXHEDGE_SHARPE_RISK_FREE_PCT", BacktestSettings.sharpe_risk_free_pct),
    )
    return Settings(
        pricing=pricing,
        profile=profile,
        backtest=backtest,
        log_level=os.getenv("FXHEDGE_LOG_LEVEL", "INFO").upper(),
    )


DEFAULT_CONTEXT = PricingContext()
