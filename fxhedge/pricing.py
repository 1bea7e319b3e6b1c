# pricing.py
# ------------------------------------------------------------
# Closed-form European option pricing (Black–Scholes, no carry term)
# ------------------------------------------------------------
# Notes:
# - Rates are CONTINUOUSLY COMPOUNDED per year, in decimals
# - Time in years, volatility annualized in decimals (0.20 for 20%)
# - Inputs with sigma <= 0 or t <= 0 are the caller's responsibility;
#   use `pricing_inputs_valid` before calling
# ------------------------------------------------------------

from math import exp, log, sqrt

from scipy.stats import norm

# Abramowitz & Stegun 7.1.26
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911

CALL = "call"
PUT = "put"


def norm_cdf(x: float) -> float:
    """Standard normal CDF via a fixed-coefficient rational approximation."""
    sign = 1.0
    if x < 0:
        sign = -1.0
        x = -x
    # erf is evaluated at x / sqrt(2)
    z = x / sqrt(2.0)
    t = 1.0 / (1.0 + _P * z)
    y = 1.0 - (((((_A5 * t + _A4) * t) + _A3) * t + _A2) * t + _A1) * t * exp(-z * z)
    return 0.5 * (1.0 + sign * y)


def pricing_inputs_valid(spot, strike, time_to_expiry, volatility) -> bool:
    return spot > 0 and strike > 0 and time_to_expiry > 0 and volatility > 0


def d1_d2(spot, strike, r, t, sigma):
    sqrt_t = sqrt(t)
    d1 = (log(spot / strike) + (r + 0.5 * sigma * sigma) * t) / (sigma * sqrt_t)
    return d1, d1 - sigma * sqrt_t


def option_price(kind, spot, strike, r, t, sigma):
    """
    Black–Scholes premium of a European call or put.

    Parameters
    ----------
    kind : str
        "call" or "put".
    spot : float
        Current spot rate.
    strike : float
        Strike, same quote as spot.
    r : float
        Continuously-compounded risk-free rate.
    t : float
        Time to expiry in years, must be > 0.
    sigma : float
        Annualized volatility in decimals, must be > 0.

    Returns
    -------
    float
        Premium per unit of notional, in the quote currency.
    """
    d1, d2 = d1_d2(spot, strike, r, t, sigma)
    if kind == CALL:
        return spot * norm_cdf(d1) - strike * exp(-r * t) * norm_cdf(d2)
    if kind == PUT:
        return strike * exp(-r * t) * norm_cdf(-d2) - spot * norm_cdf(-d1)
    raise ValueError(f"Unknown option kind {kind!r}; expected 'call' or 'put'.")


def option_greeks(kind, spot, strike, r, t, sigma):
    """
    Sensitivities under the same model as `option_price`.

    Theta is per calendar day, vega per one volatility point.
    """
    d1, d2 = d1_d2(spot, strike, r, t, sigma)
    pdf_d1 = norm.pdf(d1)
    sqrt_t = sqrt(t)
    discount = exp(-r * t)

    gamma = pdf_d1 / (spot * sigma * sqrt_t)
    vega = spot * pdf_d1 * sqrt_t / 100.0
    decay = -(spot * pdf_d1 * sigma) / (2.0 * sqrt_t)

    if kind == CALL:
        delta = norm_cdf(d1)
        theta = (decay - r * strike * discount * norm_cdf(d2)) / 365.0
    elif kind == PUT:
        delta = norm_cdf(d1) - 1.0
        theta = (decay + r * strike * discount * norm_cdf(-d2)) / 365.0
    else:
        raise ValueError(f"Unknown option kind {kind!r}; expected 'call' or 'put'.")

    return {"delta": delta, "gamma": gamma, "theta": theta, "vega": vega}


def forward_rate(spot, t, r_d, r_f):
    """Covered Interest Parity (continuous compounding)."""
    return spot * exp((r_d - r_f) * t)
