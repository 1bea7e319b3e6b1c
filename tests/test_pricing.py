"""
Tests for fxhedge/pricing.py - normal CDF, Black-Scholes premiums and greeks.
"""

from math import exp

import numpy as np
import pytest
from scipy.stats import norm

from fxhedge.pricing import (
    d1_d2,
    forward_rate,
    norm_cdf,
    option_greeks,
    option_price,
    pricing_inputs_valid,
)


# =============================================================================
# Normal CDF
# =============================================================================

class TestNormCdf:

    def test_centre_is_one_half(self):
        assert norm_cdf(0.0) == pytest.approx(0.5, abs=1e-7)

    @pytest.mark.parametrize("x", np.linspace(-5.0, 5.0, 41))
    def test_matches_scipy(self, x):
        assert norm_cdf(x) == pytest.approx(norm.cdf(x), abs=1e-6)

    def test_symmetry(self):
        for x in (0.1, 0.7, 1.96, 3.2):
            assert norm_cdf(x) + norm_cdf(-x) == pytest.approx(1.0, abs=1e-12)

    def test_tails(self):
        assert norm_cdf(-8.0) == pytest.approx(0.0, abs=1e-7)
        assert norm_cdf(8.0) == pytest.approx(1.0, abs=1e-7)


# =============================================================================
# Premiums
# =============================================================================

class TestOptionPrice:

    def test_reference_call(self):
        """S=K=100, r=5%, t=1, vol=20% is the textbook 10.45."""
        assert option_price("call", 100.0, 100.0, 0.05, 1.0, 0.20) == pytest.approx(10.4506, abs=1e-3)

    def test_reference_put(self):
        assert option_price("put", 100.0, 100.0, 0.05, 1.0, 0.20) == pytest.approx(5.5735, abs=1e-3)

    @pytest.mark.parametrize("strike", [80.0, 95.0, 100.0, 110.0, 130.0])
    def test_put_call_parity(self, strike):
        spot, r, t, sigma = 100.0, 0.05, 1.0, 0.20
        call = option_price("call", spot, strike, r, t, sigma)
        put = option_price("put", spot, strike, r, t, sigma)
        assert call - put == pytest.approx(spot - strike * exp(-r * t), abs=1e-9)

    def test_parity_at_zero_rate_atm(self):
        call = option_price("call", 1.1, 1.1, 0.0, 0.5, 0.10)
        put = option_price("put", 1.1, 1.1, 0.0, 0.5, 0.10)
        assert call == pytest.approx(put, abs=1e-12)

    def test_call_premium_falls_with_strike(self):
        prices = [option_price("call", 100.0, k, 0.05, 1.0, 0.2) for k in (90.0, 100.0, 110.0)]
        assert prices[0] > prices[1] > prices[2] > 0

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            option_price("straddle", 100.0, 100.0, 0.05, 1.0, 0.2)


class TestInputs:

    def test_valid(self):
        assert pricing_inputs_valid(100.0, 95.0, 1.0, 0.2)

    @pytest.mark.parametrize("args", [(0, 95, 1, 0.2), (100, 0, 1, 0.2), (100, 95, 0, 0.2), (100, 95, 1, 0)])
    def test_invalid(self, args):
        assert not pricing_inputs_valid(*args)

    def test_d2_is_d1_minus_vol_sqrt_t(self):
        d1, d2 = d1_d2(100.0, 105.0, 0.05, 0.25, 0.2)
        assert d1 - d2 == pytest.approx(0.2 * 0.5)


# =============================================================================
# Greeks
# =============================================================================

class TestGreeks:

    def test_call_greeks_signs(self):
        g = option_greeks("call", 100.0, 100.0, 0.05, 1.0, 0.2)
        assert 0.0 < g["delta"] < 1.0
        assert g["gamma"] > 0
        assert g["vega"] > 0
        assert g["theta"] < 0

    def test_put_delta_is_call_delta_minus_one(self):
        call = option_greeks("call", 100.0, 95.0, 0.05, 1.0, 0.2)
        put = option_greeks("put", 100.0, 95.0, 0.05, 1.0, 0.2)
        assert put["delta"] == pytest.approx(call["delta"] - 1.0)
        assert put["gamma"] == pytest.approx(call["gamma"])
        assert put["vega"] == pytest.approx(call["vega"])

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            option_greeks("digital", 100.0, 100.0, 0.05, 1.0, 0.2)


def test_forward_rate_equal_rates_is_spot():
    assert forward_rate(1.1, 1.0, 0.03, 0.03) == pytest.approx(1.1)


def test_forward_rate_premium_currency():
    assert forward_rate(1.0, 1.0, 0.05, 0.0) == pytest.approx(exp(0.05))
