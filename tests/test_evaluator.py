"""
Tests for fxhedge/evaluator.py - effective hedged rate, profiles and payoffs.

All levels are percent of a reference spot of 100, so a percent strike
and its absolute rate coincide.
"""

import pytest

from fxhedge.config import ProfileSettings
from fxhedge.evaluator import (
    _DIGITAL_CONDITIONS,
    _PAYOFFS,
    _SHIFTS,
    HedgePoint,
    PayoffPoint,
    hedged_rate,
    hedging_profile,
    leg_problem,
    payoff_profile,
    profile_to_frame,
    spot_grid,
    strategy_payoff,
    usable_legs,
)
from fxhedge.legs import (
    BARRIER_KINDS,
    DIGITAL_KINDS,
    VANILLA_KINDS,
    Basis,
    BarrierLeg,
    DigitalLeg,
    DynamicStrike,
    ForwardLeg,
    LegKind,
    SwapLeg,
    VanillaLeg,
)

SPOT = 100.0


# =============================================================================
# Vanilla, forward and swap legs
# =============================================================================

class TestLinearAndVanillaLegs:

    def test_no_legs_is_unhedged(self):
        for s in (80.0, 100.0, 125.0):
            assert hedged_rate([], s, SPOT) == s

    def test_bought_call_caps_the_rate(self, bought_call):
        assert hedged_rate([bought_call], 120.0, SPOT) == pytest.approx(105.0)
        assert hedged_rate([bought_call], 100.0, SPOT) == pytest.approx(100.0)

    def test_sold_call_mirrors_bought_call(self, sold_call):
        assert hedged_rate([sold_call], 120.0, SPOT) == pytest.approx(135.0)

    def test_bought_put_floors_the_rate(self, bought_put):
        assert hedged_rate([bought_put], 90.0, SPOT) == pytest.approx(95.0)
        assert hedged_rate([bought_put], 100.0, SPOT) == pytest.approx(100.0)

    def test_partial_quantity_scales_the_shift(self):
        half_put = VanillaLeg(LegKind.PUT, 95.0, 50.0)
        assert hedged_rate([half_put], 85.0, SPOT) == pytest.approx(90.0)

    def test_full_forward_locks_the_rate(self, full_forward):
        for s in (70.0, 95.0, 100.0, 130.0):
            assert hedged_rate([full_forward], s, SPOT) == pytest.approx(100.0)

    def test_half_forward_blends(self):
        leg = ForwardLeg(strike=100.0, quantity=50.0)
        assert hedged_rate([leg], 120.0, SPOT) == pytest.approx(110.0)

    def test_swap_locks_the_rate(self):
        leg = SwapLeg(strike=102.0, quantity=100.0)
        assert hedged_rate([leg], 87.0, SPOT) == pytest.approx(102.0)

    def test_absolute_strike(self):
        leg = VanillaLeg(LegKind.CALL, 1.15, 100.0, strike_basis=Basis.ABSOLUTE)
        assert hedged_rate([leg], 1.2, 1.1) == pytest.approx(1.15)

    def test_collar(self, collar):
        assert hedged_rate(collar, 90.0, SPOT) == pytest.approx(95.0)
        assert hedged_rate(collar, 100.0, SPOT) == pytest.approx(100.0)
        assert hedged_rate(collar, 110.0, SPOT) == pytest.approx(115.0)

    def test_leg_order_does_not_matter(self, collar, full_forward):
        legs = collar + [full_forward]
        for s in (80.0, 100.0, 120.0):
            assert hedged_rate(legs, s, SPOT) == pytest.approx(hedged_rate(legs[::-1], s, SPOT))


# =============================================================================
# Barrier legs
# =============================================================================

class TestBarrierLegs:

    def test_knockout_call_dies_past_barrier(self, bought_call):
        knockout = BarrierLeg(LegKind.CALL_KNOCKOUT, 105.0, 110.0, 100.0)
        assert hedged_rate([knockout], 115.0, SPOT) == pytest.approx(115.0)
        assert hedged_rate([bought_call], 115.0, SPOT) == pytest.approx(105.0)

    def test_knockout_call_alive_below_barrier(self):
        knockout = BarrierLeg(LegKind.CALL_KNOCKOUT, 105.0, 110.0, 100.0)
        assert hedged_rate([knockout], 108.0, SPOT) == pytest.approx(105.0)

    def test_knockout_put_dies_below_barrier(self):
        knockout = BarrierLeg(LegKind.PUT_KNOCKOUT, 95.0, 85.0, 100.0)
        assert hedged_rate([knockout], 90.0, SPOT) == pytest.approx(95.0)
        assert hedged_rate([knockout], 80.0, SPOT) == pytest.approx(80.0)

    def test_knockin_put_needs_breach(self):
        knockin = BarrierLeg(LegKind.PUT_KNOCKIN, 95.0, 90.0, 100.0)
        assert hedged_rate([knockin], 92.0, SPOT) == pytest.approx(92.0)
        assert hedged_rate([knockin], 85.0, SPOT) == pytest.approx(95.0)

    def test_knockin_call_needs_breach(self):
        knockin = BarrierLeg(LegKind.CALL_KNOCKIN, 105.0, 115.0, 100.0)
        assert hedged_rate([knockin], 110.0, SPOT) == pytest.approx(110.0)
        assert hedged_rate([knockin], 120.0, SPOT) == pytest.approx(105.0)


# =============================================================================
# Digital legs
# =============================================================================

class TestDigitalLegs:

    def test_one_touch_pays_at_barrier(self):
        leg = DigitalLeg(LegKind.ONE_TOUCH, barrier=110.0, quantity=100.0, rebate=5.0)
        assert hedged_rate([leg], 112.0, SPOT) == pytest.approx(117.0)
        assert hedged_rate([leg], 105.0, SPOT) == pytest.approx(105.0)

    def test_no_touch_pays_below_barrier(self):
        leg = DigitalLeg(LegKind.NO_TOUCH, barrier=110.0, quantity=100.0)
        assert hedged_rate([leg], 100.0, SPOT) == pytest.approx(105.0)
        assert hedged_rate([leg], 111.0, SPOT) == pytest.approx(111.0)

    def test_double_no_touch_is_not_a_no_touch(self):
        dnt = DigitalLeg(LegKind.DOUBLE_NO_TOUCH, barrier=110.0, second_barrier=90.0, quantity=100.0)
        nt = DigitalLeg(LegKind.NO_TOUCH, barrier=110.0, quantity=100.0)
        assert hedged_rate([dnt], 100.0, SPOT) == pytest.approx(105.0)
        assert hedged_rate([dnt], 85.0, SPOT) == pytest.approx(85.0)
        assert hedged_rate([nt], 85.0, SPOT) == pytest.approx(90.0)

    def test_double_touch_pays_outside(self):
        leg = DigitalLeg(LegKind.DOUBLE_TOUCH, barrier=110.0, second_barrier=90.0, quantity=100.0)
        assert hedged_rate([leg], 89.0, SPOT) == pytest.approx(94.0)
        assert hedged_rate([leg], 100.0, SPOT) == pytest.approx(100.0)

    def test_range_and_outside_binary(self):
        inside = DigitalLeg(LegKind.RANGE_BINARY, barrier=105.0, strike=95.0, quantity=100.0)
        outside = DigitalLeg(LegKind.OUTSIDE_BINARY, barrier=105.0, strike=95.0, quantity=100.0)
        assert hedged_rate([inside], 100.0, SPOT) == pytest.approx(105.0)
        assert hedged_rate([outside], 100.0, SPOT) == pytest.approx(100.0)
        assert hedged_rate([outside], 107.0, SPOT) == pytest.approx(112.0)

    def test_rebate_scales_with_quantity(self):
        leg = DigitalLeg(LegKind.ONE_TOUCH, barrier=110.0, quantity=-50.0, rebate=4.0)
        assert hedged_rate([leg], 110.0, SPOT) == pytest.approx(112.0)


# =============================================================================
# Premium and malformed legs
# =============================================================================

class TestPremiumAndValidation:

    def test_bought_leg_costs_premium(self, bought_call):
        assert hedged_rate([bought_call], 100.0, SPOT, include_premium=True) == pytest.approx(99.99)

    def test_sold_leg_earns_premium(self, sold_call):
        assert hedged_rate([sold_call], 100.0, SPOT, include_premium=True) == pytest.approx(100.01)

    def test_no_legs_no_premium(self):
        assert hedged_rate([], 100.0, SPOT, include_premium=True) == 100.0

    def test_malformed_legs_are_skipped(self, bought_put):
        broken = BarrierLeg(LegKind.PUT_KNOCKOUT, 95.0, None, 100.0)
        assert leg_problem(broken) is not None
        assert usable_legs([broken, bought_put, "not a leg"]) == [bought_put]
        assert hedged_rate([broken, bought_put], 90.0, SPOT) == pytest.approx(95.0)

    def test_digital_missing_second_barrier(self):
        leg = DigitalLeg(LegKind.DOUBLE_TOUCH, barrier=110.0, quantity=100.0)
        assert "second barrier" in leg_problem(leg)

    def test_unresolved_dynamic_strike_is_malformed(self, bought_put):
        pending = VanillaLeg(LegKind.CALL, 0.0, -100.0, dynamic_strike=DynamicStrike(0))
        assert leg_problem(pending) == "dynamic strike unresolved"
        assert usable_legs([bought_put, pending]) == [bought_put]
        assert hedged_rate([bought_put, pending], 100.0, SPOT) == pytest.approx(100.0)

    def test_non_finite_quantity(self):
        leg = VanillaLeg(LegKind.PUT, 95.0, float("nan"))
        assert leg_problem(leg) == "quantity is not a finite number"


# =============================================================================
# Profiles
# =============================================================================

class TestHedgingProfile:

    def test_grid_shape(self):
        grid = spot_grid(SPOT)
        assert len(grid) == 101
        assert grid[0] == pytest.approx(70.0)
        assert grid[-1] == pytest.approx(130.0)

    def test_profile_rows(self, collar):
        points = hedging_profile(collar, SPOT)
        assert len(points) == 101
        assert all(isinstance(p, HedgePoint) for p in points)
        assert all(p.spot == p.unhedged_rate for p in points)
        assert points[0].hedged_rate == pytest.approx(95.0)
        assert points[-1].hedged_rate == pytest.approx(155.0)

    def test_profile_is_rounded(self):
        points = hedging_profile([], 1.1)
        for p in points:
            assert p.spot == round(p.spot, 4)

    def test_explicit_grid_and_settings(self, bought_put):
        points = hedging_profile([bought_put], SPOT, spots=[90.0, 100.0])
        assert [p.hedged_rate for p in points] == [pytest.approx(95.0), pytest.approx(100.0)]
        coarse = hedging_profile([bought_put], SPOT, settings=ProfileSettings(span=0.1, points=4))
        assert [p.spot for p in coarse] == [pytest.approx(s) for s in (90.0, 95.0, 100.0, 105.0, 110.0)]

    def test_frame_columns(self, collar):
        frame = profile_to_frame(hedging_profile(collar, SPOT))
        assert list(frame.columns) == ["spot", "unhedged_rate", "hedged_rate"]
        assert len(frame) == 101

    def test_empty_frame(self):
        assert list(profile_to_frame([]).columns) == ["spot", "unhedged_rate", "hedged_rate"]


class TestStrategyPayoff:

    def test_bought_put_in_the_money(self, bought_put):
        assert strategy_payoff([bought_put], 90.0, SPOT) == pytest.approx(0.05)

    def test_sold_call_pays_out(self, sold_call):
        assert strategy_payoff([sold_call], 110.0, SPOT) == pytest.approx(-0.05)

    def test_forward_payoff(self):
        leg = ForwardLeg(strike=100.0, quantity=50.0)
        assert strategy_payoff([leg], 110.0, SPOT) == pytest.approx(-0.05)

    def test_digital_payoff(self):
        leg = DigitalLeg(LegKind.ONE_TOUCH, barrier=110.0, quantity=100.0, rebate=5.0)
        assert strategy_payoff([leg], 111.0, SPOT) == pytest.approx(0.05)
        assert strategy_payoff([leg], 100.0, SPOT) == 0.0

    def test_at_the_money_collar_is_flat(self, collar):
        assert strategy_payoff(collar, 100.0, SPOT) == 0.0

    def test_payoff_profile_range(self, bought_put):
        points = payoff_profile([bought_put], SPOT)
        assert len(points) == 101
        assert isinstance(points[0], PayoffPoint)
        assert points[0].price == pytest.approx(80.0)
        assert points[-1].price == pytest.approx(120.0)
        assert points[0].payoff == pytest.approx(0.15)
        assert points[-1].payoff == 0.0


def test_every_kind_has_a_handler():
    assert set(_DIGITAL_CONDITIONS) == DIGITAL_KINDS
    assert VANILLA_KINDS | BARRIER_KINDS | DIGITAL_KINDS | {LegKind.FORWARD, LegKind.SWAP} == set(LegKind)
    assert set(_SHIFTS) == set(_PAYOFFS) == {VanillaLeg, ForwardLeg, SwapLeg, BarrierLeg, DigitalLeg}
