"""
pytest configuration

Shared legs and a deterministic random source for the engine tests.
"""

import pytest

from fxhedge.legs import Basis, ForwardLeg, LegKind, VanillaLeg

SPOT = 100.0


class FixedStepRng:
    """Stands in for a numpy Generator: every draw returns the same value."""

    def __init__(self, step=0.0):
        self.step = step
        self.calls = 0

    def uniform(self, low, high):
        self.calls += 1
        return self.step


@pytest.fixture
def spot():
    return SPOT


@pytest.fixture
def bought_call():
    return VanillaLeg(LegKind.CALL, 105.0, 100.0)


@pytest.fixture
def sold_call():
    return VanillaLeg(LegKind.CALL, 105.0, -100.0)


@pytest.fixture
def bought_put():
    return VanillaLeg(LegKind.PUT, 95.0, 100.0)


@pytest.fixture
def collar(bought_put, sold_call):
    """Long 95% put, short 105% call."""
    return [bought_put, sold_call]


@pytest.fixture
def full_forward():
    return ForwardLeg(strike=100.0, quantity=100.0, strike_basis=Basis.PERCENT)


@pytest.fixture
def flat_rng():
    return FixedStepRng(0.0)


@pytest.fixture
def rising_rng():
    return FixedStepRng(0.01)
