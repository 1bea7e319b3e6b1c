# legs.py
# ------------------------------------------------------------
# Strategy legs: one frozen dataclass per payload shape.
#
#   VanillaLeg  -> call, put
#   ForwardLeg  -> forward
#   SwapLeg     -> swap
#   BarrierLeg  -> put-knockout, call-knockout, put-knockin, call-knockin
#   DigitalLeg  -> one-touch, no-touch, double-touch, double-no-touch,
#                  range-binary, outside-binary
#
# Quantity is a signed percent of notional: positive = bought,
# negative = sold. Levels are either a percent of the reference spot or
# an absolute rate, depending on their basis.
# ------------------------------------------------------------

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from fxhedge.errors import InvalidLegError


class LegKind(str, Enum):
    CALL = "call"
    PUT = "put"
    FORWARD = "forward"
    SWAP = "swap"
    PUT_KNOCKOUT = "put-knockout"
    CALL_KNOCKOUT = "call-knockout"
    PUT_KNOCKIN = "put-knockin"
    CALL_KNOCKIN = "call-knockin"
    ONE_TOUCH = "one-touch"
    NO_TOUCH = "no-touch"
    DOUBLE_TOUCH = "double-touch"
    DOUBLE_NO_TOUCH = "double-no-touch"
    RANGE_BINARY = "range-binary"
    OUTSIDE_BINARY = "outside-binary"


class Basis(str, Enum):
    PERCENT = "percent"
    ABSOLUTE = "absolute"


VANILLA_KINDS = frozenset({LegKind.CALL, LegKind.PUT})
KNOCKOUT_KINDS = frozenset({LegKind.PUT_KNOCKOUT, LegKind.CALL_KNOCKOUT})
KNOCKIN_KINDS = frozenset({LegKind.PUT_KNOCKIN, LegKind.CALL_KNOCKIN})
BARRIER_KINDS = KNOCKOUT_KINDS | KNOCKIN_KINDS
DIGITAL_KINDS = frozenset({
    LegKind.ONE_TOUCH,
    LegKind.NO_TOUCH,
    LegKind.DOUBLE_TOUCH,
    LegKind.DOUBLE_NO_TOUCH,
    LegKind.RANGE_BINARY,
    LegKind.OUTSIDE_BINARY,
})
# digitals whose lower bound is carried in the strike field
BOUNDED_BY_STRIKE = frozenset({LegKind.RANGE_BINARY, LegKind.OUTSIDE_BINARY})
TWO_BARRIER_KINDS = frozenset({LegKind.DOUBLE_TOUCH, LegKind.DOUBLE_NO_TOUCH})

DEFAULT_REBATE = 5.0
DEFAULT_VOLATILITY = 20.0


def resolve_level(value: float, basis: Basis, spot: float) -> float:
    """Turn a strike or barrier into an absolute rate."""
    if basis == Basis.PERCENT:
        return spot * value / 100.0
    return value


def as_percent(value: float, basis: Basis, spot: float) -> float:
    if basis == Basis.PERCENT:
        return value
    return value / spot * 100.0


@dataclass(frozen=True)
class DynamicStrike:
    """
    Marks a strike that is solved at evaluation time so that this leg's
    premium matches the leg at `balance_with_index`.
    """
    balance_with_index: int
    volatility_adjustment: float = 1.0
    method: str = "equilibrium"


@dataclass(frozen=True)
class VanillaLeg:
    kind: LegKind
    strike: float
    quantity: float
    volatility: float = DEFAULT_VOLATILITY
    strike_basis: Basis = Basis.PERCENT
    dynamic_strike: Optional[DynamicStrike] = None

    @property
    def option_kind(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ForwardLeg:
    strike: float
    quantity: float
    strike_basis: Basis = Basis.PERCENT
    volatility: float = 0.0

    @property
    def kind(self) -> LegKind:
        return LegKind.FORWARD


@dataclass(frozen=True)
class SwapLeg:
    strike: float
    quantity: float
    strike_basis: Basis = Basis.PERCENT
    volatility: float = 0.0

    @property
    def kind(self) -> LegKind:
        return LegKind.SWAP


@dataclass(frozen=True)
class BarrierLeg:
    kind: LegKind
    strike: float
    barrier: Optional[float]
    quantity: float
    volatility: float = DEFAULT_VOLATILITY
    strike_basis: Basis = Basis.PERCENT
    barrier_basis: Basis = Basis.PERCENT
    dynamic_strike: Optional[DynamicStrike] = None

    @property
    def option_kind(self) -> str:
        """Vanilla parent used for pricing and moneyness."""
        return "call" if self.kind in (LegKind.CALL_KNOCKOUT, LegKind.CALL_KNOCKIN) else "put"

    @property
    def is_knockout(self) -> bool:
        return self.kind in KNOCKOUT_KINDS


@dataclass(frozen=True)
class DigitalLeg:
    kind: LegKind
    barrier: Optional[float]
    quantity: float
    second_barrier: Optional[float] = None
    strike: Optional[float] = None
    rebate: float = DEFAULT_REBATE
    volatility: float = DEFAULT_VOLATILITY
    strike_basis: Basis = Basis.PERCENT
    barrier_basis: Basis = Basis.PERCENT


StrategyLeg = Union[VanillaLeg, ForwardLeg, SwapLeg, BarrierLeg, DigitalLeg]
OPTION_LEG_TYPES = (VanillaLeg, BarrierLeg)


def is_bought(leg) -> bool:
    return leg.quantity > 0


def with_strike(leg, strike_percent: float):
    """Copy of an option leg with a resolved percent strike and no marker."""
    return replace(leg, strike=strike_percent, strike_basis=Basis.PERCENT, dynamic_strike=None)


# ------------------------------
# Record conversion (camelCase records used by the UI/persistence layer)
# ------------------------------

def _basis(value, field_name):
    if value is None:
        return Basis.PERCENT
    try:
        return Basis(value)
    except ValueError:
        raise InvalidLegError(f"{field_name} must be 'percent' or 'absolute', got {value!r}.")


def _number(record, key, required=True, default=None):
    value = record.get(key)
    if value is None:
        if required:
            raise InvalidLegError(f"Leg of type {record.get('type')!r} requires '{key}'.")
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidLegError(f"'{key}' must be numeric, got {value!r}.")


def _dynamic_strike(raw):
    if not raw:
        return None
    if raw.get("method", "equilibrium") != "equilibrium":
        raise InvalidLegError(f"Unsupported dynamic strike method {raw.get('method')!r}.")
    index = raw.get("balanceWithIndex")
    if index is None:
        raise InvalidLegError("dynamicStrike requires 'balanceWithIndex'.")
    return DynamicStrike(
        balance_with_index=int(index),
        volatility_adjustment=float(raw.get("volatilityAdjustment") or 1.0),
    )


def leg_from_dict(record: dict) -> StrategyLeg:
    """Build a typed leg from a record such as {"type": "put", "strike": 95, ...}."""
    try:
        kind = LegKind(record.get("type"))
    except ValueError:
        raise InvalidLegError(f"Unknown leg type {record.get('type')!r}.")

    quantity = _number(record, "quantity")
    strike_basis = _basis(record.get("strikeType"), "strikeType")
    barrier_basis = _basis(record.get("barrierType"), "barrierType")
    volatility = _number(record, "volatility", required=False, default=DEFAULT_VOLATILITY)

    if kind in VANILLA_KINDS:
        return VanillaLeg(
            kind=kind,
            strike=_number(record, "strike"),
            quantity=quantity,
            volatility=volatility,
            strike_basis=strike_basis,
            dynamic_strike=_dynamic_strike(record.get("dynamicStrike")),
        )
    if kind == LegKind.FORWARD:
        return ForwardLeg(strike=_number(record, "strike"), quantity=quantity, strike_basis=strike_basis)
    if kind == LegKind.SWAP:
        return SwapLeg(strike=_number(record, "strike"), quantity=quantity, strike_basis=strike_basis)
    if kind in BARRIER_KINDS:
        return BarrierLeg(
            kind=kind,
            strike=_number(record, "strike"),
            barrier=_number(record, "barrier"),
            quantity=quantity,
            volatility=volatility,
            strike_basis=strike_basis,
            barrier_basis=barrier_basis,
            dynamic_strike=_dynamic_strike(record.get("dynamicStrike")),
        )

    return DigitalLeg(
        kind=kind,
        barrier=_number(record, "barrier"),
        quantity=quantity,
        second_barrier=_number(record, "secondBarrier", required=kind in TWO_BARRIER_KINDS),
        strike=_number(record, "strike", required=kind in BOUNDED_BY_STRIKE),
        rebate=_number(record, "rebate", required=False, default=DEFAULT_REBATE),
        volatility=volatility,
        strike_basis=strike_basis,
        barrier_basis=barrier_basis,
    )


def leg_to_dict(leg: StrategyLeg) -> dict:
    record = {
        "type": leg.kind.value,
        "quantity": leg.quantity,
        "volatility": leg.volatility,
    }
    strike = getattr(leg, "strike", None)
    if strike is not None:
        record["strike"] = strike
        record["strikeType"] = leg.strike_basis.value
    if isinstance(leg, (BarrierLeg, DigitalLeg)):
        record["barrier"] = leg.barrier
        record["barrierType"] = leg.barrier_basis.value
    if isinstance(leg, DigitalLeg):
        record["rebate"] = leg.rebate
        if leg.second_barrier is not None:
            record["secondBarrier"] = leg.second_barrier
    dyn = getattr(leg, "dynamic_strike", None)
    if dyn is not None:
        record["dynamicStrike"] = {
            "method": dyn.method,
            "balanceWithIndex": dyn.balance_with_index,
            "volatilityAdjustment": dyn.volatility_adjustment,
        }
    return record
