# src/hrtpk/sublingual.py
"""
Sublingual absorption split.

Holding a tablet under the tongue lets part of the dose cross the mucosa
(fast, no first pass); the rest is eventually swallowed and behaves like an
oral dose. theta is the mucosal fraction. Uptake is modelled as first order
during the hold:

    theta(h) = THETA_CAP * (1 - exp(-K_UPTAKE_PER_MIN * h)),  h in [1, 60] min

which is smooth, strictly increasing and has the closed-form inverse

    h(theta) = -ln(1 - theta / THETA_CAP) / K_UPTAKE_PER_MIN.

Both directions clamp out-of-range input so a half-typed value never errors;
the strict check happens in validate_theta when a dose is simulated.
"""
import math
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidInputError
from .params import HOLD_MAX_MIN, HOLD_MIN_MIN, K_UPTAKE_PER_MIN, THETA_CAP


def _theta(hold_min: float) -> float:
    return THETA_CAP * (1.0 - math.exp(-K_UPTAKE_PER_MIN * hold_min))


THETA_MIN = _theta(HOLD_MIN_MIN)
THETA_MAX = _theta(HOLD_MAX_MIN)


@dataclass(frozen=True)
class SublingualTier:
    key: str
    hold_min: float

    @property
    def theta(self) -> float:
        return theta_from_hold(self.hold_min)


# Display order matters: the form lists them as-is.
SL_TIERS: tuple[SublingualTier, ...] = (
    SublingualTier("quick", 2.0),
    SublingualTier("casual", 5.0),
    SublingualTier("standard", 10.0),
    SublingualTier("strict", 15.0),
)


def theta_from_hold(hold_min: float) -> float:
    """Mucosal fraction for a hold time in minutes (clamped to [1, 60])."""
    h = _clamp(_finite("hold_min", hold_min), HOLD_MIN_MIN, HOLD_MAX_MIN)
    return _theta(h)


def hold_from_theta(theta: float) -> float:
    """Hold time in minutes giving theta (clamped to [THETA_MIN, THETA_MAX])."""
    th = _clamp(_finite("theta", theta), THETA_MIN, THETA_MAX)
    h = -math.log(1.0 - th / THETA_CAP) / K_UPTAKE_PER_MIN
    # undo rounding at the domain edges
    return _clamp(h, HOLD_MIN_MIN, HOLD_MAX_MIN)


def tier(key: str) -> SublingualTier:
    for t in SL_TIERS:
        if t.key == key:
            return t
    raise InvalidInputError(
        f"Unknown sublingual tier '{key}' (expected one of {', '.join(t.key for t in SL_TIERS)}).",
        field="tier")


def theta_for_tier(key: str) -> float:
    return tier(key).theta


def resolve_theta(tier_key: Optional[str] = None, custom_hold_min: Optional[float] = None) -> float:
    """theta from either a named preset or a custom hold time, never both."""
    if (tier_key is None) == (custom_hold_min is None):
        raise InvalidInputError("Give exactly one of tier_key or custom_hold_min.", field="tier")
    if tier_key is not None:
        return theta_for_tier(tier_key)
    return theta_from_hold(custom_hold_min)


def validate_theta(theta: Optional[float], dose_index: Optional[int] = None) -> float:
    if theta is None or not (math.isfinite(theta) and 0.0 <= theta <= 1.0):
        raise InvalidInputError(f"theta must be within [0, 1] (got {theta}).",
                                field="theta", dose_index=dose_index)
    return float(theta)


def _finite(name: str, x: float) -> float:
    if not math.isfinite(x):
        raise InvalidInputError(f"{name} must be a finite number (got {x}).", field=name)
    return float(x)


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)
