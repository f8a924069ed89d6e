# src/hrtpk/params.py
"""
Model constants.

Rates are apparent one-compartment values chosen so that single doses land
in the ranges reported in the literature (e.g. 10 mg valerate IM peaking at
roughly 600-900 pg/mL after about a day, 100 ug/day patches near 80 pg/mL at
steady state). They are not fitted to assay data.
"""
import math
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Mapping

from .errors import InvalidInputError, UnsupportedConfigurationError
from .types import Compound

LN2 = math.log(2.0)

# 1 mg/L = 1e9 pg / 1e3 mL
MG_PER_L_TO_PG_PER_ML = 1e6
UG_PER_MG = 1000.0

# Molar masses (g/mol). The estradiol equivalent of an ester is the mass
# fraction of estradiol in the molecule. CPA is deliberately absent.
E2_MOLAR_MASS = 272.38
MOLAR_MASS: Mapping[Compound, float] = MappingProxyType({
    Compound.E2: E2_MOLAR_MASS,
    Compound.EV: 356.50,
    Compound.EB: 376.49,
    Compound.EC: 396.57,
    Compound.EEN: 384.55,
    Compound.EUN: 440.70,
})

# Sublingual uptake: theta(h) = THETA_CAP * (1 - exp(-K_UPTAKE_PER_MIN * h))
HOLD_MIN_MIN = 1.0
HOLD_MAX_MIN = 60.0
THETA_CAP = 0.40
K_UPTAKE_PER_MIN = 0.04


def rate_from_half_life(t_half_h: float) -> float:
    """First-order rate constant (1/h) from a half-life (h)."""
    if not (t_half_h > 0):
        raise InvalidInputError(f"half-life must be > 0 (got {t_half_h}).", field="t_half_h")
    return LN2 / float(t_half_h)


def _default_injection_ka() -> Mapping[Compound, float]:
    # Depot release is the slow step (flip-flop kinetics); ka < ke except EB.
    return MappingProxyType({
        Compound.EV: 0.032,
        Compound.EB: 0.060,
        Compound.EC: 0.012,
        Compound.EEN: 0.016,
        Compound.EUN: 0.004,
    })


@dataclass(frozen=True)
class ModelParameters:
    """
    Tunable model constants.

    vd_L_per_kg         : apparent distribution volume per kg body weight
    ka_injection_per_h  : depot absorption rate per ester (1/h)
    ke_injection_per_h  : apparent elimination after depot injection (1/h)
    F_injection         : depot bioavailability
    ka_oral_per_h, ke_oral_per_h, F_oral : swallowed tablets (first-pass loss in F)
    ka_sublingual_per_h, F_sublingual    : mucosal (fast) fraction of a sublingual dose;
                                           elimination shares ke_oral_per_h
    ke_patch_per_h      : elimination during and after transdermal delivery
    patch_wear_h        : wear time used when a patch dose does not give one
    display_pad_factor, display_min_span_h : default time-grid window
    """
    vd_L_per_kg: float = 40.0

    ka_injection_per_h: Mapping[Compound, float] = field(
        default_factory=_default_injection_ka, hash=False)
    ke_injection_per_h: float = 0.048
    F_injection: float = 1.0

    ka_oral_per_h: float = rate_from_half_life(2.0)
    ke_oral_per_h: float = rate_from_half_life(16.0)
    F_oral: float = 0.15

    ka_sublingual_per_h: float = rate_from_half_life(0.25)
    F_sublingual: float = 0.35

    ke_patch_per_h: float = rate_from_half_life(36.0)
    patch_wear_h: float = 84.0  # twice-weekly patch

    display_pad_factor: float = 2.0
    display_min_span_h: float = 24.0

    def __post_init__(self):
        object.__setattr__(self, "ka_injection_per_h", MappingProxyType(dict(self.ka_injection_per_h)))
        for name in ("vd_L_per_kg", "ke_injection_per_h", "ka_oral_per_h", "ke_oral_per_h",
                     "ka_sublingual_per_h", "ke_patch_per_h", "patch_wear_h",
                     "display_min_span_h"):
            _validate_positive(name, getattr(self, name))
        for name in ("F_injection", "F_oral", "F_sublingual"):
            value = getattr(self, name)
            if not (0.0 < value <= 1.0):
                raise InvalidInputError(f"{name} must be in (0, 1] (got {value}).", field=name)
        if not (self.display_pad_factor >= 1.0):
            raise InvalidInputError(
                f"display_pad_factor must be >= 1 (got {self.display_pad_factor}).",
                field="display_pad_factor")
        for compound, ka in self.ka_injection_per_h.items():
            _validate_positive(f"ka_injection_per_h[{compound.value}]", ka)

    def with_overrides(self, **changes) -> "ModelParameters":
        """Copy with some constants replaced; unknown names are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise InvalidInputError(f"Unknown model parameter(s): {', '.join(unknown)}.",
                                    field=unknown[0])
        return replace(self, **changes)

    def injection_ka(self, compound: Compound) -> float:
        try:
            return float(self.ka_injection_per_h[compound])
        except KeyError:
            raise UnsupportedConfigurationError(
                f"No injection absorption rate for {compound.value}.",
                field="compound") from None


def _validate_positive(name: str, x: float) -> None:
    if not (x > 0):
        raise InvalidInputError(f"{name} must be > 0 (got {x}).", field=name)


DEFAULT_PARAMETERS = ModelParameters()
