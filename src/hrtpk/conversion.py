# src/hrtpk/conversion.py
"""Raw compound mass <-> estradiol-equivalent mass."""
import math

from .errors import InvalidInputError, NotConvertibleError
from .params import E2_MOLAR_MASS, MOLAR_MASS
from .types import Compound


def is_convertible(compound: Compound) -> bool:
    return compound in MOLAR_MASS


def potency_factor(compound: Compound) -> float:
    """
    Mass of estradiol delivered per mg of compound (E2 molar mass / compound
    molar mass). 1.0 for estradiol itself, e.g. ~0.764 for the valerate.
    """
    molar_mass = MOLAR_MASS.get(compound)
    if molar_mass is None:
        raise NotConvertibleError(f"{compound.value} has no estradiol equivalent.",
                                  field="compound")
    return E2_MOLAR_MASS / molar_mass


def to_e2_equivalent(compound: Compound, raw_mg: float) -> float:
    _validate_mass("raw_mg", raw_mg)
    return float(raw_mg) * potency_factor(compound)


def from_e2_equivalent(compound: Compound, e2_mg: float) -> float:
    _validate_mass("e2_mg", e2_mg)
    return float(e2_mg) / potency_factor(compound)


def _validate_mass(name: str, x: float) -> None:
    if not (math.isfinite(x) and x >= 0):
        raise InvalidInputError(f"{name} must be a finite value >= 0 (got {x}).", field=name)
