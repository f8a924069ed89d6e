# src/hrtpk/types.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

import math
import numpy as np

from .errors import InvalidInputError, NotConvertibleError

# We keep *all* time in HOURS internally. (Easy math, avoids unit drift.)


class Compound(Enum):
    """What was taken. Everything except CPA has an estradiol equivalent."""
    E2 = "E2"     # estradiol
    EV = "EV"     # estradiol valerate
    EB = "EB"     # estradiol benzoate
    EC = "EC"     # estradiol cypionate
    EEN = "EEn"   # estradiol enanthate
    EUN = "EUn"   # estradiol undecylate
    CPA = "CPA"   # cyproterone acetate (antiandrogen)


class Route(Enum):
    INJECTION = "injection"
    ORAL = "oral"
    SUBLINGUAL = "sublingual"
    PATCH = "patch"
    GEL = "gel"   # accepted but not modelled yet; contributes nothing


class PatchMode(Enum):
    DOSE = "dose"   # total mass released over the wear time
    RATE = "rate"   # nominal delivery rate in ug/day


@dataclass(frozen=True)
class DoseEvent:
    """
    A single administration.

    timestamp_h           : when the dose was taken (hours on the caller's axis,
                            usually hours since the Unix epoch)
    route, compound       : how and what
    dose_mg               : the one stored mass. Estradiol-equivalent mg for
                            every convertible compound, raw mg for CPA.
                            Patch doses in RATE mode leave it at 0.
    theta                 : sublingual only, fraction absorbed through the
                            mucosa (the rest is swallowed)
    patch_mode            : patch only, DOSE or RATE
    patch_rate_ug_per_day : patch RATE mode only
    wear_h                : patch only; None means the configured default
    """
    timestamp_h: float
    route: Route
    compound: Compound
    dose_mg: float = 0.0
    theta: Optional[float] = None
    patch_mode: Optional[PatchMode] = None
    patch_rate_ug_per_day: Optional[float] = None
    wear_h: Optional[float] = None

    @classmethod
    def from_raw(cls, timestamp_h: float, route: Route, compound: Compound,
                 raw_mg: float, **shape) -> "DoseEvent":
        """Build an event from the administered (raw) compound mass."""
        from .conversion import is_convertible, to_e2_equivalent
        if is_convertible(compound):
            return cls(timestamp_h, route, compound, to_e2_equivalent(compound, raw_mg), **shape)
        return cls(timestamp_h, route, compound, float(raw_mg), **shape)

    @classmethod
    def from_e2_equivalent(cls, timestamp_h: float, route: Route, compound: Compound,
                           e2_mg: float, **shape) -> "DoseEvent":
        """Build an event from an estradiol-equivalent mass."""
        from .conversion import potency_factor
        potency_factor(compound)  # raises for CPA
        return cls(timestamp_h, route, compound, float(e2_mg), **shape)

    @property
    def e2_equivalent_mg(self) -> float:
        from .conversion import is_convertible
        if not is_convertible(self.compound):
            raise NotConvertibleError(
                f"{self.compound.value} has no estradiol equivalent.",
                field="e2_equivalent_mg")
        return self.dose_mg

    @property
    def raw_mg(self) -> float:
        from .conversion import from_e2_equivalent, is_convertible
        if not is_convertible(self.compound):
            return self.dose_mg
        return from_e2_equivalent(self.compound, self.dose_mg)


@dataclass(frozen=True)
class PatientProfile:
    weight_kg: float

    def __post_init__(self):
        w = self.weight_kg
        if not (math.isfinite(w) and w > 0):
            raise InvalidInputError(f"weight_kg must be > 0 (got {w}).", field="weight_kg")

    def volume_L(self, params=None) -> float:
        """Apparent distribution volume, Vd_per_kg * weight."""
        from .params import DEFAULT_PARAMETERS
        p = params or DEFAULT_PARAMETERS
        return p.vd_L_per_kg * float(self.weight_kg)


@dataclass(frozen=True)
class SimulationResult:
    """
    Output of a simulation.

    time_h     : sample times (hours), strictly increasing
    conc_pg_mL : estradiol concentration at each sample (pg/mL), >= 0
    Both arrays are read-only; a new input means a new result.
    """
    time_h: np.ndarray = field(default_factory=lambda: np.zeros(0))
    conc_pg_mL: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        t = np.array(self.time_h, dtype=float)
        c = np.array(self.conc_pg_mL, dtype=float)
        if t.shape != c.shape or t.ndim != 1:
            raise InvalidInputError("time_h and conc_pg_mL must be 1-D and of equal length.",
                                    field="conc_pg_mL")
        t.setflags(write=False)
        c.setflags(write=False)
        object.__setattr__(self, "time_h", t)
        object.__setattr__(self, "conc_pg_mL", c)

    def __len__(self) -> int:
        return int(self.time_h.size)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        return zip(self.time_h.tolist(), self.conc_pg_mL.tolist())

    @property
    def is_empty(self) -> bool:
        return self.time_h.size == 0
