# src/hrtpk/solvers.py
"""
Numerical reference solver.

Integrates the depot/central ODE for each dose instead of using the closed
forms in models.closed_form. Much slower; used to check that the closed
forms and their edge cases (ka == ke, patch removal) are right.
"""
import logging
from typing import Optional, Sequence

import numpy as np
from scipy.integrate import solve_ivp

from .kinetics import validate_event, wear_time_h
from .models.one_compartment import one_compartment_first_order
from .params import DEFAULT_PARAMETERS, MG_PER_L_TO_PG_PER_ML, UG_PER_MG, ModelParameters
from .simulate import _validate_profile, validate_sample_times
from .types import Compound, DoseEvent, PatchMode, PatientProfile, Route, SimulationResult

logger = logging.getLogger(__name__)


def integrate_channel(t_rel: np.ndarray, depot0_mg: float, ka: float, ke: float,
                      infusion_mg_per_h: float = 0.0, duration_h: float = 0.0) -> np.ndarray:
    """
    Central-compartment amount (mg) at times t_rel (h since the dose, sorted, >= 0).

    depot0_mg is placed in the depot at t=0 (already multiplied by F);
    infusion_mg_per_h runs for duration_h hours. The integration is split at
    the end of the infusion so the solver never steps across the jump in the
    right-hand side.
    """
    out = np.zeros_like(t_rel, dtype=float)
    if t_rel.size == 0:
        return out
    t_end = float(t_rel[-1])

    boundaries = {0.0, t_end}
    if 0.0 < duration_h < t_end:
        boundaries.add(float(duration_h))
    boundaries = sorted(boundaries)

    y0 = [float(depot0_mg), 0.0]
    for start, stop in zip(boundaries[:-1], boundaries[1:]):
        rate = infusion_mg_per_h if start < duration_h else 0.0

        def rhs(t, y):
            return one_compartment_first_order(t, y, ka, ke, rate)

        sol = solve_ivp(rhs, t_span=(start, stop), y0=y0, method="RK45",
                        dense_output=True, rtol=1e-8, atol=1e-12)
        mask = (t_rel >= start) & (t_rel <= stop)
        if np.any(mask):
            out[mask] = sol.sol(t_rel[mask])[1]
        y0 = [float(v) for v in sol.sol(stop)]

    return np.maximum(out, 0.0)


def _channels(event: DoseEvent, params: ModelParameters) -> list[dict]:
    """Depot/infusion inputs that together make up one event's curve."""
    p = params
    if event.compound is Compound.CPA or event.route is Route.GEL:
        return []
    if event.route is Route.INJECTION:
        return [dict(depot0_mg=p.F_injection * event.dose_mg,
                     ka=p.injection_ka(event.compound), ke=p.ke_injection_per_h)]
    if event.route is Route.ORAL:
        return [dict(depot0_mg=p.F_oral * event.dose_mg, ka=p.ka_oral_per_h, ke=p.ke_oral_per_h)]
    if event.route is Route.SUBLINGUAL:
        theta = float(event.theta)
        return [
            dict(depot0_mg=theta * p.F_sublingual * event.dose_mg,
                 ka=p.ka_sublingual_per_h, ke=p.ke_oral_per_h),
            dict(depot0_mg=(1.0 - theta) * p.F_oral * event.dose_mg,
                 ka=p.ka_oral_per_h, ke=p.ke_oral_per_h),
        ]
    # patch
    wear_h = wear_time_h(event, p)
    if event.patch_mode is PatchMode.RATE:
        rate_mg_per_h = event.patch_rate_ug_per_day / UG_PER_MG / 24.0
    else:
        rate_mg_per_h = event.dose_mg / wear_h
    return [dict(depot0_mg=0.0, ka=0.0, ke=p.ke_patch_per_h,
                 infusion_mg_per_h=rate_mg_per_h, duration_h=wear_h)]


def integrate_event(event: DoseEvent, profile: PatientProfile, sample_times_h,
                    params: Optional[ModelParameters] = None) -> np.ndarray:
    """Concentration (pg/mL) from one event at each sample time."""
    p = params or DEFAULT_PARAMETERS
    validate_event(event, params=p)
    t = validate_sample_times(sample_times_h)
    V_L = _validate_profile(profile).volume_L(p)

    C = np.zeros_like(t)
    active = t >= event.timestamp_h
    t_rel = t[active] - event.timestamp_h
    for ch in _channels(event, p):
        C[active] += integrate_channel(t_rel, **ch) / V_L
    return C * MG_PER_L_TO_PG_PER_ML


def simulate_reference(events: Sequence[DoseEvent], profile: PatientProfile, sample_times_h,
                       params: Optional[ModelParameters] = None) -> SimulationResult:
    """
    Same contract as simulate.simulate, solved numerically (RK45) per event
    and summed.
    """
    p = params or DEFAULT_PARAMETERS
    _validate_profile(profile)
    t = validate_sample_times(sample_times_h)
    events = tuple(events)
    C = np.zeros_like(t)
    for idx, ev in enumerate(events):
        validate_event(ev, idx, p)
        C += integrate_event(ev, profile, t, p)
    logger.debug("reference solve of %d events over %d samples", len(events), t.size)
    return SimulationResult(time_h=t, conc_pg_mL=C)
