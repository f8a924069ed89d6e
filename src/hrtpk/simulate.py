# src/hrtpk/simulate.py
import logging
import math
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

from .errors import InvalidInputError
from .kinetics import dose_response, validate_event
from .params import DEFAULT_PARAMETERS, MG_PER_L_TO_PG_PER_ML, ModelParameters
from .types import Compound, DoseEvent, PatientProfile, Route, SimulationResult

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def simulate(events: Sequence[DoseEvent], profile: PatientProfile, sample_times_h,
             params: Optional[ModelParameters] = None) -> SimulationResult:
    """
    Estradiol concentration over time for a dose history.

    Every event contributes its single-dose curve from its own timestamp on;
    the curves are linear and time invariant so the total is their sum.

    events         : DoseEvents in any order (may be empty)
    profile        : patient weight, scales the distribution volume
    sample_times_h : times to evaluate (h, same axis as the timestamps),
                     finite, >= 0 and strictly increasing
    params         : model constants (DEFAULT_PARAMETERS if None)

    Returns a SimulationResult in pg/mL. Raises InvalidInputError or
    UnsupportedConfigurationError (with dose_index) on bad input.
    """
    p = params or DEFAULT_PARAMETERS
    V_L = _validate_profile(profile).volume_L(p)
    t = validate_sample_times(sample_times_h)
    events = tuple(events)
    validate_events(events, p)

    C = np.zeros_like(t)
    for idx, ev in enumerate(events):
        if ev.route is Route.GEL:
            logger.warning("dose #%d: gel is not modelled yet, contributes nothing", idx)
            continue
        if ev.compound is Compound.CPA:
            logger.debug("dose #%d: %s adds no estradiol, skipped", idx, ev.compound.value)
            continue
        active = t >= ev.timestamp_h
        if not np.any(active):
            continue
        C[active] += dose_response(ev, t[active] - ev.timestamp_h, V_L, p, dose_index=idx)

    C = np.maximum(C, 0.0) * MG_PER_L_TO_PG_PER_ML
    logger.debug("simulated %d events over %d samples (V=%.1f L)", len(events), t.size, V_L)
    return SimulationResult(time_h=t, conc_pg_mL=C)


def validate_events(events: Sequence[DoseEvent], params: Optional[ModelParameters] = None) -> None:
    """Check every event; the first failure is raised with its dose_index."""
    p = params or DEFAULT_PARAMETERS
    for idx, ev in enumerate(events):
        validate_event(ev, idx, p)


def validate_sample_times(sample_times_h) -> np.ndarray:
    t = np.asarray(sample_times_h, dtype=float).ravel()
    if t.size == 0:
        return t
    if not np.all(np.isfinite(t)):
        raise InvalidInputError("sample times must be finite.", field="sample_times_h")
    if np.any(t < 0):
        raise InvalidInputError("sample times must be >= 0.", field="sample_times_h")
    if np.any(np.diff(t) <= 0):
        raise InvalidInputError("sample times must be strictly increasing.", field="sample_times_h")
    return t


def default_time_grid(events: Sequence[DoseEvent], now_h: float, step_h: float = 1.0,
                      pad_factor: Optional[float] = None, min_span_h: Optional[float] = None,
                      params: Optional[ModelParameters] = None) -> np.ndarray:
    """
    Display grid running from the earliest dose past "now".

    The history span (first dose -> now) is widened to at least min_span_h
    and then stretched to pad_factor times its width; the extra width is
    look-ahead after now. Defaults come from the model parameters
    (2x, one day). No events -> empty grid.
    """
    p = params or DEFAULT_PARAMETERS
    pad = p.display_pad_factor if pad_factor is None else float(pad_factor)
    min_span = p.display_min_span_h if min_span_h is None else float(min_span_h)
    if not (math.isfinite(now_h) and now_h >= 0):
        raise InvalidInputError(f"now_h must be a finite value >= 0 (got {now_h}).", field="now_h")
    if not (step_h > 0):
        raise InvalidInputError(f"step_h must be > 0 (got {step_h}).", field="step_h")
    if not (pad >= 1.0):
        raise InvalidInputError(f"pad_factor must be >= 1 (got {pad}).", field="pad_factor")
    if not (min_span > 0):
        raise InvalidInputError(f"min_span_h must be > 0 (got {min_span}).", field="min_span_h")
    if len(events) == 0:
        return np.zeros(0)

    start = max(min(float(e.timestamp_h) for e in events), 0.0)
    span = max(now_h - start, min_span)
    end = start + span * pad
    n = int(math.floor((end - start) / step_h + 1e-9))
    return start + np.arange(n + 1, dtype=float) * step_h


def simulate_default(events: Sequence[DoseEvent], profile: PatientProfile, now_h: float,
                     step_h: float = 1.0, params: Optional[ModelParameters] = None) -> SimulationResult:
    """simulate() over default_time_grid()."""
    grid = default_time_grid(events, now_h, step_h=step_h, params=params)
    return simulate(events, profile, grid, params=params)


def hours_since_epoch(dt: datetime) -> float:
    """Engine time axis for a datetime. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH).total_seconds() / 3600.0


def _validate_profile(profile: PatientProfile) -> PatientProfile:
    if not isinstance(profile, PatientProfile):
        raise InvalidInputError(f"expected a PatientProfile (got {type(profile).__name__}).",
                                field="weight_kg")
    return profile
