# src/hrtpk/metrics.py
from typing import Optional

import numpy as np

from .errors import InvalidInputError
from .types import SimulationResult


def _require_samples(res: SimulationResult) -> None:
    if res.is_empty:
        raise InvalidInputError("metrics need at least one sample.", field="time_h")

def cmax(res: SimulationResult) -> float:
    """Global maximum concentration (pg/mL)."""
    _require_samples(res)
    return float(np.max(res.conc_pg_mL))

def tmax(res: SimulationResult) -> float:
    """Time of maximum concentration (h)."""
    _require_samples(res)
    return float(res.time_h[int(np.argmax(res.conc_pg_mL))])

def cmin(res: SimulationResult) -> float:
    """Global minimum concentration (pg/mL)."""
    _require_samples(res)
    return float(np.min(res.conc_pg_mL))

def auc_trapz(res: SimulationResult) -> float:
    """Area Under the Curve (AUC) via trapezoidal rule (pg*h/mL)."""
    _require_samples(res)
    return float(np.trapezoid(res.conc_pg_mL, res.time_h))

def cavg(res: SimulationResult) -> float:
    """Time-weighted average concentration over the sampled window."""
    _require_samples(res)
    span = float(res.time_h[-1] - res.time_h[0])
    if span == 0.0:
        return float(res.conc_pg_mL[0])
    return auc_trapz(res) / span

def level_at(res: SimulationResult, t_h: float) -> float:
    """
    Concentration at an arbitrary time (e.g. "now") by linear interpolation.
    Outside the sampled window there is nothing to report: 0.
    """
    _require_samples(res)
    return float(np.interp(t_h, res.time_h, res.conc_pg_mL, left=0.0, right=0.0))

def _window_indices_for_last_interval(t: np.ndarray, interval_h: float) -> np.ndarray:
    """
    Return a boolean mask for samples in the last full dosing interval,
    counted back from the end of the window.
    If no full interval fits, fall back to all samples.
    """
    if interval_h <= 0:
        return np.ones_like(t, dtype=bool)
    start = t[-1] - interval_h
    if start < t[0]:
        return np.ones_like(t, dtype=bool)
    return t >= start

def _window(res: SimulationResult, interval_h: Optional[float]) -> SimulationResult:
    _require_samples(res)
    if interval_h:
        mask = _window_indices_for_last_interval(res.time_h, float(interval_h))
        return SimulationResult(time_h=res.time_h[mask], conc_pg_mL=res.conc_pg_mL[mask])
    return res

def peak_to_trough_ratio(res: SimulationResult, interval_h: Optional[float] = None) -> float:
    """
    Highest over lowest sampled level. With interval_h, only the trailing
    interval_h hours of the result are used (the whole result when it is
    shorter). A zero trough gives inf.
    """
    w = _window(res, interval_h)
    cmin_val = cmin(w)
    if cmin_val <= 0:
        return float('inf')
    return cmax(w) / cmin_val

def fluctuation_index(res: SimulationResult, interval_h: Optional[float] = None) -> float:
    """
    (Cmax - Cmin) / Cavg over the same window as peak_to_trough_ratio.
    Cavg is the time-weighted average, so uneven sample spacing does not bias it.
    """
    w = _window(res, interval_h)
    cavg_val = cavg(w)
    if cavg_val == 0.0:
        return float('inf')
    return (cmax(w) - cmin(w)) / cavg_val
