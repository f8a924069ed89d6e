# src/hrtpk/models/closed_form.py
import math

import numpy as np


def bateman(dt_h, dose_mg: float, F: float, ka: float, ke: float, V_L: float) -> np.ndarray:
    """
    One-compartment model with first-order absorption and elimination,
    single dose given at dt_h = 0:

      C(t) = (Dose*F*ka) / (V*(ka - ke)) * (exp(-ke t) - exp(-ka t))

    When ka == ke the expression is 0/0; its limit is used instead:

      C(t) = (Dose*F*ka / V) * t * exp(-ka t)

    dt_h : time since the dose (h), scalar or array. Negative -> 0.
    Returns concentration in mg/L.
    """
    t = np.asarray(dt_h, dtype=float)
    tc = np.clip(t, 0.0, None)
    if math.isclose(ka, ke, rel_tol=1e-9):
        C = (dose_mg * F * ka / V_L) * tc * np.exp(-ka * tc)
    else:
        C = (dose_mg * F * ka / (V_L * (ka - ke))) * (np.exp(-ke * tc) - np.exp(-ka * tc))
    return np.where(t >= 0.0, np.maximum(C, 0.0), 0.0)


def infusion(dt_h, rate_mg_per_h: float, duration_h: float, ke: float, V_L: float) -> np.ndarray:
    """
    Zero-order input at rate_mg_per_h for duration_h, starting at dt_h = 0,
    with first-order elimination:

      during : C(t) = R/(ke*V) * (1 - exp(-ke t))
      after  : C(t) = C(T) * exp(-ke (t - T))

    Returns concentration in mg/L.
    """
    t = np.asarray(dt_h, dtype=float)
    css = rate_mg_per_h / (ke * V_L)
    rise = css * (1.0 - np.exp(-ke * np.clip(t, 0.0, duration_h)))
    decay = np.exp(-ke * np.clip(t - duration_h, 0.0, None))
    return np.where(t >= 0.0, np.maximum(rise * decay, 0.0), 0.0)
