# src/hrtpk/kinetics.py
"""
Single-dose response per route.

Every curve takes (event, dt_h, V_L, params) and returns the estradiol
concentration in mg/L contributed by that one event, dt_h hours after it was
taken (0 before). Curves are linear in the dose and time invariant, which is
what lets the engine add them up.
"""
import dataclasses
import math
import numbers
from typing import Callable, Optional

import numpy as np

from .errors import InvalidInputError
from .fields import check_supported
from .models.closed_form import bateman, infusion
from .params import DEFAULT_PARAMETERS, UG_PER_MG, ModelParameters
from .sublingual import validate_theta
from .types import Compound, DoseEvent, PatchMode, Route

Curve = Callable[[DoseEvent, np.ndarray, float, ModelParameters], np.ndarray]


def injection_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    return bateman(dt_h, event.e2_equivalent_mg, params.F_injection,
                   params.injection_ka(event.compound), params.ke_injection_per_h, V_L)


def oral_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    return bateman(dt_h, event.e2_equivalent_mg, params.F_oral,
                   params.ka_oral_per_h, params.ke_oral_per_h, V_L)


def sublingual_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    """theta * mucosal curve + (1 - theta) * swallowed (oral) curve."""
    theta = validate_theta(event.theta)
    fast = bateman(dt_h, event.e2_equivalent_mg, params.F_sublingual,
                   params.ka_sublingual_per_h, params.ke_oral_per_h, V_L)
    return theta * fast + (1.0 - theta) * oral_curve(event, dt_h, V_L, params)


def patch_rate_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    rate_mg_per_h = event.patch_rate_ug_per_day / UG_PER_MG / 24.0
    return infusion(dt_h, rate_mg_per_h, wear_time_h(event, params), params.ke_patch_per_h, V_L)


def patch_dose_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    """Total dose spread evenly over the wear time, then treated as a rate-mode patch."""
    wear_h = wear_time_h(event, params)
    rate_ug_per_day = event.e2_equivalent_mg * UG_PER_MG / wear_h * 24.0
    as_rate = dataclasses.replace(event, dose_mg=0.0, patch_mode=PatchMode.RATE,
                                  patch_rate_ug_per_day=rate_ug_per_day, wear_h=wear_h)
    return patch_rate_curve(as_rate, dt_h, V_L, params)


def patch_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    if event.patch_mode is PatchMode.RATE:
        return patch_rate_curve(event, dt_h, V_L, params)
    return patch_dose_curve(event, dt_h, V_L, params)


def gel_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    # TODO: transdermal gel absorption once application-site data is modelled
    return np.zeros_like(np.asarray(dt_h, dtype=float))


def no_estradiol_curve(event: DoseEvent, dt_h, V_L: float, params: ModelParameters) -> np.ndarray:
    """Antiandrogens do not add estradiol."""
    return np.zeros_like(np.asarray(dt_h, dtype=float))


ROUTE_CURVES: dict[Route, Curve] = {
    Route.INJECTION: injection_curve,
    Route.ORAL: oral_curve,
    Route.SUBLINGUAL: sublingual_curve,
    Route.PATCH: patch_curve,
    Route.GEL: gel_curve,
}


def wear_time_h(event: DoseEvent, params: ModelParameters) -> float:
    return float(event.wear_h) if event.wear_h is not None else params.patch_wear_h


def dose_response(event: DoseEvent, dt_h, V_L: float,
                  params: Optional[ModelParameters] = None,
                  dose_index: Optional[int] = None) -> np.ndarray:
    """Concentration (mg/L) contributed by one event at dt_h hours after it."""
    p = params or DEFAULT_PARAMETERS
    validate_event(event, dose_index, p)
    if event.compound is Compound.CPA:
        return no_estradiol_curve(event, dt_h, V_L, p)
    return ROUTE_CURVES[event.route](event, dt_h, V_L, p)


# --------------------------
# Event validation
# --------------------------
def validate_event(event: DoseEvent, dose_index: Optional[int] = None,
                   params: Optional[ModelParameters] = None) -> None:
    p = params or DEFAULT_PARAMETERS
    if not isinstance(event, DoseEvent):
        raise InvalidInputError(f"expected a DoseEvent (got {type(event).__name__}).",
                                field="event", dose_index=dose_index)
    if not isinstance(event.route, Route):
        raise InvalidInputError(f"unknown route {event.route!r}.", field="route", dose_index=dose_index)
    if not isinstance(event.compound, Compound):
        raise InvalidInputError(f"unknown compound {event.compound!r}.",
                                field="compound", dose_index=dose_index)
    _validate_finite("timestamp_h", event.timestamp_h, dose_index)
    check_supported(event.route, event.compound, dose_index)
    _validate_non_negative("dose_mg", event.dose_mg, dose_index)

    if event.route is Route.INJECTION:
        p.injection_ka(event.compound)

    if event.route is Route.SUBLINGUAL:
        validate_theta(event.theta, dose_index)
    elif event.theta is not None:
        raise InvalidInputError("theta only applies to sublingual doses.",
                                field="theta", dose_index=dose_index)

    if event.route is Route.PATCH:
        _validate_patch(event, dose_index)
    elif (event.patch_mode, event.patch_rate_ug_per_day, event.wear_h) != (None, None, None):
        raise InvalidInputError("patch parameters only apply to patch doses.",
                                field="patch_mode", dose_index=dose_index)


def _validate_patch(event: DoseEvent, dose_index: Optional[int]) -> None:
    if not isinstance(event.patch_mode, PatchMode):
        raise InvalidInputError("patch doses need a patch_mode (dose or rate).",
                                field="patch_mode", dose_index=dose_index)
    if event.wear_h is not None:
        _validate_positive("wear_h", event.wear_h, dose_index)
    if event.patch_mode is PatchMode.RATE:
        if event.patch_rate_ug_per_day is None:
            raise InvalidInputError("rate-mode patches need patch_rate_ug_per_day.",
                                    field="patch_rate_ug_per_day", dose_index=dose_index)
        _validate_non_negative("patch_rate_ug_per_day", event.patch_rate_ug_per_day, dose_index)
        if event.dose_mg != 0:
            raise InvalidInputError("rate-mode patches carry a rate, not a dose.",
                                    field="dose_mg", dose_index=dose_index)
    elif event.patch_rate_ug_per_day is not None:
        raise InvalidInputError("dose-mode patches carry a dose, not a rate.",
                                field="patch_rate_ug_per_day", dose_index=dose_index)


def _validate_finite(name: str, x: float, dose_index: Optional[int]) -> None:
    if isinstance(x, bool) or not (isinstance(x, numbers.Real) and math.isfinite(float(x))):
        raise InvalidInputError(f"{name} must be a finite number (got {x}).",
                                field=name, dose_index=dose_index)


def _validate_non_negative(name: str, x: float, dose_index: Optional[int]) -> None:
    _validate_finite(name, x, dose_index)
    if x < 0:
        raise InvalidInputError(f"{name} must be >= 0 (got {x}).", field=name, dose_index=dose_index)


def _validate_positive(name: str, x: float, dose_index: Optional[int]) -> None:
    _validate_finite(name, x, dose_index)
    if not (x > 0):
        raise InvalidInputError(f"{name} must be > 0 (got {x}).", field=name, dose_index=dose_index)
